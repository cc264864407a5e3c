"""Flask web backend serving the status period report"""

from datetime import datetime, timezone
from pathlib import Path
from flask import Flask, jsonify

from status_periods.api import report_bp
from status_periods.config import REPORT_XLSX, STATUSES_TO_TRACK


def create_app(report_path=None, tracked_statuses: list = None) -> Flask:
    """Build the Flask app, optionally pointed at another workbook"""
    app = Flask(__name__)
    app.config["REPORT_XLSX"] = Path(report_path or REPORT_XLSX)
    app.config["STATUSES_TO_TRACK"] = STATUSES_TO_TRACK if tracked_statuses is None else tracked_statuses

    app.register_blueprint(report_bp)

    @app.route("/api/health")
    def health_check():
        """Health check endpoint"""
        return jsonify({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "report_exists": app.config["REPORT_XLSX"].exists()
        })

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True, port=5000)
