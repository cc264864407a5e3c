"""Report API endpoints"""

from flask import Blueprint, current_app, jsonify, request

from status_periods.summary import calculate_summary
from status_periods.workbook import ReportWorkbook

report_bp = Blueprint('report', __name__, url_prefix='/api/report')


def load_report() -> ReportWorkbook:
    """Open the workbook configured on the app"""
    return ReportWorkbook(current_app.config["REPORT_XLSX"])


@report_bp.route("/records")
def get_records():
    """Get all persisted status period records, optionally for one sprint"""
    sprint_name = request.args.get("sprint")

    try:
        records = load_report().read_records()

        if sprint_name:
            records = [r for r in records if r.sprint_name == sprint_name]

        return jsonify([r._asdict() for r in records])
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@report_bp.route("/summary")
def get_summary():
    """Get average time per status for every recorded sprint"""
    try:
        records = load_report().read_records()
        columns, rows = calculate_summary(records, current_app.config["STATUSES_TO_TRACK"])

        return jsonify({
            "columns": columns,
            "rows": [
                {
                    "sprint_name": row.sprint_name,
                    "averages": row.averages,
                    "total": row.total
                }
                for row in rows
            ]
        })
    except Exception as e:
        return jsonify({"error": str(e)}), 500
