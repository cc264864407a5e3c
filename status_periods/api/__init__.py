"""API blueprints for the status period report"""

from status_periods.api.report import report_bp

__all__ = ['report_bp']
