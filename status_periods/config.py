"""Centralized configuration for the status period tracker"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _split_list(value: str) -> list:
    """Split a comma separated setting, dropping blanks"""
    return [item.strip() for item in value.split(",") if item.strip()]


# =============================================================================
# Base Paths
# =============================================================================

BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"
RAW_DIR = DATA_DIR / "raw"
EXPORTS_DIR = DATA_DIR / "exports"


# =============================================================================
# JIRA Configuration
# =============================================================================

# JIRA instance URL
JIRA_BASE_URL = os.getenv("JIRA_BASE_URL", "")

# Board used to look up the active sprint
BOARD_ID = os.getenv("JIRA_BOARD_ID", "")

# Sprints to export; empty means "the currently active sprint"
SPRINT_IDS = [int(s) for s in _split_list(os.getenv("JIRA_SPRINT_IDS", ""))]

# Cache paths
SPRINTS_RAW_DIR = RAW_DIR / "sprints"


# =============================================================================
# Status Report Configuration
# =============================================================================

# Statuses shown as their own column on the summary sheet
STATUSES_TO_TRACK = _split_list(os.getenv(
    "STATUSES_TO_TRACK",
    "To Do,In Progress,Code Review,Testing,Ready for Release"
))

# Issues of this type are left out of the report entirely
EXCLUDED_ISSUE_TYPE = os.getenv("EXCLUDED_ISSUE_TYPE", "Problem")

# Terminal status; time spent in it is not reported
CLOSED_STATUS = "Closed"

# Export paths
REPORT_XLSX = Path(os.getenv("REPORT_XLSX", EXPORTS_DIR / "jira-status-periods.xlsx"))
DATA_SHEET_NAME = "Data"
SUMMARY_SHEET_NAME = "Summary"
