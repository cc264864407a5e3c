"""JIRA sprint data fetching and status period extraction"""

from .jira_fetcher import JiraClient, SprintFetcher, create_client, transform_issue
from .jira_processor import (
    ChangeEvent,
    SprintRecord,
    StatusPeriod,
    build_sprint_records,
    calculate_status_periods,
    extract_status_changes,
)
