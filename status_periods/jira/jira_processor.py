"""Derive per-status time periods from JIRA issue changelogs"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

from status_periods.config import CLOSED_STATUS, EXCLUDED_ISSUE_TYPE


TIMESTAMP_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
]


class ChangeEvent(NamedTuple):
    from_status: str
    to_status: str
    timestamp: datetime


class StatusPeriod(NamedTuple):
    status: str
    start: datetime
    end: datetime

    @property
    def duration_hours(self) -> float:
        return round_hours((self.end - self.start).total_seconds() / 3600)


class SprintRecord(NamedTuple):
    """One row of the cumulative Data sheet"""
    sprint_id: str
    sprint_name: str
    issue_key: str
    issue_summary: str
    status: str
    start: str
    end: str
    duration_hours: float


def round_hours(value: float) -> float:
    """
    Round to 2 decimals, ties away from zero

    Works on the exact binary value of the float, so 0.125 becomes 0.13
    while 1.005 (stored as 1.00499...) stays 1.0.
    """
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class _ScanState(NamedTuple):
    status: str
    start: datetime
    periods: tuple


def parse_timestamp(value: str) -> datetime:
    """
    Parse a JIRA timestamp such as 2024-01-01T10:00:00.000+0000

    Naive timestamps are taken to be UTC.

    Raises:
        ValueError: if the value matches none of the known formats
    """
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    raise ValueError(f"Unrecognized timestamp: {value!r}")


def format_timestamp(value: datetime) -> str:
    """Format as UTC ISO-8601 with milliseconds, e.g. 2024-01-01T00:00:00.000Z"""
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def extract_status_changes(histories: list) -> list:
    """
    Collect status transitions from changelog histories, oldest first

    Items on any other field are ignored. The sort is stable and keyed on
    the timestamp only, so transitions sharing a timestamp keep their
    changelog order.
    """
    changes = []
    for history in histories:
        timestamp = parse_timestamp(history["created"])
        for item in history.get("items", []):
            if item.get("field") == "status":
                changes.append(ChangeEvent(
                    item.get("from_string"),
                    item.get("to_string"),
                    timestamp
                ))

    return sorted(changes, key=lambda c: c.timestamp)


def _advance(state: _ScanState, change: ChangeEvent, closed_status: str) -> _ScanState:
    periods = state.periods
    if state.status != closed_status:
        periods += (StatusPeriod(state.status, state.start, change.timestamp),)
    return _ScanState(change.to_status, change.timestamp, periods)


def calculate_status_periods(issue: dict, now: datetime = None,
                             closed_status: str = CLOSED_STATUS) -> list:
    """
    Split an issue's lifetime into the periods it spent in each status

    The issue starts in the status it left on its first transition (or its
    current status if it never moved) at its creation time. Each transition
    closes the running period and opens the next one; the last one stays
    open until ``now``. Time spent in the closed status is dropped, so a
    reopened issue has a gap between closing and reopening.

    Args:
        issue: Issue dictionary with created, status and histories
        now: End of the still-open period (defaults to the current time)
        closed_status: Terminal status whose periods are not reported

    Returns:
        List of StatusPeriod in chronological order
    """
    if now is None:
        now = datetime.now(timezone.utc)

    changes = extract_status_changes(issue.get("histories", []))
    initial_status = (changes[0].from_status if changes else None) or issue.get("status")

    state = _ScanState(initial_status, parse_timestamp(issue["created"]), ())
    for change in changes:
        state = _advance(state, change, closed_status)

    periods = list(state.periods)
    if state.status != closed_status:
        periods.append(StatusPeriod(state.status, state.start, now))

    return periods


def build_sprint_records(sprint: dict, issues: list,
                         excluded_type: str = EXCLUDED_ISSUE_TYPE,
                         closed_status: str = CLOSED_STATUS) -> list:
    """
    Flatten a sprint's issues into one record per (issue, status period)

    Args:
        sprint: Dictionary with sprint id and name
        issues: Simplified issues from SprintFetcher
        excluded_type: Issue type left out of the report

    Returns:
        List of SprintRecord
    """
    records = []

    for issue in issues:
        if issue.get("issue_type") == excluded_type:
            continue

        periods = calculate_status_periods(issue, datetime.now(timezone.utc), closed_status)
        for period in periods:
            records.append(SprintRecord(
                str(sprint["id"]),
                sprint["name"],
                issue.get("key"),
                issue.get("summary"),
                period.status,
                format_timestamp(period.start),
                format_timestamp(period.end),
                period.duration_hours
            ))

    return records
