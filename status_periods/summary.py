"""Aggregate status period records into per-sprint averages"""

from collections import defaultdict
from typing import NamedTuple

from status_periods.config import STATUSES_TO_TRACK
from status_periods.jira.jira_processor import round_hours


SPRINT_NAME_HEADER = "Sprint Name"
TOTAL_HEADER = "AvgDuration"


class SummaryRow(NamedTuple):
    sprint_name: str
    averages: dict
    total: float


def _average(values: list) -> float:
    return sum(values) / len(values) if values else 0


def calculate_summary(records: list, tracked_statuses: list = None) -> tuple:
    """
    Average the time spent per status for every sprint in the record table

    Always recomputed from the whole table, so rerunning a sprint also
    refreshes the rows of every sprint recorded earlier. Records without a
    sprint name or status are skipped.

    Columns are the observed statuses that are tracked, sorted by name.
    The total adds up the averages of every observed status, tracked or
    not.

    Args:
        records: Every SprintRecord persisted so far
        tracked_statuses: Statuses shown as columns (defaults to config)

    Returns:
        Tuple of (columns, list of SummaryRow in first-seen sprint order)
    """
    if tracked_statuses is None:
        tracked_statuses = STATUSES_TO_TRACK

    by_sprint = {}
    all_statuses = set()

    for record in records:
        if not record.sprint_name or not record.status:
            continue

        if record.sprint_name not in by_sprint:
            by_sprint[record.sprint_name] = defaultdict(list)
        by_sprint[record.sprint_name][record.status].append(record.duration_hours)
        all_statuses.add(record.status)

    observed = sorted(all_statuses)
    columns = [status for status in observed if status in tracked_statuses]

    rows = []
    for sprint_name, durations in by_sprint.items():
        averages = {}
        total = 0

        for status in observed:
            avg = _average(durations.get(status, []))
            if status in tracked_statuses:
                averages[status] = round_hours(avg)
            total += avg

        rows.append(SummaryRow(sprint_name, averages, round_hours(total)))

    return columns, rows


def summary_table(columns: list, rows: list) -> list:
    """Render the summary as a header row followed by one row per sprint"""
    table = [[SPRINT_NAME_HEADER, *columns, TOTAL_HEADER]]
    for row in rows:
        table.append([row.sprint_name, *(row.averages[c] for c in columns), row.total])
    return table
