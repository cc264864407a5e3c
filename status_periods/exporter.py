"""Export per-status durations of sprint issues to the Excel report"""

import argparse
from pathlib import Path

from status_periods.config import (
    BOARD_ID,
    EXCLUDED_ISSUE_TYPE,
    REPORT_XLSX,
    SPRINT_IDS,
    STATUSES_TO_TRACK,
)
from status_periods.jira.jira_fetcher import JiraClient, SprintFetcher, create_client
from status_periods.jira.jira_processor import build_sprint_records
from status_periods.summary import calculate_summary, summary_table
from status_periods.workbook import ReportWorkbook


def resolve_sprints(client: JiraClient, board_id=None, sprint_ids: list = None) -> list:
    """
    Work out which sprints to export

    Args:
        client: JiraClient instance
        board_id: Board whose active sprint is used when no ids are given
        sprint_ids: Explicit sprint ids

    Returns:
        List of sprint dictionaries with id and name
    """
    if sprint_ids:
        return [client.get_sprint(sprint_id) for sprint_id in sprint_ids]

    if not board_id:
        raise ValueError("Board id not configured (use --board or JIRA_BOARD_ID)")

    return [client.get_active_sprint(board_id)]


def export_sprint(fetcher: SprintFetcher, sprint: dict, report_path: Path = REPORT_XLSX,
                  tracked_statuses: list = None, excluded_type: str = EXCLUDED_ISSUE_TYPE,
                  use_cache: bool = False) -> int:
    """
    Add one sprint's status periods to the report and refresh the summary

    Args:
        fetcher: SprintFetcher for the sprint
        sprint: Dictionary with sprint id and name
        report_path: Workbook to update
        tracked_statuses: Statuses shown as summary columns
        excluded_type: Issue type left out of the report
        use_cache: Whether to reuse cached issue data

    Returns:
        Number of records added
    """
    if tracked_statuses is None:
        tracked_statuses = STATUSES_TO_TRACK

    print(f"\nExporting sprint {sprint['name']} (ID: {sprint['id']})...")
    issues = fetcher.fetch_issues(use_cache=use_cache)
    records = build_sprint_records(sprint, issues, excluded_type)
    print(f"  {len(issues)} issues, {len(records)} status periods")

    report = ReportWorkbook(report_path)
    report.append_records(records)

    columns, rows = calculate_summary(report.read_records(), tracked_statuses)
    report.write_summary(summary_table(columns, rows))

    path = report.save()
    print(f"Updated {path} ({len(rows)} sprints in summary)")
    return len(records)


def export_sprints(sprint_ids: list = None, board_id=None, report_path: Path = REPORT_XLSX,
                   use_cache: bool = False) -> dict:
    """
    Export every requested sprint, one after the other

    Returns:
        Dictionary mapping sprint name to number of records added
    """
    client = create_client()
    exported = {}

    for sprint in resolve_sprints(client, board_id, sprint_ids):
        fetcher = SprintFetcher(client, sprint["id"])
        exported[sprint["name"]] = export_sprint(fetcher, sprint, report_path, use_cache=use_cache)

    return exported


def main():
    parser = argparse.ArgumentParser(description="Export JIRA time-in-status per sprint to Excel")
    parser.add_argument("--sprint", type=int, action="append",
                        help="Sprint id to export (repeatable, defaults to the active sprint)")
    parser.add_argument("--board", default=BOARD_ID, help="Board id used to find the active sprint")
    parser.add_argument("--output", "-o", help="Report workbook path")
    parser.add_argument("--use-cache", action="store_true", help="Reuse cached issue data")
    args = parser.parse_args()

    sprint_ids = args.sprint or SPRINT_IDS
    report_path = Path(args.output) if args.output else REPORT_XLSX

    exported = export_sprints(sprint_ids, args.board, report_path, use_cache=args.use_cache)
    print(f"\nExported {sum(exported.values())} status periods for {len(exported)} sprints")


if __name__ == "__main__":
    main()
