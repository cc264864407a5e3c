"""Persist status period records and the sprint summary to an Excel workbook"""

from pathlib import Path

from openpyxl import Workbook, load_workbook

from status_periods.config import DATA_SHEET_NAME, SUMMARY_SHEET_NAME
from status_periods.jira.jira_processor import SprintRecord


DATA_HEADERS = [
    "Sprint ID",
    "Sprint Name",
    "Issue Key",
    "Summary",
    "Status",
    "Start",
    "End",
    "Duration (h)",
]


def _is_blank(values) -> bool:
    return not any(cell not in (None, "") for cell in values)


def _write_rows(sheet, rows: list):
    """Write rows from the top of an empty sheet"""
    for row_idx, row in enumerate(rows, start=1):
        for col_idx, value in enumerate(row, start=1):
            cell = sheet.cell(row=row_idx, column=col_idx, value=value)
            # Text from JIRA is never a formula
            if isinstance(value, str) and value.startswith("="):
                cell.data_type = "s"


def _to_record(values: tuple):
    """Turn a Data sheet row into a SprintRecord, or None if its duration is not a number"""
    values = list(values[:len(DATA_HEADERS)])
    values += [None] * (len(DATA_HEADERS) - len(values))
    sprint_id, sprint_name, key, summary, status, start, end, duration = values

    try:
        duration = float(duration) if duration not in (None, "") else 0.0
    except (TypeError, ValueError):
        return None

    return SprintRecord(
        str(sprint_id) if sprint_id is not None else "",
        sprint_name or "",
        key,
        summary,
        status or "",
        start,
        end,
        duration
    )


class ReportWorkbook:
    """
    Workbook holding the cumulative Data sheet and the Summary sheet

    The Data sheet only ever grows: new records are added after the rows
    written by earlier runs. The Summary sheet is cleared and rewritten in
    place rather than deleted, so charts pointing at it keep working.
    """

    def __init__(self, path):
        self.path = Path(path)

        if self.path.exists():
            self.workbook = load_workbook(self.path)
        else:
            self.workbook = Workbook()
            # Remove default sheet
            self.workbook.remove(self.workbook.active)

    def _existing_rows(self) -> list:
        """All non-empty Data rows below the header"""
        if DATA_SHEET_NAME not in self.workbook.sheetnames:
            return []

        sheet = self.workbook[DATA_SHEET_NAME]
        return [
            row for row in sheet.iter_rows(min_row=2, values_only=True)
            if not _is_blank(row)
        ]

    def read_records(self) -> list:
        """
        Return every record persisted so far

        Rows whose duration is not a number are left out.
        """
        records = []
        for row in self._existing_rows():
            record = _to_record(row)
            if record is None:
                print(f"  Skipping Data row with invalid duration: {row!r}")
                continue
            records.append(record)
        return records

    def append_records(self, records: list):
        """Rewrite the Data sheet with the existing rows plus ``records``"""
        rows = self._existing_rows()

        if DATA_SHEET_NAME in self.workbook.sheetnames:
            sheet = self.workbook[DATA_SHEET_NAME]
            sheet.delete_rows(1, sheet.max_row)
        else:
            sheet = self.workbook.create_sheet(DATA_SHEET_NAME, 0)

        _write_rows(sheet, [DATA_HEADERS, *rows, *records])

    def write_summary(self, table: list):
        """Replace the Summary sheet contents with ``table``"""
        if SUMMARY_SHEET_NAME in self.workbook.sheetnames:
            sheet = self.workbook[SUMMARY_SHEET_NAME]
            sheet.delete_rows(1, sheet.max_row)
        else:
            sheet = self.workbook.create_sheet(SUMMARY_SHEET_NAME)

        _write_rows(sheet, table)

    def read_summary(self) -> list:
        """Return the Summary sheet as a list of rows"""
        if SUMMARY_SHEET_NAME not in self.workbook.sheetnames:
            return []

        sheet = self.workbook[SUMMARY_SHEET_NAME]
        return [
            list(row) for row in sheet.iter_rows(values_only=True)
            if not _is_blank(row)
        ]

    def save(self) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.workbook.save(self.path)
        return self.path
