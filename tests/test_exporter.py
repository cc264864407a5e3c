"""Tests for exporting sprints to the report"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from status_periods import exporter
from status_periods.exporter import export_sprint, export_sprints, resolve_sprints
from status_periods.workbook import ReportWorkbook


def issue(key, status, histories=None, issue_type="Story"):
    return {
        "key": key,
        "summary": f"Summary of {key}",
        "issue_type": issue_type,
        "status": status,
        "created": "2024-01-01T00:00:00.000+0000",
        "histories": histories or []
    }


def closed_after_one_day(key, from_status="In Progress"):
    return issue(key, "Closed", [{
        "created": "2024-01-02T00:00:00.000+0000",
        "items": [{"field": "status", "from_string": from_status, "to_string": "Closed"}]
    }])


class TestResolveSprints(unittest.TestCase):
    """Test choosing which sprints to export"""

    def test_explicit_ids(self):
        client = Mock()
        client.get_sprint.side_effect = lambda i: {"id": str(i), "name": f"Sprint {i}"}

        sprints = resolve_sprints(client, board_id=3, sprint_ids=[7, 8])

        self.assertEqual([s["name"] for s in sprints], ["Sprint 7", "Sprint 8"])
        client.get_active_sprint.assert_not_called()

    def test_active_sprint(self):
        client = Mock()
        client.get_active_sprint.return_value = {"id": "9", "name": "Sprint 9"}

        self.assertEqual(resolve_sprints(client, board_id=3), [{"id": "9", "name": "Sprint 9"}])
        client.get_active_sprint.assert_called_once_with(3)

    def test_missing_board(self):
        with self.assertRaises(ValueError):
            resolve_sprints(Mock(), board_id=None, sprint_ids=[])


class TestExportSprint(unittest.TestCase):
    """Test the fetch, extract, append and summarize sequence"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "report.xlsx"

    def fetcher_for(self, issues):
        fetcher = Mock()
        fetcher.fetch_issues.return_value = issues
        return fetcher

    def test_export_writes_records_and_summary(self):
        fetcher = self.fetcher_for([
            closed_after_one_day("PROJ-1"),
            closed_after_one_day("PROJ-2", from_status="Blocked"),
            issue("PROJ-3", "To Do", issue_type="Problem"),
        ])

        added = export_sprint(fetcher, {"id": "1", "name": "Sprint 1"}, self.path,
                              tracked_statuses=["In Progress"], excluded_type="Problem")

        self.assertEqual(added, 2)
        report = ReportWorkbook(self.path)
        self.assertEqual([r.issue_key for r in report.read_records()], ["PROJ-1", "PROJ-2"])
        self.assertEqual(report.read_summary(), [
            ["Sprint Name", "In Progress", "AvgDuration"],
            ["Sprint 1", 24, 48],
        ])

    def test_summary_covers_earlier_sprints(self):
        """Test exporting a second sprint keeps and re-summarizes the first"""
        export_sprint(self.fetcher_for([closed_after_one_day("PROJ-1")]),
                      {"id": "1", "name": "Sprint 1"}, self.path, tracked_statuses=["In Progress"])
        export_sprint(self.fetcher_for([closed_after_one_day("PROJ-2", from_status="Testing")]),
                      {"id": "2", "name": "Sprint 2"}, self.path, tracked_statuses=["In Progress"])

        summary = ReportWorkbook(self.path).read_summary()

        self.assertEqual(summary, [
            ["Sprint Name", "In Progress", "AvgDuration"],
            ["Sprint 1", 24, 24],
            ["Sprint 2", 0, 24],
        ])

    def test_rerun_sprint_appends(self):
        """Test running the same sprint twice keeps both runs' records"""
        sprint = {"id": "1", "name": "Sprint 1"}
        for _ in range(2):
            export_sprint(self.fetcher_for([closed_after_one_day("PROJ-1")]),
                          sprint, self.path, tracked_statuses=["In Progress"])

        report = ReportWorkbook(self.path)
        self.assertEqual(len(report.read_records()), 2)
        self.assertEqual(report.read_summary()[1], ["Sprint 1", 24, 24])


class TestExportSprints(unittest.TestCase):
    """Test exporting several sprints"""

    @patch.object(exporter, "export_sprint", return_value=3)
    @patch.object(exporter, "create_client")
    def test_exports_each_sprint(self, mock_create_client, mock_export_sprint):
        client = mock_create_client.return_value
        client.get_sprint.side_effect = lambda i: {"id": str(i), "name": f"Sprint {i}"}

        exported = export_sprints([1, 2], report_path=Path("report.xlsx"))

        self.assertEqual(exported, {"Sprint 1": 3, "Sprint 2": 3})
        self.assertEqual(mock_export_sprint.call_count, 2)


if __name__ == "__main__":
    unittest.main()
