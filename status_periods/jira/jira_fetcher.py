"""Fetch sprint issues with changelog from the JIRA agile REST API"""

import os
import json
import argparse
import requests

from status_periods.config import (
    BOARD_ID,
    JIRA_BASE_URL,
    SPRINTS_RAW_DIR,
)


class JiraClient:
    """JIRA REST API client with Basic Auth"""

    def __init__(self, base_url: str, email: str, api_token: str):
        """
        Initialize JIRA client

        Args:
            base_url: JIRA instance URL (e.g., https://your-domain.atlassian.net)
            email: JIRA account email
            api_token: JIRA API token
        """
        self.base_url = base_url.rstrip("/")
        self.auth = (email, api_token)
        self.headers = {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }

    def get(self, endpoint: str, params: dict = None) -> dict:
        """
        Make a GET request to JIRA API

        Args:
            endpoint: API endpoint (e.g., /rest/agile/1.0/sprint/42)
            params: Query parameters

        Returns:
            JSON response as dictionary
        """
        url = f"{self.base_url}{endpoint}"
        response = requests.get(
            url,
            auth=self.auth,
            headers=self.headers,
            params=params
        )
        response.raise_for_status()
        return response.json()

    def get_active_sprint(self, board_id) -> dict:
        """
        Find the currently active sprint of a board

        Returns:
            Dictionary with sprint id (as string) and name

        Raises:
            ValueError: if the board has no active sprint
        """
        result = self.get(f"/rest/agile/1.0/board/{board_id}/sprint", {"state": "active"})
        values = result.get("values", [])
        if not values:
            raise ValueError(f"No active sprint found for board {board_id}")

        sprint = values[0]
        print(f"Found active sprint: {sprint['name']} (ID: {sprint['id']})")
        return {"id": str(sprint["id"]), "name": sprint["name"]}

    def get_sprint(self, sprint_id) -> dict:
        """Fetch a single sprint by id"""
        sprint = self.get(f"/rest/agile/1.0/sprint/{sprint_id}")
        return {"id": str(sprint["id"]), "name": sprint["name"]}

    def get_board_sprints(self, board_id) -> list:
        """
        Fetch every sprint of a board

        Uses /rest/agile/1.0/board/{id}/sprint with pagination (50 per page)

        Returns:
            List of sprint dictionaries with id and name
        """
        sprints = []
        start_at = 0
        max_results = 50

        while True:
            params = {
                "startAt": start_at,
                "maxResults": max_results
            }

            result = self.get(f"/rest/agile/1.0/board/{board_id}/sprint", params)

            batch = result.get("values", [])
            for sprint in batch:
                sprints.append({
                    "id": sprint.get("id"),
                    "name": sprint.get("name")
                })

            if not batch or result.get("isLast", True):
                break
            if "total" in result and len(sprints) >= result["total"]:
                break

            start_at += max_results

        return sprints

    def get_sprint_issues(self, sprint_id, max_results: int = 100) -> list:
        """
        Fetch all raw issues of a sprint with changelog expanded

        Args:
            sprint_id: JIRA sprint id
            max_results: Page size

        Returns:
            List of raw issue dictionaries
        """
        issues = []
        start_at = 0

        while True:
            params = {
                "startAt": start_at,
                "maxResults": max_results,
                "expand": "changelog",
                "fields": "summary,status,created,issuetype"
            }

            result = self.get(f"/rest/agile/1.0/sprint/{sprint_id}/issue", params)

            batch = result.get("issues", [])
            if not batch:
                break

            issues.extend(batch)
            print(f"      Retrieved {len(batch)} issues (total so far: {len(issues)})")

            if len(issues) >= result.get("total", 0):
                break

            start_at += len(batch)

        return issues


class SprintFetcher:
    """Fetches the issues of one sprint, with a local JSON cache"""

    def __init__(self, client: JiraClient, sprint_id):
        """
        Initialize sprint fetcher

        Args:
            client: JiraClient instance
            sprint_id: JIRA sprint id to fetch issues from
        """
        self.client = client
        self.sprint_id = str(sprint_id)
        self.cache_dir = SPRINTS_RAW_DIR / self.sprint_id

    def fetch_issues(self, use_cache: bool = True) -> list:
        """
        Fetch all issues of the sprint in simplified form

        Args:
            use_cache: Whether to use cached data

        Returns:
            List of issue dictionaries with changelog histories
        """
        cache_file = self.cache_dir / "issues.json"

        if use_cache and cache_file.exists():
            print(f"  Loading sprint {self.sprint_id} issues from cache...")
            with open(cache_file) as f:
                return json.load(f)

        print(f"  Fetching sprint {self.sprint_id} issues from JIRA API...")
        issues = [transform_issue(issue) for issue in self.client.get_sprint_issues(self.sprint_id)]

        # Cache the simplified data
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        with open(cache_file, 'w') as f:
            json.dump(issues, f, indent=2)
        print(f"  Cached {len(issues)} issues to {cache_file}")

        return issues


def transform_issue(issue: dict) -> dict:
    """
    Transform raw JIRA issue to simplified format

    Every changelog item is kept; picking out status changes is left to
    the period calculation.

    Args:
        issue: Raw issue from JIRA API

    Returns:
        Simplified issue dictionary
    """
    fields = issue.get("fields", {})
    changelog = issue.get("changelog") or {}

    histories = []
    for history in changelog.get("histories", []):
        histories.append({
            "created": history.get("created"),
            "items": [
                {
                    "field": item.get("field"),
                    "from_string": item.get("fromString"),
                    "to_string": item.get("toString")
                }
                for item in history.get("items", [])
            ]
        })

    return {
        "key": issue.get("key"),
        "summary": fields.get("summary"),
        "issue_type": (fields.get("issuetype") or {}).get("name"),
        "status": (fields.get("status") or {}).get("name"),
        "created": fields.get("created"),
        "histories": histories
    }


def create_client() -> JiraClient:
    """
    Build a JIRA client from environment credentials

    Raises:
        ValueError: if credentials or the base URL are not configured
    """
    email = os.getenv("JIRA_EMAIL")
    api_token = os.getenv("JIRA_API_TOKEN")

    if not email or not api_token:
        raise ValueError("JIRA_EMAIL and JIRA_API_TOKEN environment variables must be set")

    if not JIRA_BASE_URL:
        raise ValueError("JIRA_BASE_URL not configured")

    return JiraClient(JIRA_BASE_URL, email, api_token)


def main():
    parser = argparse.ArgumentParser(description="List the sprints of a JIRA board")
    parser.add_argument("--board", default=BOARD_ID, help="Board id (defaults to JIRA_BOARD_ID)")
    args = parser.parse_args()

    if not args.board:
        raise ValueError("Board id not configured (use --board or JIRA_BOARD_ID)")

    client = create_client()
    sprints = client.get_board_sprints(args.board)

    print("Sprint IDs:")
    for sprint in sprints:
        print(f"  {sprint['id']}: {sprint['name']}")


if __name__ == "__main__":
    main()
