"""In-memory Jira site and configuration helpers for integration tests.

``FakeJira`` answers the REST endpoints the adapter calls through
``httpx.MockTransport``.
"""

import itertools
import json
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from jira_sprint_sync.configuration.models import DescriptionFormat, JiraConnectionConfig, SyncConfig

SUMMARY_CLAUSE = re.compile(r'summary ~ "((?:[^"\\]|\\.)*)"')
PROJECT_CLAUSE = re.compile(r'project = "((?:[^"\\]|\\.)*)"')
KEY_CLAUSE = re.compile(r'key = "((?:[^"\\]|\\.)*)"')


def _unquote(value: str) -> str:
    return value.replace('\\"', '"').replace("\\\\", "\\")


def _unescape_text_search(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


@dataclass
class FakeIssue:
    key: str
    project_key: str
    summary: str
    description: Any
    status: str = "To Do"
    sprint_id: int | None = None


@dataclass
class FakeJira:
    """In-memory Jira holding boards, sprints and issues."""

    boards: list[dict[str, Any]] = field(default_factory=list)
    sprints: dict[int, list[dict[str, Any]]] = field(default_factory=dict)
    issues: list[FakeIssue] = field(default_factory=list)
    rate_limited_requests: int = 0
    requests: list[httpx.Request] = field(default_factory=list)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def add_board(self, board_id: int, project_key: str, board_type: str = "scrum") -> None:
        self.boards.append({"id": board_id, "name": f"{project_key} board", "type": board_type, "projectKey": project_key})
        self.sprints.setdefault(board_id, [])

    def add_sprint(self, board_id: int, sprint_id: int, name: str, state: str) -> None:
        self.sprints[board_id].append({"id": sprint_id, "name": name, "state": state})

    def issue(self, key: str) -> FakeIssue:
        return next(issue for issue in self.issues if issue.key == key)

    def writes(self) -> list[httpx.Request]:
        return [request for request in self.requests if request.method in ("POST", "PUT")]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.rate_limited_requests > 0:
            self.rate_limited_requests -= 1
            return httpx.Response(429, text="Rate limit exceeded")

        path = request.url.path.strip("/").split("/")
        params = request.url.params
        body = json.loads(request.content) if request.content else None

        match (request.method, path):
            case ("GET", ["rest", "agile", "1.0", "board"]):
                project_key = params["projectKeyOrId"]
                return httpx.Response(200, json={"values": [b for b in self.boards if b["projectKey"] == project_key]})
            case ("GET", ["rest", "agile", "1.0", "board", board_id]):
                board = next((b for b in self.boards if b["id"] == int(board_id)), None)
                if board is None:
                    return httpx.Response(404, json={"errorMessages": ["Board does not exist"]})
                return httpx.Response(200, json=board)
            case ("GET", ["rest", "agile", "1.0", "board", board_id, "sprint"]):
                states = params["state"].split(",")
                matching = [s for s in self.sprints.get(int(board_id), []) if s["state"] in states]
                start_at, max_results = int(params["startAt"]), int(params["maxResults"])
                page = matching[start_at : start_at + max_results]
                return httpx.Response(200, json={"isLast": start_at + max_results >= len(matching), "values": page})
            case ("GET", ["rest", "agile", "1.0", "sprint", sprint_id, "issue"]):
                key = _unquote(KEY_CLAUSE.search(params["jql"]).group(1))
                found = [{"key": i.key} for i in self.issues if i.key == key and i.sprint_id == int(sprint_id)]
                return httpx.Response(200, json={"issues": found})
            case ("POST", ["rest", "agile", "1.0", "sprint", sprint_id, "issue"]):
                for key in body["issues"]:
                    self.issue(key).sprint_id = int(sprint_id)
                return httpx.Response(204)
            case ("GET", ["rest", "api", _, "search"]):
                return httpx.Response(200, json={"issues": self._search(params["jql"])})
            case ("POST", ["rest", "api", _, "issue"]):
                fields = body["fields"]
                project_key = fields["project"]["key"]
                issue = FakeIssue(f"{project_key}-{next(self._ids)}", project_key, fields["summary"], fields["description"])
                self.issues.append(issue)
                return httpx.Response(201, json={"id": "1000", "key": issue.key, "self": f"https://example.atlassian.net/issue/{issue.key}"})
            case ("PUT", ["rest", "api", _, "issue", key]):
                self.issue(key).description = body["fields"]["description"]
                return httpx.Response(204)
        return httpx.Response(404, json={"errorMessages": [f"No fake route for {request.method} {request.url.path}"]})

    def _search(self, jql: str) -> list[dict[str, Any]]:
        project_key = _unquote(PROJECT_CLAUSE.search(jql).group(1))
        summary = _unescape_text_search(_unquote(SUMMARY_CLAUSE.search(jql).group(1))).lower()
        matching = [i for i in self.issues if i.project_key == project_key and summary in i.summary.lower() and i.status != "Done"]
        return [
            {"key": i.key, "fields": {"summary": i.summary, "description": i.description, "project": {"key": i.project_key}}}
            for i in reversed(matching)
        ]


def make_config(
    description: str,
    summary: str = "Deploy X",
    project_key: str = "OPS",
    description_format: DescriptionFormat = DescriptionFormat.PLAIN,
) -> SyncConfig:
    """Build the configuration of one run against the fake site."""
    return SyncConfig(
        connection=JiraConnectionConfig(
            base_url="https://example.atlassian.net",
            user_email="bot@example.com",
            api_token="secret-token",
            retries=2,
            description_format=description_format,
        ),
        project_key=project_key,
        issue_summary=summary,
        issue_description=description,
    )
