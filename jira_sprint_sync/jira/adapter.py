"""Jira client adapter built on the retrying HTTP transport."""

from typing import Any, Self, Sequence

import httpx
import structlog

from jira_sprint_sync.configuration.models import DescriptionFormat, JiraConnectionConfig
from jira_sprint_sync.jira.jql import build_issue_key_jql
from jira_sprint_sync.jira.transport import JiraTransport, expect_structured
from jira_sprint_sync.schemas.jira import Board, IssueRef, Sprint
from jira_sprint_sync.utils.adf import description_to_text, text_to_adf

from .abc import JiraClientBase
from .client import get_jira_http_client

logger = structlog.get_logger(__name__)

AGILE_API_ROOT = "rest/agile/1.0"
SPRINT_PAGE_SIZE = 50
SEARCH_FIELDS = "summary,description,project"


class JiraAdapter(JiraClientBase):
    """Jira client adapter exposing only the endpoints the synchronization engine needs."""

    def __init__(self, transport: JiraTransport, description_format: DescriptionFormat = DescriptionFormat.PLAIN) -> None:
        """Initialize the adapter with an already-initialized transport."""
        self.transport = transport
        self.description_format = description_format
        self.platform_api_root = f"rest/api/{description_format.api_version}"

    @classmethod
    def create(cls, connection: JiraConnectionConfig, http_transport: httpx.AsyncBaseTransport | None = None) -> Self:
        """Create a new Jira adapter from connection settings.

        Args:
            connection: Base URL, credentials, retry and format settings.
            http_transport: Optional httpx transport replacing the network layer.

        Returns:
            Configured JiraAdapter instance
        """
        logger.info(
            "Creating client for Jira instance",
            jira_base_url=connection.base_url,
            description_format=connection.description_format.value,
            retries=connection.retries,
        )
        client = get_jira_http_client(
            base_url=connection.base_url,
            email=connection.user_email,
            api_token=connection.api_token,
            timeout=connection.timeout,
            transport=http_transport,
        )
        transport = JiraTransport(client, max_retries=connection.retries, initial_delay=connection.retry_initial_delay)
        return cls(transport, connection.description_format)

    async def __aenter__(self) -> Self:
        """Enter the async context."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close the transport on exit."""
        await self.transport.close()

    def _encode_description(self, description: str) -> str | dict[str, Any]:
        """Encode a plain-text description in the configured format."""
        if self.description_format is DescriptionFormat.ADF:
            return text_to_adf(description)
        return description

    # Boards
    async def list_boards(self, project_key: str) -> list[Board]:
        """List the agile boards of a project."""
        response = await self.transport.get(f"{AGILE_API_ROOT}/board", params={"projectKeyOrId": project_key})
        data = expect_structured(response, "List boards")
        return [Board.model_validate(board) for board in data.get("values", [])]

    async def get_board(self, board_id: int) -> Board:
        """Get a single agile board."""
        response = await self.transport.get(f"{AGILE_API_ROOT}/board/{board_id}")
        return Board.model_validate(expect_structured(response, "Get board"))

    # Sprints
    async def list_sprints(self, board_id: int, states: Sequence[str]) -> list[Sprint]:
        """List the sprints of a board in the given states, following pagination."""
        sprints: list[Sprint] = []
        start_at = 0
        while True:
            response = await self.transport.get(
                f"{AGILE_API_ROOT}/board/{board_id}/sprint",
                params={"state": ",".join(states), "startAt": start_at, "maxResults": SPRINT_PAGE_SIZE},
            )
            data = expect_structured(response, "List sprints")
            values = data.get("values", [])
            sprints.extend(Sprint.model_validate(sprint) for sprint in values)
            if data.get("isLast", True) or not values:
                break
            start_at += len(values)
        logger.debug("Fetched sprints for board", board_id=board_id, states=list(states), sprint_count=len(sprints))
        return sprints

    async def sprint_contains_issue(self, sprint_id: int, issue_key: str) -> bool:
        """Check whether an issue belongs to a sprint."""
        response = await self.transport.get(
            f"{AGILE_API_ROOT}/sprint/{sprint_id}/issue",
            params={"jql": build_issue_key_jql(issue_key), "fields": "key"},
        )
        data = expect_structured(response, "Probe sprint membership")
        return any(issue.get("key") == issue_key for issue in data.get("issues", []))

    async def move_issues_to_sprint(self, sprint_id: int, issue_keys: list[str]) -> None:
        """Move issues into a sprint."""
        await self.transport.post(f"{AGILE_API_ROOT}/sprint/{sprint_id}/issue", body={"issues": issue_keys})

    # Issues
    async def search_issues(self, jql: str) -> list[IssueRef]:
        """Search issues with JQL, returning them with their description as plain text."""
        response = await self.transport.get(f"{self.platform_api_root}/search", params={"jql": jql, "fields": SEARCH_FIELDS})
        data = expect_structured(response, "Search issues")
        issues: list[IssueRef] = []
        for issue in data.get("issues", []):
            fields = issue.get("fields") or {}
            issues.append(
                IssueRef(
                    key=issue["key"],
                    project_key=(fields.get("project") or {}).get("key", issue["key"].rsplit("-", 1)[0]),
                    summary=fields.get("summary") or "",
                    description=description_to_text(fields.get("description")),
                )
            )
        return issues

    async def create_issue(self, project_key: str, summary: str, description: str, issue_type: str = "Story") -> str:
        """Create an issue and return its key."""
        payload = {
            "fields": {
                "project": {"key": project_key},
                "summary": summary,
                "description": self._encode_description(description),
                "issuetype": {"name": issue_type},
            }
        }
        response = await self.transport.post(f"{self.platform_api_root}/issue", body=payload)
        data = expect_structured(response, "Create issue")
        return data["key"]

    async def update_issue_description(self, issue_key: str, description: str) -> None:
        """Overwrite the description of an issue."""
        payload = {"fields": {"description": self._encode_description(description)}}
        await self.transport.put(f"{self.platform_api_root}/issue/{issue_key}", body=payload)
