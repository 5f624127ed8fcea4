"""Base ABC for Jira clients."""

from abc import ABC, abstractmethod
from typing import Sequence

from jira_sprint_sync.schemas.jira import Board, IssueRef, Sprint


class JiraClientBase(ABC):
    """Base ABC for Jira clients."""

    # Boards
    @abstractmethod
    async def list_boards(self, project_key: str) -> list[Board]:
        """List the agile boards of a project."""
        pass

    @abstractmethod
    async def get_board(self, board_id: int) -> Board:
        """Get a single agile board."""
        pass

    # Sprints
    @abstractmethod
    async def list_sprints(self, board_id: int, states: Sequence[str]) -> list[Sprint]:
        """List the sprints of a board in the given states."""
        pass

    @abstractmethod
    async def sprint_contains_issue(self, sprint_id: int, issue_key: str) -> bool:
        """Check whether an issue belongs to a sprint."""
        pass

    @abstractmethod
    async def move_issues_to_sprint(self, sprint_id: int, issue_keys: list[str]) -> None:
        """Move issues into a sprint."""
        pass

    # Issues
    @abstractmethod
    async def search_issues(self, jql: str) -> list[IssueRef]:
        """Search issues with JQL."""
        pass

    @abstractmethod
    async def create_issue(self, project_key: str, summary: str, description: str, issue_type: str = "Story") -> str:
        """Create an issue and return its key."""
        pass

    @abstractmethod
    async def update_issue_description(self, issue_key: str, description: str) -> None:
        """Overwrite the description of an issue."""
        pass
