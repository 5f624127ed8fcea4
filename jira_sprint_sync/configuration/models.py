"""Models for configuration between CLI arguments and environment variables."""

from dataclasses import dataclass, field
from enum import Enum

from jira_sprint_sync.schemas.jira import SprintState


class DescriptionFormat(str, Enum):
    """How issue descriptions are sent to and read from Jira."""

    PLAIN = "plain"
    ADF = "adf"

    @property
    def api_version(self) -> str:
        """The Jira platform REST API version that carries this format."""
        return "3" if self is DescriptionFormat.ADF else "2"


@dataclass(frozen=True)
class JiraConnectionConfig:
    """Everything needed to reach and authenticate against a Jira site."""

    base_url: str
    user_email: str
    api_token: str
    retries: int = 3
    retry_initial_delay: float = 1.0
    timeout: float = 30.0
    description_format: DescriptionFormat = DescriptionFormat.PLAIN


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for a single issue synchronization run."""

    connection: JiraConnectionConfig
    project_key: str
    issue_summary: str
    issue_description: str
    sprint_name: str = "Needs refinement"
    board_id: int | None = None
    target_sprint_states: tuple[SprintState, ...] = field(default=(SprintState.FUTURE,))
    issue_type: str = "Story"
    trailer_timezone: str = "America/New_York"
    debug: bool = False
