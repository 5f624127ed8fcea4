"""Contains results of application execution."""

from jira_sprint_sync.schemas.jira import Sprint
from jira_sprint_sync.synchronize.models import SyncDecision, SyncRequest


class IssueSynchronizationResult:
    """Contains results of the issue synchronization workflow."""

    def __init__(
        self,
        request: SyncRequest,
        decision: SyncDecision,
        issue_key: str,
        sprint: Sprint | None = None,
        warnings: list[str] | None = None,
    ) -> None:
        """Initialize the result with the request, the decision taken and the resulting issue key."""
        self.request = request
        self.decision = decision
        self.issue_key = issue_key
        self.sprint = sprint
        self.warnings = warnings or []
