"""Models shared by the synchronization modules."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class SyncDecision(str, Enum):
    """What a synchronization run does to the tracking issue."""

    CREATE = "create"
    UPDATE = "update"
    FORK = "fork"
    NOOP = "noop"


class SyncRequest(BaseModel):
    """The issue content and placement a caller wants Jira to reflect."""

    model_config = ConfigDict(frozen=True)

    summary: str
    description: str
    project_key: str
    target_sprint_name: str
    board_id: int | None = None


class ReconciliationResult(BaseModel):
    """The decision for one run and the description it would write.

    ``target_description`` holds the untrailed text to write; it is ``None``
    for NOOP decisions.
    """

    model_config = ConfigDict(frozen=True)

    action: SyncDecision
    target_description: str | None = None
    warning: str | None = None
