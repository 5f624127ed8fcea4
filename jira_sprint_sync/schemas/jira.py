"""Pydantic models for the Jira objects the synchronization engine reads."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class SprintState(str, Enum):
    """Lifecycle states Jira reports for a sprint."""

    ACTIVE = "active"
    FUTURE = "future"
    CLOSED = "closed"


class BoardType(str, Enum):
    """Board flavours known to Jira Software."""

    SCRUM = "scrum"
    KANBAN = "kanban"
    SIMPLE = "simple"


class Board(BaseModel):
    """Pydantic model for a Jira agile board."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    type: str = BoardType.SCRUM.value


class Sprint(BaseModel):
    """Pydantic model for a Jira sprint.

    ``state`` is kept as a plain string so that values outside
    ``SprintState`` survive parsing and can be reported.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    state: str


class IssueRef(BaseModel):
    """Pydantic model for an existing Jira issue as returned by search."""

    model_config = ConfigDict(frozen=True)

    key: str
    project_key: str
    summary: str = ""
    description: str = ""
