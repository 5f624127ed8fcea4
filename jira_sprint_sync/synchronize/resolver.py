"""Resolves the board and sprints a synchronization run works against."""

from typing import Sequence

import structlog

from jira_sprint_sync.jira.abc import JiraClientBase
from jira_sprint_sync.jira.exceptions import NotFoundError
from jira_sprint_sync.schemas.jira import Board, BoardType, Sprint, SprintState

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

MEMBERSHIP_SPRINT_STATES = (SprintState.ACTIVE.value, SprintState.FUTURE.value)


def board_supports_sprints(board: Board) -> bool:
    """Kanban boards have no sprints; every other board type is assumed to."""
    return board.type != BoardType.KANBAN.value


async def resolve_board(jira: JiraClientBase, project_key: str) -> Board:
    """Return the first agile board of a project.

    When a project has several boards only the first one Jira lists is used.
    """
    boards = await jira.list_boards(project_key)
    if not boards:
        raise NotFoundError(f"No board found for project {project_key}")
    board = boards[0]
    if len(boards) > 1:
        logger.warning(
            "Project has several boards, using the first one",
            project_key=project_key,
            board_id=board.id,
            ignored_board_ids=[other.id for other in boards[1:]],
        )
    logger.info("Resolved board", project_key=project_key, board_id=board.id, board_type=board.type)
    return board


async def resolve_sprint(jira: JiraClientBase, board_id: int, name: str, states: Sequence[str]) -> Sprint:
    """Return the sprint of a board whose name is exactly ``name``."""
    sprints = await jira.list_sprints(board_id, states)
    for sprint in sprints:
        if sprint.name == name:
            logger.info("Resolved sprint", board_id=board_id, sprint_id=sprint.id, sprint_name=sprint.name, sprint_state=sprint.state)
            return sprint
    raise NotFoundError(f"'{name}' sprint not found on board {board_id} (states searched: {', '.join(states)})")


async def find_issue_sprint(jira: JiraClientBase, board_id: int, issue_key: str) -> Sprint | None:
    """Return the first active or future sprint of a board that contains the issue.

    Sprints are probed one at a time, in the order Jira lists them, and the
    scan stops at the first match.
    """
    sprints = await jira.list_sprints(board_id, MEMBERSHIP_SPRINT_STATES)
    for sprint in sprints:
        if await jira.sprint_contains_issue(sprint.id, issue_key):
            logger.info("Issue is in a sprint", issue_key=issue_key, sprint_id=sprint.id, sprint_name=sprint.name, sprint_state=sprint.state)
            return sprint
    logger.info("Issue is not in any active or future sprint", issue_key=issue_key, board_id=board_id, sprints_checked=len(sprints))
    return None
