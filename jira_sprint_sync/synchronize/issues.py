"""Contains synchronization logic for the Jira tracking issue."""

from datetime import datetime, timezone
from typing import Awaitable, Callable, Sequence, TypeVar

import structlog

from jira_sprint_sync.jira.abc import JiraClientBase
from jira_sprint_sync.schemas.jira import Board, IssueRef, Sprint, SprintState
from jira_sprint_sync.synchronize.description import (
    DEFAULT_TRAILER_TIMEZONE,
    diff_new_lines,
    equal_modulo_trailer,
    strip_trailer,
    with_trailer,
)
from jira_sprint_sync.synchronize.exceptions import SynchronizationError
from jira_sprint_sync.synchronize.models import ReconciliationResult, SyncDecision, SyncRequest
from jira_sprint_sync.synchronize.resolver import board_supports_sprints, find_issue_sprint, resolve_board, resolve_sprint
from jira_sprint_sync.synchronize.results import IssueSynchronizationResult
from jira_sprint_sync.synchronize.search import search_existing_issues, select_existing_issue, select_related_issues

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


async def run_step(operation: str, awaitable: Awaitable[T]) -> T:
    """Await one workflow step, wrapping any failure with the name of the step."""
    try:
        return await awaitable
    except Exception as e:
        logger.error(operation, error_type=type(e).__name__, error=str(e))
        raise SynchronizationError(operation, e) from e


async def decide_issue_sync_action(
    request: SyncRequest,
    existing_issue: IssueRef | None = None,
    issue_sprint: Sprint | None = None,
    related_issues: Sequence[IssueRef] = (),
) -> ReconciliationResult:
    """Compare the requested description with the existing issue and decide what to do.

    Key is issue summary. An issue in an active sprint is never rewritten:
    content it lacks goes into a new issue instead. Lines carried by
    ``related_issues`` (other open issues with the same summary, such as an
    earlier fork and its origin) count as already tracked.
    """
    if existing_issue is None:
        logger.info("Issue not found in Jira", issue_summary=request.summary)
        return ReconciliationResult(action=SyncDecision.CREATE, target_description=request.description)

    sprint_state = issue_sprint.state if issue_sprint is not None else None
    carried = "\n".join(strip_trailer(issue.description) for issue in related_issues)

    if sprint_state == SprintState.ACTIVE.value:
        known = strip_trailer(existing_issue.description)
        if related_issues:
            known = f"{known}\n{carried}"
        new_content = diff_new_lines(known, strip_trailer(request.description))
        if new_content.strip():
            logger.info(
                "Issue is in an active sprint and new content was found, forking a new issue",
                issue_key=existing_issue.key,
                sprint_name=issue_sprint.name if issue_sprint else None,
                new_line_count=len(new_content.split("\n")),
            )
            return ReconciliationResult(action=SyncDecision.FORK, target_description=new_content)
        logger.info("Issue is in an active sprint and has no new content", issue_key=existing_issue.key)
        return ReconciliationResult(action=SyncDecision.NOOP)

    if sprint_state is None or sprint_state == SprintState.FUTURE.value:
        target_description = request.description
        if related_issues:
            target_description = diff_new_lines(carried, strip_trailer(request.description))
            if not target_description.strip():
                logger.info(
                    "All content is carried by related issues",
                    issue_key=existing_issue.key,
                    related_issue_keys=[issue.key for issue in related_issues],
                )
                return ReconciliationResult(action=SyncDecision.NOOP)
        if equal_modulo_trailer(existing_issue.description, target_description):
            logger.info("Issue is up to date", issue_key=existing_issue.key)
            return ReconciliationResult(action=SyncDecision.NOOP)
        logger.info(
            "Issue needs to be updated (description differs)",
            issue_key=existing_issue.key,
            sprint_state=sprint_state or "none",
        )
        return ReconciliationResult(action=SyncDecision.UPDATE, target_description=target_description)

    warning = f"Issue {existing_issue.key} is in sprint '{issue_sprint.name}' with unexpected state '{sprint_state}'; leaving it untouched"
    logger.warning("Unexpected sprint state", issue_key=existing_issue.key, sprint_state=sprint_state)
    return ReconciliationResult(action=SyncDecision.NOOP, warning=warning)


async def sync_issue(
    request: SyncRequest,
    jira: JiraClientBase,
    target_sprint_states: Sequence[SprintState] = (SprintState.FUTURE,),
    issue_type: str = "Story",
    trailer_timezone: str = DEFAULT_TRAILER_TIMEZONE,
    clock: Callable[[], datetime] = utc_now,
) -> IssueSynchronizationResult:
    """Bring Jira in line with the request: create, update, fork or leave the tracking issue.

    Remote calls are made one at a time. A failing step aborts the run with a
    ``SynchronizationError``; whatever was already written to Jira stays there.
    """
    existing_issues = await run_step(
        "Failed to search for existing issues",
        search_existing_issues(jira, request.project_key, request.summary),
    )
    existing_issue = select_existing_issue(existing_issues, request.summary)
    related_issues = select_related_issues(existing_issues, existing_issue, request.summary)
    if related_issues:
        logger.info(
            "Found other open issues with the same summary",
            issue_key=existing_issue.key if existing_issue else None,
            related_issue_keys=[issue.key for issue in related_issues],
        )

    board: Board
    if request.board_id is not None:
        board = await run_step("Failed to find board", jira.get_board(request.board_id))
    else:
        board = await run_step("Failed to find board", resolve_board(jira, request.project_key))

    target_sprint: Sprint | None = None
    issue_sprint: Sprint | None = None
    if board_supports_sprints(board):
        target_sprint = await run_step(
            "Failed to find sprint ID",
            resolve_sprint(jira, board.id, request.target_sprint_name, [state.value for state in target_sprint_states]),
        )
        if existing_issue is not None:
            issue_sprint = await run_step(
                "Failed to determine sprint membership",
                find_issue_sprint(jira, board.id, existing_issue.key),
            )
    else:
        logger.info("Board does not support sprints, skipping sprint assignment", board_id=board.id, board_type=board.type)

    reconciliation = await decide_issue_sync_action(request, existing_issue, issue_sprint, related_issues)
    warnings = [reconciliation.warning] if reconciliation.warning else []

    if reconciliation.action in (SyncDecision.CREATE, SyncDecision.FORK):
        description = with_trailer(reconciliation.target_description or "", clock(), trailer_timezone)
        issue_key = await run_step(
            "Failed to create Jira issue",
            jira.create_issue(request.project_key, request.summary, description, issue_type=issue_type),
        )
        logger.info(
            "Created Jira issue",
            issue_key=issue_key,
            decision=reconciliation.action.value,
            forked_from=existing_issue.key if existing_issue and reconciliation.action == SyncDecision.FORK else None,
        )
    elif reconciliation.action == SyncDecision.UPDATE:
        if existing_issue is None:
            raise ValueError("Jira issue not found")
        issue_key = existing_issue.key
        description = with_trailer(reconciliation.target_description or "", clock(), trailer_timezone)
        await run_step("Failed to update Jira issue", jira.update_issue_description(issue_key, description))
        logger.info("Updated Jira issue description", issue_key=issue_key)
    else:
        if existing_issue is None:
            raise ValueError("Jira issue not found")
        return IssueSynchronizationResult(request, reconciliation.action, existing_issue.key, issue_sprint, warnings)

    if target_sprint is not None:
        await run_step("Failed to assign issue to sprint", jira.move_issues_to_sprint(target_sprint.id, [issue_key]))
        logger.info("Assigned Jira issue to sprint", issue_key=issue_key, sprint_id=target_sprint.id, sprint_name=target_sprint.name)

    return IssueSynchronizationResult(request, reconciliation.action, issue_key, target_sprint, warnings)
