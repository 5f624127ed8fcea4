"""Orchestrates the synchronization of the Jira tracking issue."""

import time

import httpx
import structlog

from jira_sprint_sync.configuration.models import SyncConfig
from jira_sprint_sync.jira.adapter import JiraAdapter
from jira_sprint_sync.schemas.jira import Board, Sprint
from jira_sprint_sync.synchronize.issues import run_step, sync_issue
from jira_sprint_sync.synchronize.models import SyncRequest
from jira_sprint_sync.synchronize.resolver import board_supports_sprints, resolve_board, resolve_sprint
from jira_sprint_sync.synchronize.results import IssueSynchronizationResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def build_sync_request(config: SyncConfig) -> SyncRequest:
    """Build the immutable request for a run from its configuration."""
    return SyncRequest(
        summary=config.issue_summary,
        description=config.issue_description,
        project_key=config.project_key,
        target_sprint_name=config.sprint_name,
        board_id=config.board_id,
    )


async def run_sync_issue_workflow(config: SyncConfig, http_transport: httpx.AsyncBaseTransport | None = None) -> IssueSynchronizationResult:
    """Run the sync-issue workflow: reconcile one tracking issue with Jira and return the outcome."""
    request = build_sync_request(config)
    async with JiraAdapter.create(config.connection, http_transport=http_transport) as jira:
        start_time = time.time()
        logger.info("Synchronizing Jira issue", project_key=request.project_key, issue_summary=request.summary, start_time=start_time)
        result = await sync_issue(
            request,
            jira,
            target_sprint_states=config.target_sprint_states,
            issue_type=config.issue_type,
            trailer_timezone=config.trailer_timezone,
        )
        end_time = time.time()
        logger.info(
            "Synchronized Jira issue",
            issue_key=result.issue_key,
            decision=result.decision.value,
            sprint_name=result.sprint.name if result.sprint else None,
            warning_count=len(result.warnings),
            duration=round(end_time - start_time, 2),
        )
    return result


async def run_find_sprint_workflow(
    config: SyncConfig, http_transport: httpx.AsyncBaseTransport | None = None
) -> tuple[Board, Sprint | None]:
    """Resolve the board and target sprint a sync run would use, without touching any issue."""
    async with JiraAdapter.create(config.connection, http_transport=http_transport) as jira:
        if config.board_id is not None:
            board = await run_step("Failed to find board", jira.get_board(config.board_id))
        else:
            board = await run_step("Failed to find board", resolve_board(jira, config.project_key))
        if not board_supports_sprints(board):
            logger.info("Board does not support sprints", board_id=board.id, board_type=board.type)
            return board, None
        sprint = await run_step(
            "Failed to find sprint ID",
            resolve_sprint(jira, board.id, config.sprint_name, [state.value for state in config.target_sprint_states]),
        )
    return board, sprint
