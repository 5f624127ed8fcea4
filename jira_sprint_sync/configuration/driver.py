"""Synchronous driver for configuration reconciliation for the CLI entry point."""

import asyncio

from jira_sprint_sync.configuration import reconcile
from jira_sprint_sync.configuration.models import SyncConfig


def get_sync_config(
    debug: bool | None = None,
    jira_base_url: str | None = None,
    jira_user_email: str | None = None,
    jira_api_token: str | None = None,
    project_key: str | None = None,
    issue_summary: str | None = None,
    issue_description: str | None = None,
    board_id: int | None = None,
    sprint_name: str | None = None,
    target_sprint_states: str | None = None,
    retries: int | None = None,
    retry_initial_delay: float | None = None,
    timeout: float | None = None,
    description_format: str | None = None,
    issue_type: str | None = None,
    trailer_timezone: str | None = None,
    require_issue_content: bool = True,
) -> SyncConfig:
    """Synchronously get the reconciled sync configuration."""
    return asyncio.run(
        reconcile.reconcile_sync_configuration(
            cli_debug=debug,
            cli_jira_base_url=jira_base_url,
            cli_jira_user_email=jira_user_email,
            cli_jira_api_token=jira_api_token,
            cli_project_key=project_key,
            cli_issue_summary=issue_summary,
            cli_issue_description=issue_description,
            cli_board_id=board_id,
            cli_sprint_name=sprint_name,
            cli_target_sprint_states=target_sprint_states,
            cli_retries=retries,
            cli_retry_initial_delay=retry_initial_delay,
            cli_timeout=timeout,
            cli_description_format=description_format,
            cli_issue_type=issue_type,
            cli_trailer_timezone=trailer_timezone,
            require_issue_content=require_issue_content,
        )
    )
