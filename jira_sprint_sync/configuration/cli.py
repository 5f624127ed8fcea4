"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import os
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Option
from typing_extensions import Annotated

from jira_sprint_sync.configuration.driver import get_sync_config
from jira_sprint_sync.configuration.exceptions import InvalidConfigurationError, RequiredConfigurationElementError
from jira_sprint_sync.jira.exceptions import JiraError
from jira_sprint_sync.synchronize.driver import run_find_sprint_workflow, run_sync_issue_workflow
from jira_sprint_sync.synchronize.exceptions import SynchronizationError, format_cause_chain
from jira_sprint_sync.utils.log import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="Keep a Jira tracking issue in sync with a summary and description.")

HANDLED_ERRORS = (SynchronizationError, JiraError, RequiredConfigurationElementError, InvalidConfigurationError)

# Shared connection options
JiraBaseUrlOption = Annotated[str | None, Option(envvar="JIRA_BASE_URL", help="Jira site URL, e.g. https://example.atlassian.net.")]
JiraUserEmailOption = Annotated[str | None, Option(envvar="JIRA_USER_EMAIL", help="Account email used for basic authentication.")]
JiraApiTokenOption = Annotated[str | None, Option(envvar="JIRA_API_TOKEN", help="Jira API token.")]
ProjectKeyOption = Annotated[str | None, Option(envvar="JIRA_PROJECT_KEY", help="Key of the Jira project holding the issue.")]
BoardIdOption = Annotated[int | None, Option(envvar="JIRA_BOARD_ID", help="Agile board id; resolved from the project when omitted.")]
SprintNameOption = Annotated[str | None, Option(envvar="JIRA_SPRINT_NAME", help="Name of the sprint issues are assigned to.")]
TargetSprintStatesOption = Annotated[
    str | None, Option(envvar="JIRA_TARGET_SPRINT_STATES", help="Comma separated sprint states searched for the target sprint.")
]
RetriesOption = Annotated[int | None, Option(envvar="JIRA_RETRIES", help="Retries per request on rate limits and network errors.")]
DebugOption = Annotated[bool | None, Option("--debug/--no-debug", envvar="DEBUG", help="Enable debug logging.")]


def write_github_output(name: str, value: str) -> None:
    """Append ``name=value`` to the GitHub Actions output file when running inside a workflow."""
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return
    with Path(output_path).open("a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")


def report_failure(prefix: str, error: BaseException) -> None:
    """Print a failure and its cause chain to stderr."""
    typer.echo(f"{prefix}: {error}", err=True)
    for cause in format_cause_chain(error)[1:]:
        typer.echo(f"  caused by {cause}", err=True)


@typer_app.command(name="sync-issue")
def sync_issue_cli(
    jira_base_url: JiraBaseUrlOption = None,
    jira_user_email: JiraUserEmailOption = None,
    jira_api_token: JiraApiTokenOption = None,
    jira_project_key: ProjectKeyOption = None,
    issue_summary: Annotated[str | None, Option(envvar="ISSUE_SUMMARY", help="Summary of the tracking issue.")] = None,
    issue_description: Annotated[str | None, Option(envvar="ISSUE_DESCRIPTION", help="Description of the tracking issue.")] = None,
    jira_board_id: BoardIdOption = None,
    jira_sprint_name: SprintNameOption = None,
    jira_target_sprint_states: TargetSprintStatesOption = None,
    jira_retries: RetriesOption = None,
    jira_retry_initial_delay: Annotated[
        float | None, Option(envvar="JIRA_RETRY_INITIAL_DELAY", help="Seconds to wait before the first retry; doubles every retry.")
    ] = None,
    jira_timeout: Annotated[float | None, Option(envvar="JIRA_TIMEOUT", help="HTTP timeout in seconds.")] = None,
    jira_description_format: Annotated[
        str | None, Option(envvar="JIRA_DESCRIPTION_FORMAT", help="'plain' (REST API v2) or 'adf' (REST API v3).")
    ] = None,
    jira_issue_type: Annotated[str | None, Option(envvar="JIRA_ISSUE_TYPE", help="Issue type of created issues.")] = None,
    trailer_timezone: Annotated[str | None, Option(envvar="TRAILER_TIMEZONE", help="Time zone of the 'Last updated' trailer.")] = None,
    debug: DebugOption = None,
) -> None:
    """Create, update or fork the Jira issue matching the summary and print its key."""
    configure_logging(bool(debug))
    try:
        config = get_sync_config(
            debug=debug,
            jira_base_url=jira_base_url,
            jira_user_email=jira_user_email,
            jira_api_token=jira_api_token,
            project_key=jira_project_key,
            issue_summary=issue_summary,
            issue_description=issue_description,
            board_id=jira_board_id,
            sprint_name=jira_sprint_name,
            target_sprint_states=jira_target_sprint_states,
            retries=jira_retries,
            retry_initial_delay=jira_retry_initial_delay,
            timeout=jira_timeout,
            description_format=jira_description_format,
            issue_type=jira_issue_type,
            trailer_timezone=trailer_timezone,
        )
    except (RequiredConfigurationElementError, InvalidConfigurationError) as e:
        report_failure("Invalid configuration", e)
        raise typer.Exit(code=1) from e

    configure_logging(config.debug)
    try:
        result = asyncio.run(run_sync_issue_workflow(config))
    except HANDLED_ERRORS as e:
        report_failure("Failed to synchronize Jira issue", e)
        raise typer.Exit(code=1) from e

    for warning in result.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    write_github_output("issue_key", result.issue_key)
    typer.echo(result.issue_key)


@typer_app.command(name="find-sprint")
def find_sprint_cli(
    jira_base_url: JiraBaseUrlOption = None,
    jira_user_email: JiraUserEmailOption = None,
    jira_api_token: JiraApiTokenOption = None,
    jira_project_key: ProjectKeyOption = None,
    jira_board_id: BoardIdOption = None,
    jira_sprint_name: SprintNameOption = None,
    jira_target_sprint_states: TargetSprintStatesOption = None,
    jira_retries: RetriesOption = None,
    debug: DebugOption = None,
) -> None:
    """Print the id of the sprint issues would be assigned to."""
    configure_logging(bool(debug))
    try:
        config = get_sync_config(
            debug=debug,
            jira_base_url=jira_base_url,
            jira_user_email=jira_user_email,
            jira_api_token=jira_api_token,
            project_key=jira_project_key,
            board_id=jira_board_id,
            sprint_name=jira_sprint_name,
            target_sprint_states=jira_target_sprint_states,
            retries=jira_retries,
            require_issue_content=False,
        )
    except (RequiredConfigurationElementError, InvalidConfigurationError) as e:
        report_failure("Invalid configuration", e)
        raise typer.Exit(code=1) from e

    configure_logging(config.debug)
    try:
        board, sprint = asyncio.run(run_find_sprint_workflow(config))
    except HANDLED_ERRORS as e:
        report_failure(f"Failed to find '{config.sprint_name}' sprint", e)
        raise typer.Exit(code=1) from e

    if sprint is None:
        typer.echo(f"Board {board.id} ({board.type}) does not support sprints", err=True)
        raise typer.Exit(code=1)
    write_github_output("sprint_id", str(sprint.id))
    typer.echo(sprint.id)


if __name__ == "__main__":
    typer_app()
