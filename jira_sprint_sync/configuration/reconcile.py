"""Reconciles configuration between CLI arguments and environment variables."""

from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from jira_sprint_sync.configuration.env import Settings
from jira_sprint_sync.configuration.exceptions import InvalidConfigurationError, RequiredConfigurationElementError
from jira_sprint_sync.configuration.models import DescriptionFormat, JiraConnectionConfig, SyncConfig
from jira_sprint_sync.schemas.jira import SprintState

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _pick(cli_value: Any, env_value: Any) -> Any:
    """CLI values win over environment values when both are set."""
    return cli_value if cli_value is not None else env_value


def _require(value: Any, name: str, cli_name: str, env_name: str) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise RequiredConfigurationElementError(name=name, cli_name=cli_name, env_name=env_name)
    return value


async def parse_sprint_states(raw_states: str) -> tuple[SprintState, ...]:
    """Parse a comma separated list of sprint states such as ``active,future``."""
    states: list[SprintState] = []
    for raw_state in raw_states.split(","):
        raw_state = raw_state.strip().lower()
        if not raw_state:
            continue
        try:
            state = SprintState(raw_state)
        except ValueError as exc:
            valid = ", ".join(s.value for s in SprintState)
            raise InvalidConfigurationError(f"Unknown sprint state '{raw_state}'; expected a comma separated list of: {valid}") from exc
        if state not in states:
            states.append(state)
    if not states:
        raise InvalidConfigurationError("At least one target sprint state is required.")
    return tuple(states)


async def validate_jira_connection_configuration(
    base_url: str,
    retries: int,
    retry_initial_delay: float,
    timeout: float,
    description_format: str,
) -> DescriptionFormat:
    """Validates the Jira connection configuration.

    Raises:
        InvalidConfigurationError: If any value is out of range or malformed.

    Returns:
        DescriptionFormat: The description format to use.
    """
    if not base_url.startswith(("http://", "https://")):
        raise InvalidConfigurationError(f"Jira base URL must start with http:// or https://, got '{base_url}'")
    if retries < 0:
        raise InvalidConfigurationError(f"Retry count must not be negative, got {retries}")
    if retry_initial_delay <= 0:
        raise InvalidConfigurationError(f"Initial retry delay must be positive, got {retry_initial_delay}")
    if timeout <= 0:
        raise InvalidConfigurationError(f"Request timeout must be positive, got {timeout}")
    try:
        return DescriptionFormat(description_format.strip().lower())
    except ValueError as exc:
        valid = ", ".join(f.value for f in DescriptionFormat)
        raise InvalidConfigurationError(f"Unknown description format '{description_format}'; expected one of: {valid}") from exc


async def reconcile_sync_configuration(
    cli_debug: bool | None = None,
    cli_jira_base_url: str | None = None,
    cli_jira_user_email: str | None = None,
    cli_jira_api_token: str | None = None,
    cli_project_key: str | None = None,
    cli_issue_summary: str | None = None,
    cli_issue_description: str | None = None,
    cli_board_id: int | None = None,
    cli_sprint_name: str | None = None,
    cli_target_sprint_states: str | None = None,
    cli_retries: int | None = None,
    cli_retry_initial_delay: float | None = None,
    cli_timeout: float | None = None,
    cli_description_format: str | None = None,
    cli_issue_type: str | None = None,
    cli_trailer_timezone: str | None = None,
    require_issue_content: bool = True,
    settings: Settings | None = None,
) -> SyncConfig:
    """Merge CLI arguments over environment settings and validate the result.

    Args:
        require_issue_content: When False, summary and description may be
            absent (used by commands that only resolve boards and sprints).
        settings: Environment settings; read from the environment when omitted.

    Raises:
        RequiredConfigurationElementError: If a required element is missing.
        InvalidConfigurationError: If an element has an unusable value.
    """
    settings = settings or Settings()

    base_url = _require(_pick(cli_jira_base_url, settings.JIRA_BASE_URL), "Jira base URL", "jira-base-url", "JIRA_BASE_URL")
    user_email = _require(_pick(cli_jira_user_email, settings.JIRA_USER_EMAIL), "Jira user email", "jira-user-email", "JIRA_USER_EMAIL")
    api_token = _require(_pick(cli_jira_api_token, settings.JIRA_API_TOKEN), "Jira API token", "jira-api-token", "JIRA_API_TOKEN")
    project_key = _require(_pick(cli_project_key, settings.JIRA_PROJECT_KEY), "Jira project key", "jira-project-key", "JIRA_PROJECT_KEY")

    issue_summary = _pick(cli_issue_summary, settings.ISSUE_SUMMARY)
    issue_description = _pick(cli_issue_description, settings.ISSUE_DESCRIPTION)
    if require_issue_content:
        issue_summary = _require(issue_summary, "Issue summary", "issue-summary", "ISSUE_SUMMARY")
        if issue_description is None:
            raise RequiredConfigurationElementError(name="Issue description", cli_name="issue-description", env_name="ISSUE_DESCRIPTION")

    retries = _pick(cli_retries, settings.JIRA_RETRIES)
    retry_initial_delay = _pick(cli_retry_initial_delay, settings.JIRA_RETRY_INITIAL_DELAY)
    timeout = _pick(cli_timeout, settings.JIRA_TIMEOUT)
    description_format = await validate_jira_connection_configuration(
        base_url=base_url,
        retries=retries,
        retry_initial_delay=retry_initial_delay,
        timeout=timeout,
        description_format=_pick(cli_description_format, settings.JIRA_DESCRIPTION_FORMAT),
    )

    trailer_timezone = _pick(cli_trailer_timezone, settings.TRAILER_TIMEZONE)
    try:
        ZoneInfo(trailer_timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidConfigurationError(f"Unknown trailer time zone '{trailer_timezone}'") from exc

    config = SyncConfig(
        connection=JiraConnectionConfig(
            base_url=base_url.rstrip("/"),
            user_email=user_email,
            api_token=api_token,
            retries=retries,
            retry_initial_delay=retry_initial_delay,
            timeout=timeout,
            description_format=description_format,
        ),
        project_key=project_key,
        issue_summary=issue_summary or "",
        issue_description=issue_description or "",
        sprint_name=_pick(cli_sprint_name, settings.JIRA_SPRINT_NAME),
        board_id=_pick(cli_board_id, settings.JIRA_BOARD_ID),
        target_sprint_states=await parse_sprint_states(_pick(cli_target_sprint_states, settings.JIRA_TARGET_SPRINT_STATES)),
        issue_type=_pick(cli_issue_type, settings.JIRA_ISSUE_TYPE),
        trailer_timezone=trailer_timezone,
        debug=bool(_pick(cli_debug, settings.DEBUG)),
    )
    logger.debug(
        "Reconciled configuration",
        jira_base_url=config.connection.base_url,
        project_key=config.project_key,
        board_id=config.board_id,
        sprint_name=config.sprint_name,
        target_sprint_states=[state.value for state in config.target_sprint_states],
        retries=config.connection.retries,
        description_format=config.connection.description_format.value,
    )
    return config
