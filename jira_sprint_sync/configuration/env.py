"""Pydantic Settings model for application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # Jira connection settings
    JIRA_BASE_URL: str | None = None
    JIRA_USER_EMAIL: str | None = None
    JIRA_API_TOKEN: str | None = None
    JIRA_RETRIES: int = 3
    JIRA_RETRY_INITIAL_DELAY: float = 1.0
    JIRA_TIMEOUT: float = 30.0
    JIRA_DESCRIPTION_FORMAT: str = "plain"

    # Issue placement settings
    JIRA_PROJECT_KEY: str | None = None
    JIRA_BOARD_ID: int | None = None
    JIRA_SPRINT_NAME: str = "Needs refinement"
    JIRA_TARGET_SPRINT_STATES: str = "future"
    JIRA_ISSUE_TYPE: str = "Story"

    # Issue content settings
    ISSUE_SUMMARY: str | None = None
    ISSUE_DESCRIPTION: str | None = None
    TRAILER_TIMEZONE: str = "America/New_York"
