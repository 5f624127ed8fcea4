"""Allows running the CLI with ``python -m jira_sprint_sync``."""

from jira_sprint_sync.configuration.cli import typer_app

typer_app(prog_name="jira-sprint-sync")
