"""Keeps a Jira tracking issue in sync with a caller-supplied summary and description."""
