"""Pydantic models for Jira objects."""
