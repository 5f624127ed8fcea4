"""Synchronization engine for Jira tracking issues."""
