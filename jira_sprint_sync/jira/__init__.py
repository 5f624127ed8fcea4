"""Jira REST API access: transport, adapter and error types."""
