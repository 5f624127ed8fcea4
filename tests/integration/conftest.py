"""Pytest configuration for integration tests."""

from typing import Generator
from unittest.mock import AsyncMock, patch

import pytest

from tests.integration.utils import FakeJira


@pytest.fixture
def fake_jira() -> FakeJira:
    """A Jira site with one scrum board for OPS, an active sprint and the target sprint."""
    jira = FakeJira()
    jira.add_board(7, "OPS")
    jira.add_sprint(7, 1, "Sprint 12", "active")
    jira.add_sprint(7, 2, "Needs refinement", "future")
    return jira


@pytest.fixture(autouse=True)
def no_sleep() -> Generator[AsyncMock, None, None]:
    """Skip real backoff delays."""
    with patch("jira_sprint_sync.utils.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        yield mock_sleep
