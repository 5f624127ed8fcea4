"""Fixtures for unit tests."""

from typing import Generator
from unittest.mock import AsyncMock, patch

import pytest
import structlog

from jira_sprint_sync.synchronize.models import SyncRequest


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def no_sleep() -> Generator[AsyncMock, None, None]:
    """Replace the backoff sleep with a mock recording the requested delays."""
    with patch("jira_sprint_sync.utils.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        yield mock_sleep


@pytest.fixture
def sync_request() -> SyncRequest:
    """A request for the 'Deploy X' tracking issue."""
    return SyncRequest(
        summary="Deploy X",
        description="Roll out X to staging\nRoll out X to production",
        project_key="OPS",
        target_sprint_name="Needs refinement",
    )
