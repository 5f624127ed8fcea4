"""Unit tests for the Jira HTTP transport."""

import base64
import json
from typing import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from jira_sprint_sync.jira.client import build_auth_headers, get_jira_http_client
from jira_sprint_sync.jira.exceptions import HttpError, RateLimitedError, TransportError, UnexpectedResponseError
from jira_sprint_sync.jira.transport import (
    EmptyResponse,
    JiraTransport,
    RawResponse,
    StructuredResponse,
    expect_structured,
    parse_success_body,
)


def make_transport(handler: Callable[[httpx.Request], httpx.Response], max_retries: int = 3) -> JiraTransport:
    """Build a transport whose network layer is the given handler."""
    client = get_jira_http_client(
        "https://example.atlassian.net",
        "bot@example.com",
        "secret-token",
        transport=httpx.MockTransport(handler),
    )
    return JiraTransport(client, max_retries=max_retries, initial_delay=1.0)


class SequenceHandler:
    """Returns queued responses (or raises queued errors) and records every request."""

    def __init__(self, outcomes: list[httpx.Response | Exception]) -> None:
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        # Hand out a fresh copy; the client binds the returned object to the request.
        return httpx.Response(outcome.status_code, content=outcome.content, headers=outcome.headers)


def test_build_auth_headers() -> None:
    """Test that credentials are base64 encoded into a Basic header."""
    headers = build_auth_headers("bot@example.com", "secret-token")
    expected = base64.b64encode(b"bot@example.com:secret-token").decode()
    assert headers["Authorization"] == f"Basic {expected}"
    assert headers["Content-Type"] == "application/json"


def test_build_auth_headers_requires_credentials() -> None:
    """Test that missing credentials are rejected."""
    with pytest.raises(RuntimeError):
        build_auth_headers("", "secret-token")


@pytest.mark.parametrize(
    "body, expected",
    [
        pytest.param("", EmptyResponse(), id="empty body"),
        pytest.param("  \n", EmptyResponse(), id="whitespace body"),
        pytest.param('{"key": "OPS-1"}', StructuredResponse({"key": "OPS-1"}), id="json object"),
        pytest.param("[]", StructuredResponse([]), id="json array"),
        pytest.param("<html>ok</html>", RawResponse("<html>ok</html>"), id="non-json body"),
    ],
)
def test_parse_success_body(body: str, expected: object) -> None:
    """Test classification of 2xx response bodies."""
    assert parse_success_body(body) == expected


def test_expect_structured() -> None:
    """Test that only structured responses yield a value."""
    assert expect_structured(StructuredResponse({"a": 1}), "ctx") == {"a": 1}
    with pytest.raises(UnexpectedResponseError, match="empty"):
        expect_structured(EmptyResponse(), "ctx")
    with pytest.raises(UnexpectedResponseError, match="not json"):
        expect_structured(RawResponse("not json"), "ctx")


@pytest.mark.asyncio
async def test_request_sends_credentials_and_body(no_sleep: AsyncMock) -> None:
    """Test that requests carry auth headers and a JSON body."""
    handler = SequenceHandler([httpx.Response(201, json={"key": "OPS-1"})])
    async with make_transport(handler) as transport:
        response = await transport.post("/rest/api/2/issue", body={"fields": {"summary": "Deploy X"}})

    assert response == StructuredResponse({"key": "OPS-1"})
    request = handler.requests[0]
    assert request.url == httpx.URL("https://example.atlassian.net/rest/api/2/issue")
    assert request.headers["Authorization"].startswith("Basic ")
    assert json.loads(request.content) == {"fields": {"summary": "Deploy X"}}


@pytest.mark.asyncio
async def test_request_returns_empty_marker_for_no_content(no_sleep: AsyncMock) -> None:
    """Test that 204 responses yield the empty-success marker."""
    handler = SequenceHandler([httpx.Response(204)])
    async with make_transport(handler) as transport:
        assert await transport.put("rest/api/2/issue/OPS-1", body={"fields": {}}) == EmptyResponse()


@pytest.mark.asyncio
async def test_request_returns_raw_text_for_non_json(no_sleep: AsyncMock) -> None:
    """Test that a non-JSON success body does not fail the call."""
    handler = SequenceHandler([httpx.Response(200, text="Done!")])
    async with make_transport(handler) as transport:
        assert await transport.get("rest/api/2/whatever") == RawResponse("Done!")


@pytest.mark.asyncio
async def test_request_raises_http_error_without_retry(no_sleep: AsyncMock) -> None:
    """Test that non-429 error statuses fail immediately."""
    handler = SequenceHandler([httpx.Response(404, text='{"errorMessages":["Issue does not exist"]}')])
    async with make_transport(handler) as transport:
        with pytest.raises(HttpError) as exc_info:
            await transport.get("rest/api/2/issue/OPS-404")
    assert exc_info.value.status == 404
    assert "Issue does not exist" in exc_info.value.body
    assert len(handler.requests) == 1
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "rate_limited_responses, budget, expected_retries",
    [
        pytest.param(1, 3, 1, id="one 429 then success"),
        pytest.param(3, 3, 3, id="three 429s then success"),
        pytest.param(2, 5, 2, id="budget larger than needed"),
    ],
)
async def test_request_retries_rate_limits(no_sleep: AsyncMock, rate_limited_responses: int, budget: int, expected_retries: int) -> None:
    """Test that 429 responses are retried min(budget, needed) times with doubling delays."""
    outcomes: list[httpx.Response | Exception] = [httpx.Response(429, text="Too many requests")] * rate_limited_responses
    outcomes.append(httpx.Response(200, json={"values": []}))
    handler = SequenceHandler(outcomes)
    async with make_transport(handler, max_retries=budget) as transport:
        assert await transport.get("rest/agile/1.0/board") == StructuredResponse({"values": []})

    assert len(handler.requests) == expected_retries + 1
    delays = [call.args[0] for call in no_sleep.await_args_list]
    assert delays == [1.0 * 2**n for n in range(expected_retries)]


@pytest.mark.asyncio
async def test_request_raises_429_when_budget_exhausted(no_sleep: AsyncMock) -> None:
    """Test that persistent rate limiting surfaces as an HTTP 429 error."""
    handler = SequenceHandler([httpx.Response(429, text="Too many requests")])
    async with make_transport(handler, max_retries=2) as transport:
        with pytest.raises(RateLimitedError) as exc_info:
            await transport.get("rest/agile/1.0/board")

    assert isinstance(exc_info.value, HttpError)
    assert exc_info.value.status == 429
    assert len(handler.requests) == 3
    assert [call.args[0] for call in no_sleep.await_args_list] == [1.0, 2.0]


@pytest.mark.asyncio
async def test_request_retries_connection_errors(no_sleep: AsyncMock) -> None:
    """Test that network failures are retried like rate limits."""
    handler = SequenceHandler(
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
            httpx.Response(200, json={"ok": True}),
        ]
    )
    async with make_transport(handler) as transport:
        assert await transport.get("rest/api/2/myself") == StructuredResponse({"ok": True})
    assert len(handler.requests) == 3
    assert [call.args[0] for call in no_sleep.await_args_list] == [1.0, 2.0]


@pytest.mark.asyncio
async def test_request_raises_transport_error_when_budget_exhausted(no_sleep: AsyncMock) -> None:
    """Test that a persistent network failure surfaces as TransportError."""
    handler = SequenceHandler([httpx.ConnectError("connection refused")])
    async with make_transport(handler, max_retries=1) as transport:
        with pytest.raises(TransportError) as exc_info:
            await transport.get("rest/api/2/myself")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert len(handler.requests) == 2
