"""Authenticated HTTP transport for the Jira REST API."""

import json
from dataclasses import dataclass
from typing import Any, Self, TypeAlias

import httpx
import structlog

from jira_sprint_sync.jira.exceptions import HttpError, RateLimitedError, TransportError, UnexpectedResponseError
from jira_sprint_sync.utils.retry import call_with_retry

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StructuredResponse:
    """A 2xx response whose body parsed as JSON."""

    value: Any


@dataclass(frozen=True)
class EmptyResponse:
    """A 2xx response with no body, as returned by update endpoints."""


@dataclass(frozen=True)
class RawResponse:
    """A 2xx response whose body was not JSON."""

    text: str


ParsedResponse: TypeAlias = StructuredResponse | EmptyResponse | RawResponse


def parse_success_body(text: str) -> ParsedResponse:
    """Classify the body of a successful response."""
    if not text.strip():
        return EmptyResponse()
    try:
        return StructuredResponse(json.loads(text))
    except ValueError:
        logger.debug("Response body is not JSON, keeping raw text", body_length=len(text))
        return RawResponse(text)


def expect_structured(response: ParsedResponse, context: str) -> Any:
    """Return the JSON value of a response, raising if the body was empty or not JSON."""
    if isinstance(response, StructuredResponse):
        return response.value
    if isinstance(response, EmptyResponse):
        raise UnexpectedResponseError(f"{context}: expected a JSON body but the response was empty")
    raise UnexpectedResponseError(f"{context}: expected a JSON body but got: {response.text[:200]}")


class JiraTransport:
    """Sends requests to Jira, classifies responses and retries transient failures.

    Retries are bounded by ``max_retries`` per call. HTTP 429 responses and
    network level failures are retried with exponential backoff; every other
    non-2xx status is raised as ``HttpError`` straight away.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_retries: int = 3,
        initial_delay: float = 1.0,
    ) -> None:
        """Initialize the transport with an already-configured httpx client."""
        self.client = client
        self.max_retries = max_retries
        self.initial_delay = initial_delay

    async def __aenter__(self) -> Self:
        """Enter the async context."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close the underlying client on exit."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if not self.client.is_closed:
            await self.client.aclose()

    async def _send_once(self, method: str, path: str, body: Any | None, params: dict[str, Any] | None) -> ParsedResponse:
        """Perform a single attempt of a request."""
        logger.debug("Sending request to Jira", method=method, path=path, params=params)
        try:
            response = await self.client.request(method, path, json=body, params=params)
        except httpx.TransportError as e:
            logger.error("Request error", method=method, path=path, error_type=type(e).__name__, error=str(e))
            raise TransportError(f"{method} {path} failed: {e}") from e

        logger.debug("Response status", method=method, path=path, status_code=response.status_code)
        if 200 <= response.status_code < 300:
            return parse_success_body(response.text)
        if response.status_code == 429:
            raise RateLimitedError(response.text, method=method, path=path)
        raise HttpError(response.status_code, response.text, method=method, path=path)

    async def request(
        self,
        method: str,
        path: str,
        body: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> ParsedResponse:
        """Send a request, retrying rate limits and transport errors within the budget.

        Args:
            method: HTTP method.
            path: Path relative to the client's base URL, e.g. ``rest/api/2/issue``.
            body: JSON-serializable request body, if any.
            params: Query string parameters.

        Returns:
            The classified response body.

        Raises:
            HttpError: For non-2xx responses other than 429.
            RateLimitedError: If every allowed attempt was rate limited.
            TransportError: If the last allowed attempt failed at the network level.
        """
        path = path.lstrip("/")

        async def attempt() -> ParsedResponse:
            return await self._send_once(method, path, body, params)

        return await call_with_retry(
            attempt,
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            operation=f"{method} {path}",
        )

    async def get(self, path: str, params: dict[str, Any] | None = None) -> ParsedResponse:
        """GET request."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Any | None = None) -> ParsedResponse:
        """POST request."""
        return await self.request("POST", path, body=body)

    async def put(self, path: str, body: Any | None = None) -> ParsedResponse:
        """PUT request."""
        return await self.request("PUT", path, body=body)
