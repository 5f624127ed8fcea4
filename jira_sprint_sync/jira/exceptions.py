"""Contains exceptions raised when talking to the Jira REST API."""


class JiraError(Exception):
    """Base class for errors raised by the Jira transport and adapter."""

    pass


class NotFoundError(JiraError):
    """Raised when a board or sprint the run depends on does not exist."""

    pass


class HttpError(JiraError):
    """Raised when Jira answers with a non-2xx status code."""

    def __init__(self, status: int, body: str, method: str | None = None, path: str | None = None) -> None:
        """Initializes the exception with the status code and response body."""
        location = f" for {method} {path}" if method and path else ""
        super().__init__(f"HTTP {status}{location}: {body}")
        self.status = status
        self.body = body
        self.method = method
        self.path = path


class RateLimitedError(HttpError):
    """Raised when Jira kept answering 429 after the retry budget was spent."""

    def __init__(self, body: str, method: str | None = None, path: str | None = None) -> None:
        """Initializes the exception as an HTTP 429 error."""
        super().__init__(429, body, method=method, path=path)


class TransportError(JiraError):
    """Raised when the request could not be delivered after the retry budget was spent."""

    pass


class UnexpectedResponseError(JiraError):
    """Raised when a JSON document was required but Jira returned something else."""

    pass
