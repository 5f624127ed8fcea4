"""Sets up the authenticated httpx client used to talk to Jira."""

import base64

import httpx

DEFAULT_TIMEOUT = 30.0


def build_auth_headers(email: str, api_token: str) -> dict[str, str]:
    """Return Basic authentication and JSON content negotiation headers."""
    if not email or not api_token:
        raise RuntimeError("Jira basic authentication requires both an account email and an API token.")
    credentials = base64.b64encode(f"{email}:{api_token}".encode()).decode()
    return {
        "Authorization": f"Basic {credentials}",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }


def get_jira_http_client(
    base_url: str,
    email: str,
    api_token: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Returns an httpx client bound to the Jira base URL with credentials attached.

    ``transport`` lets callers substitute the network layer, e.g. with
    ``httpx.MockTransport`` in tests.
    """
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/") + "/",
        headers=build_auth_headers(email, api_token),
        timeout=timeout,
        follow_redirects=True,
        transport=transport,
    )
