"""HTTP fetch utility — one GET, body text on 200, a typed error otherwise."""

import logging

import httpx

from cosmicbirthday.config import FetchSettings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class FetchError(Exception):
    """Base class for outbound request failures."""


class NetworkError(FetchError):
    """Connection-level failure (DNS, refused, reset, TLS)."""


class FetchTimeoutError(FetchError, TimeoutError):
    """The request did not complete within its timeout."""


class HttpStatusError(FetchError):
    """The server answered with something other than 200."""

    def __init__(self, code: int, body: str) -> None:
        self.code = code
        self.body = body
        super().__init__(f"HTTP {code}: {body[:200]}")


def make_client(settings: FetchSettings) -> httpx.AsyncClient:
    """Shared async client with browser-like headers. Caller closes it."""
    headers = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
    }
    return httpx.AsyncClient(
        headers=headers,
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


async def fetch_text(
    client: httpx.AsyncClient, url: str, timeout: float = DEFAULT_TIMEOUT
) -> str:
    """GET url and return the body text.

    Args:
        client: Open async client (see make_client).
        url: Absolute URL.
        timeout: Per-request timeout in seconds.

    Returns:
        Response body decoded as text.

    Raises:
        FetchTimeoutError: The request timed out.
        NetworkError: The connection failed.
        HttpStatusError: Status was not 200.
    """
    logger.debug("Requesting: %s", url)
    try:
        resp = await client.get(url, timeout=timeout)
    except httpx.TimeoutException as e:
        raise FetchTimeoutError(f"Request timeout after {timeout:g}s: {url}") from e
    except httpx.TransportError as e:
        raise NetworkError(f"{type(e).__name__}: {e}") from e

    logger.debug("Response status: %s, length: %d", resp.status_code, len(resp.text))
    if resp.status_code != 200:
        raise HttpStatusError(resp.status_code, resp.text)
    return resp.text
