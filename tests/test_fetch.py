from __future__ import annotations

import asyncio

import httpx
import pytest
from conftest import mock_client

from cosmicbirthday.config import FetchSettings
from cosmicbirthday.fetch import (
    FetchTimeoutError,
    HttpStatusError,
    NetworkError,
    fetch_text,
    make_client,
)

URL = "https://aa.usno.navy.mil/api/moon/phases/year?year=2024"


def _get(handler) -> str:
    async def go():
        async with mock_client(handler) as client:
            return await fetch_text(client, URL, timeout=5.0)

    return asyncio.run(go())


def test_returns_body_on_200():
    assert _get(lambda request: httpx.Response(200, text='{"ok": true}')) == '{"ok": true}'


def test_non_200_raises_with_code_and_body():
    with pytest.raises(HttpStatusError) as exc:
        _get(lambda request: httpx.Response(503, text="Service Unavailable"))
    assert exc.value.code == 503
    assert str(exc.value) == "HTTP 503: Service Unavailable"


def test_error_body_is_truncated_in_message():
    with pytest.raises(HttpStatusError) as exc:
        _get(lambda request: httpx.Response(500, text="x" * 1000))
    assert str(exc.value) == "HTTP 500: " + "x" * 200
    assert len(exc.value.body) == 1000


def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(FetchTimeoutError, match="5s"):
        _get(handler)


def test_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkError, match="ConnectError"):
        _get(handler)


def test_timeout_is_also_a_builtin_timeout():
    assert issubclass(FetchTimeoutError, TimeoutError)


def test_client_sends_browser_headers():
    client = make_client(FetchSettings(user_agent="UA-test"))
    try:
        assert client.headers["User-Agent"] == "UA-test"
        assert "application/json" in client.headers["Accept"]
        assert client.follow_redirects
    finally:
        asyncio.run(client.aclose())
