"""Tests for the httpx page fetcher using a mock transport."""

from __future__ import annotations

import httpx
import pytest

from sku_match.exceptions import FetchError, UnsafeRedirectError
from sku_match.fetching.http_fetcher import HttpxPageFetcher


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/ok":
        return httpx.Response(200, text="<h1>ABC-123</h1>", headers={"content-type": "text/html"})
    if path == "/missing":
        return httpx.Response(404, text="gone")
    if path == "/hop":
        return httpx.Response(302, headers={"location": "https://shop.acme.com/ok"})
    if path == "/internal":
        return httpx.Response(302, headers={"location": "http://127.0.0.1/admin"})
    if path == "/shorthand":
        return httpx.Response(302, headers={"location": "http://2130706433/admin"})
    if path == "/big":
        return httpx.Response(200, content=b"a" * 5000)
    if path == "/latin1":
        return httpx.Response(
            200,
            content="café".encode("latin-1"),
            headers={"content-type": "text/html; charset=iso-8859-1"},
        )
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
async def http_fetcher():
    fetcher = HttpxPageFetcher(timeout_s=2.0, max_bytes=1000, transport=httpx.MockTransport(_handler))
    yield fetcher
    await fetcher.aclose()


async def test_fetch_ok(http_fetcher):
    response = await http_fetcher.fetch("https://shop.acme.com/ok")
    assert response.ok
    assert response.status == 200
    assert "ABC-123" in response.text
    assert response.content_type.startswith("text/html")


async def test_non_2xx_is_returned(http_fetcher):
    response = await http_fetcher.fetch("https://shop.acme.com/missing")
    assert response.status == 404
    assert not response.ok


async def test_follows_public_redirect(http_fetcher):
    response = await http_fetcher.fetch("https://shop.acme.com/hop")
    assert response.url == "https://shop.acme.com/ok"
    assert response.status == 200


async def test_redirect_to_private_address_is_refused(http_fetcher):
    with pytest.raises(UnsafeRedirectError):
        await http_fetcher.fetch("https://shop.acme.com/internal")


async def test_redirect_to_shorthand_loopback_is_refused(http_fetcher):
    with pytest.raises(UnsafeRedirectError):
        await http_fetcher.fetch("https://shop.acme.com/shorthand")


async def test_unsafe_initial_url_is_refused(http_fetcher):
    with pytest.raises(FetchError):
        await http_fetcher.fetch("http://localhost/ok")


async def test_transport_error_becomes_fetch_error(http_fetcher):
    with pytest.raises(FetchError):
        await http_fetcher.fetch("https://shop.acme.com/down")


async def test_body_is_capped(http_fetcher):
    response = await http_fetcher.fetch("https://shop.acme.com/big")
    assert len(response.text) == 1000


async def test_declared_charset_is_used(http_fetcher):
    response = await http_fetcher.fetch("https://shop.acme.com/latin1")
    assert response.text == "café"
