"""httpx-backed page fetcher with a hard timeout and a redirect guard."""

from __future__ import annotations

import asyncio
import codecs

import httpx

from sku_match.exceptions import FetchError, UnsafeRedirectError
from sku_match.models.domain import FetchResponse
from sku_match.observability.logger import get_logger
from sku_match.safety.net_safety import is_safe_public_url

logger = get_logger("http_fetcher")

DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8"


async def _guard_request(request: httpx.Request) -> None:
    # Runs for the initial request and every redirect hop
    url = str(request.url)
    if not is_safe_public_url(url):
        raise UnsafeRedirectError(f"Refusing to fetch non-public URL: {url}")


class HttpxPageFetcher:
    """Fetches pages as text. Non-2xx responses are returned, not raised."""

    def __init__(
        self,
        timeout_s: float = 10.0,
        max_bytes: int = 2_000_000,
        user_agent: str = "SkuMatch/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._max_bytes = max_bytes
        self._headers = {"User-Agent": user_agent, "Accept": DEFAULT_ACCEPT}
        self._client = httpx.AsyncClient(
            transport=transport,
            follow_redirects=True,
            max_redirects=5,
            event_hooks={"request": [_guard_request]},
        )

    async def __aenter__(self) -> HttpxPageFetcher:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, url: str, timeout_s: float | None = None) -> FetchResponse:
        timeout = timeout_s if timeout_s is not None else self._timeout_s
        try:
            return await asyncio.wait_for(self._fetch(url, timeout), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timed out after {timeout}s fetching {url}") from e
        except FetchError:
            raise
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"{type(e).__name__}: {e}") from e

    async def _fetch(self, url: str, timeout: float) -> FetchResponse:
        async with self._client.stream(
            "GET", url, headers=self._headers, timeout=httpx.Timeout(timeout)
        ) as response:
            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) >= self._max_bytes:
                    logger.debug("fetch_truncated", url=url, max_bytes=self._max_bytes)
                    break
            text = self._decode(bytes(body[: self._max_bytes]), response.charset_encoding)
            return FetchResponse(
                url=str(response.url),
                status=response.status_code,
                text=text,
                content_type=response.headers.get("content-type", ""),
            )

    @staticmethod
    def _decode(raw: bytes, charset: str | None) -> str:
        encoding = "utf-8"
        if charset:
            try:
                encoding = codecs.lookup(charset).name
            except LookupError:
                pass
        return raw.decode(encoding, errors="replace")
