"""Protocol for outbound page fetching."""

from __future__ import annotations

from typing import Protocol

from sku_match.models.domain import FetchResponse


class PageFetcher(Protocol):
    async def fetch(self, url: str, timeout_s: float | None = None) -> FetchResponse:
        """Return the response for any HTTP status; raise FetchError only on transport failure."""
        ...
