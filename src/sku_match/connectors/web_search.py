"""General web search connector backed by SerpAPI organic results."""

from __future__ import annotations

import json
from urllib.parse import urldefrag

import httpx

from sku_match.models.domain import CandidateUrl, ConnectorResult, ResolveInput
from sku_match.observability.logger import get_logger
from sku_match.protocols.fetcher import PageFetcher
from sku_match.safety.net_safety import domain_of

logger = get_logger("web_search")

WEB_SEARCH_CONFIDENCE = 0.3


def build_queries(input: ResolveInput) -> list[str]:
    """Prioritized search queries for an item, deduplicated case-insensitively."""
    sku = (input.sku or "").strip()
    ndc = (input.ndc_item_code or "").strip()
    name = (input.product_name or "").strip()
    brand = (input.brand_name or "").strip()
    supplier = (input.supplier_name or "").strip()

    queries: list[str] = []
    if sku:
        if supplier:
            queries.append(f"{sku} {supplier}")
        if input.supplier_key:
            queries.append(f"{sku} {input.supplier_key}")
        queries.append(f"{sku} {name}".strip())
        queries.append(sku)
    if ndc:
        queries.append(ndc)
    if name:
        if brand:
            queries.append(f'"{name}" {brand}')
        queries.append(f'"{name}"')
        if supplier:
            queries.append(f"{name} {supplier}")

    seen: set[str] = set()
    unique = []
    for q in queries:
        k = q.lower()
        if q and k not in seen:
            seen.add(k)
            unique.append(q)
    return unique


def parse_organic_results(payload: object) -> list[str]:
    if not isinstance(payload, dict):
        return []
    urls = []
    for r in payload.get("organic_results") or []:
        if not isinstance(r, dict):
            continue
        link = r.get("link") or r.get("url")
        if isinstance(link, str) and link:
            urls.append(urldefrag(link)[0])
    return urls


class WebSearchConnector:
    def __init__(
        self,
        supplier_key: str,
        fetcher: PageFetcher,
        api_key: str,
        endpoint: str = "https://serpapi.com/search.json",
        max_results: int = 5,
    ) -> None:
        self.key = supplier_key
        self.display_name = f"Web search connector for {supplier_key}"
        self._fetcher = fetcher
        self._api_key = api_key
        self._endpoint = endpoint
        self._max_results = max_results

    def _search_url(self, query: str) -> str:
        params = {"q": query, "api_key": self._api_key, "num": self._max_results}
        return str(httpx.URL(self._endpoint, params=params))

    async def _search(self, query: str) -> list[str]:
        try:
            response = await self._fetcher.fetch(self._search_url(query))
        except Exception as e:
            # URL carries the API key, so only the query is logged
            logger.warning("web_search_failed", query=query, error=type(e).__name__)
            return []
        if not response.ok:
            logger.warning("web_search_bad_status", query=query, status=response.status)
            return []
        try:
            return parse_organic_results(json.loads(response.text))
        except json.JSONDecodeError:
            logger.warning("web_search_invalid_json", query=query)
            return []

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        if not self._api_key:
            return ConnectorResult(candidates=[])

        queries = build_queries(input)
        collected: list[str] = []
        seen: set[str] = set()
        for query in queries:
            for url in await self._search(query):
                if url not in seen:
                    seen.add(url)
                    collected.append(url)
            if len(collected) >= self._max_results:
                break

        candidates = [
            CandidateUrl(
                url=url,
                domain=domain_of(url),
                method="web-search",
                confidence=WEB_SEARCH_CONFIDENCE,
                reasons=["web-search"],
            )
            for url in collected[: self._max_results]
        ]
        return ConnectorResult(candidates=candidates, debug={"queries": queries})
