"""Site-search connector: scrapes result links from the supplier's own search page."""

from __future__ import annotations

from urllib.parse import urljoin, urldefrag

import httpx
from bs4 import BeautifulSoup

from sku_match.config.suppliers import SiteSearchConfig
from sku_match.models.domain import CandidateUrl, ConnectorResult, ResolveInput
from sku_match.observability.logger import get_logger
from sku_match.protocols.fetcher import PageFetcher
from sku_match.safety.net_safety import domain_of, is_safe_public_url

logger = get_logger("site_search")

SITE_SEARCH_CONFIDENCE = 0.4


def _bare_domain(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def search_query_for(input: ResolveInput) -> str:
    """Most specific identifier first: raw SKU, then NDC, then product name."""
    for value in (input.sku, input.ndc_item_code_norm, input.product_name):
        if value and value.strip():
            return value.strip()
    return ""


def extract_result_links(html: str, page_url: str, selector: str | None = None) -> list[str]:
    soup = BeautifulSoup(html, "html.parser")
    anchors = soup.select(selector) if selector else soup.find_all("a", href=True)
    site = _bare_domain(domain_of(page_url))

    links: list[str] = []
    seen: set[str] = set()
    for a in anchors:
        href = a.get("href")
        if not href or href.startswith(("#", "javascript:", "mailto:")):
            continue
        url, _ = urldefrag(urljoin(page_url, href))
        if url == page_url or url in seen:
            continue
        if _bare_domain(domain_of(url)) != site:
            continue
        seen.add(url)
        links.append(url)
    return links


class SiteSearchConnector:
    def __init__(self, supplier_key: str, config: SiteSearchConfig, fetcher: PageFetcher) -> None:
        self.key = supplier_key
        self.display_name = f"Site search connector for {supplier_key}"
        self._config = config
        self._fetcher = fetcher

    def search_url(self, query: str) -> str:
        url = httpx.URL(self._config.base_url)
        return str(url.copy_merge_params({self._config.query_param: query}))

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        query = search_query_for(input)
        if not query:
            return ConnectorResult(candidates=[])

        search_url = self.search_url(query)
        if not is_safe_public_url(search_url):
            logger.warning("site_search_unsafe_base_url", supplier_key=self.key)
            return ConnectorResult(candidates=[])

        try:
            response = await self._fetcher.fetch(search_url)
        except Exception as e:
            logger.warning("site_search_failed", supplier_key=self.key, error=str(e))
            return ConnectorResult(candidates=[], debug={"error": str(e)})

        if not response.ok:
            logger.info("site_search_bad_status", supplier_key=self.key, status=response.status)
            return ConnectorResult(candidates=[], debug={"status": response.status})

        links = extract_result_links(
            response.text, response.url or search_url, self._config.result_link_selector
        )
        candidates = [
            CandidateUrl(
                url=link,
                domain=domain_of(link),
                method="site-search",
                confidence=SITE_SEARCH_CONFIDENCE,
                reasons=["site-search", f"rank:{rank}"],
            )
            for rank, link in enumerate(links[: self._config.max_results], start=1)
        ]
        return ConnectorResult(candidates=candidates, debug={"search_url": search_url})
