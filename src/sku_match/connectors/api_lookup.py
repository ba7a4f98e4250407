"""Vendor API connector: reads product URLs from a JSON lookup endpoint."""

from __future__ import annotations

import json

from sku_match.config.suppliers import ApiLookupConfig
from sku_match.connectors.pattern import fill_template, template_value
from sku_match.models.domain import CandidateUrl, ConnectorResult, ResolveInput
from sku_match.observability.logger import get_logger
from sku_match.protocols.fetcher import PageFetcher
from sku_match.safety.net_safety import domain_of

logger = get_logger("api_lookup")

API_CONFIDENCE = 0.6
PLACEHOLDER_KEYS = ("skuNorm", "ndcItemCodeNorm")


def extract_urls(payload: object, results_field: str, url_field: str) -> list[str]:
    if isinstance(payload, dict):
        payload = payload.get(results_field, [])
    if not isinstance(payload, list):
        return []
    urls = []
    for item in payload:
        if isinstance(item, dict) and isinstance(item.get(url_field), str):
            urls.append(item[url_field])
    return urls


class ApiConnector:
    def __init__(self, supplier_key: str, config: ApiLookupConfig, fetcher: PageFetcher) -> None:
        self.key = supplier_key
        self.display_name = f"API connector for {supplier_key}"
        self._config = config
        self._fetcher = fetcher

    def endpoint_for(self, input: ResolveInput) -> str | None:
        endpoint = self._config.endpoint_template
        for key in PLACEHOLDER_KEYS:
            placeholder = "{" + key + "}"
            if placeholder not in endpoint:
                continue
            value = template_value(input, key)
            if not value:
                return None
            endpoint = fill_template(endpoint, key, value)
        return endpoint

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        endpoint = self.endpoint_for(input)
        if endpoint is None:
            return ConnectorResult(candidates=[])

        try:
            response = await self._fetcher.fetch(endpoint)
        except Exception as e:
            logger.warning("api_lookup_failed", supplier_key=self.key, error=str(e))
            return ConnectorResult(candidates=[], debug={"error": str(e)})

        if not response.ok:
            logger.info("api_lookup_bad_status", supplier_key=self.key, status=response.status)
            return ConnectorResult(candidates=[], debug={"status": response.status})

        try:
            payload = json.loads(response.text)
        except json.JSONDecodeError:
            logger.warning("api_lookup_invalid_json", supplier_key=self.key)
            return ConnectorResult(candidates=[], debug={"error": "invalid_json"})

        urls = extract_urls(payload, self._config.results_field, self._config.url_field)
        candidates = [
            CandidateUrl(
                url=url,
                domain=domain_of(url),
                method="api",
                confidence=API_CONFIDENCE,
                reasons=["api"],
            )
            for url in urls[: self._config.max_results]
        ]
        return ConnectorResult(candidates=candidates)
