"""Registry mapping supplier keys to candidate discovery connectors."""

from __future__ import annotations

from sku_match.config.settings import Settings
from sku_match.config.suppliers import SupplierConfig, SupplierDirectory
from sku_match.connectors.api_lookup import ApiConnector
from sku_match.connectors.composite import CompositeConnector
from sku_match.connectors.generic import GenericConnector
from sku_match.connectors.pattern import PatternConnector
from sku_match.connectors.site_search import SiteSearchConnector
from sku_match.connectors.web_search import WebSearchConnector
from sku_match.normalization.normalizer import normalize_supplier_key
from sku_match.observability.logger import get_logger
from sku_match.protocols.connector import SupplierConnector
from sku_match.protocols.fetcher import PageFetcher

logger = get_logger("connector_registry")


class ConnectorRegistry:
    """Resolves a supplier key to its connector; unknown keys get the no-op connector."""

    def __init__(
        self,
        directory: SupplierDirectory,
        fetcher: PageFetcher | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._directory = directory
        self._fetcher = fetcher
        self._settings = settings or Settings()
        self._connectors: dict[str, SupplierConnector] = {}

    def register(self, supplier_key: str, connector: SupplierConnector) -> None:
        self._connectors[normalize_supplier_key(supplier_key)] = connector

    def get_connector(self, supplier_key: str) -> SupplierConnector:
        key = normalize_supplier_key(supplier_key)
        if not key:
            return GenericConnector()
        if key in self._connectors:
            return self._connectors[key]

        cfg = self._directory.get(key)
        if cfg is None:
            return GenericConnector()

        connector = self._build(key, cfg)
        self._connectors[key] = connector
        return connector

    def _build(self, key: str, cfg: SupplierConfig) -> SupplierConnector:
        strategies: list[SupplierConnector] = []
        if cfg.url_patterns:
            strategies.append(PatternConnector(key, cfg.url_patterns))

        if self._fetcher is not None:
            if cfg.api is not None:
                strategies.append(ApiConnector(key, cfg.api, self._fetcher))
            if cfg.site_search is not None:
                strategies.append(SiteSearchConnector(key, cfg.site_search, self._fetcher))
            if cfg.web_search_enabled and self._settings.serpapi_key:
                strategies.append(
                    WebSearchConnector(
                        key,
                        self._fetcher,
                        api_key=self._settings.serpapi_key,
                        endpoint=self._settings.serpapi_endpoint,
                        max_results=self._settings.web_search_results,
                    )
                )
        elif cfg.api or cfg.site_search or cfg.web_search_enabled:
            logger.warning("network_strategies_skipped_without_fetcher", supplier_key=key)

        if not strategies:
            return GenericConnector()
        if len(strategies) == 1:
            return strategies[0]
        return CompositeConnector(key, strategies)
