"""Runs several discovery strategies for one supplier and concatenates their candidates."""

from __future__ import annotations

from sku_match.models.domain import CandidateUrl, ConnectorResult, ResolveInput
from sku_match.observability.logger import get_logger
from sku_match.protocols.connector import SupplierConnector

logger = get_logger("composite_connector")


class CompositeConnector:
    def __init__(self, supplier_key: str, connectors: list[SupplierConnector]) -> None:
        self.key = supplier_key
        self.display_name = f"Composite connector for {supplier_key}"
        self._connectors = connectors

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        candidates: list[CandidateUrl] = []
        debug: dict = {}
        for connector in self._connectors:
            try:
                result = await connector.resolve_candidates(input)
            except Exception as e:
                logger.warning(
                    "connector_strategy_failed",
                    supplier_key=self.key,
                    strategy=connector.display_name,
                    error=str(e),
                )
                continue
            candidates.extend(result.candidates)
            debug[connector.display_name] = len(result.candidates)
        return ConnectorResult(candidates=candidates, debug=debug)
