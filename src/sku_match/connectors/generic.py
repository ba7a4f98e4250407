"""No-op connector used for unknown or unconfigured suppliers."""

from __future__ import annotations

from sku_match.models.domain import ConnectorResult, ResolveInput


class GenericConnector:
    key = "generic"
    display_name = "Generic connector (no-op)"

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        return ConnectorResult(candidates=[])
