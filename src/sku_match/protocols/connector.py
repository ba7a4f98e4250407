"""Protocol for candidate URL discovery strategies."""

from __future__ import annotations

from typing import Protocol

from sku_match.models.domain import ConnectorResult, ResolveInput


class SupplierConnector(Protocol):
    @property
    def key(self) -> str: ...

    @property
    def display_name(self) -> str: ...

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult: ...
