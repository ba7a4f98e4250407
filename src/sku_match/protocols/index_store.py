"""Protocol for the persistence collaborator behind the source index."""

from __future__ import annotations

from typing import Protocol

from sku_match.models.domain import IndexEntry


class IndexStore(Protocol):
    async def get_by_ndc(
        self, tenant_id: str, supplier_key: str, ndc_item_code_norm: str
    ) -> IndexEntry | None: ...

    async def get_by_sku(
        self, tenant_id: str, supplier_key: str, sku_norm: str
    ) -> IndexEntry | None: ...

    async def upsert(self, entry: IndexEntry) -> None:
        """Insert or overwrite on (tenant_id, supplier_key, sku_norm)."""
        ...
