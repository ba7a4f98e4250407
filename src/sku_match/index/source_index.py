"""Tenant-scoped cache of previously verified product URLs.

The index is an optimization, never a dependency for correctness: read
failures behave like a miss and write failures are logged and dropped.
Entries have no TTL or revalidation; a moved page stays "confident" until
something overwrites it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sku_match.models.domain import IndexEntry, IndexHit
from sku_match.normalization.normalizer import (
    normalize_ndc_item_code,
    normalize_sku,
    normalize_supplier_key,
)
from sku_match.observability.logger import get_logger
from sku_match.protocols.index_store import IndexStore
from sku_match.safety.net_safety import domain_of, is_safe_public_url

logger = get_logger("source_index")

MATCHED_BY_NDC = "index:supplier+ndc"
MATCHED_BY_SKU = "index:supplier+sku"


class SourceIndex:
    def __init__(self, store: IndexStore) -> None:
        self._store = store

    async def lookup(
        self,
        tenant_id: str,
        supplier_key: str,
        sku_norm: str | None = None,
        ndc_norm: str | None = None,
    ) -> IndexHit | None:
        """NDC is the stronger key, so it is tried first; SKU only on an NDC miss."""
        if ndc_norm:
            try:
                entry = await self._store.get_by_ndc(tenant_id, supplier_key, ndc_norm)
            except Exception as e:
                logger.warning("index_lookup_failed", key="ndc", error=str(e))
                entry = None
            if entry is not None:
                return IndexHit(entry=entry, matched_by=MATCHED_BY_NDC)

        if sku_norm:
            try:
                entry = await self._store.get_by_sku(tenant_id, supplier_key, sku_norm)
            except Exception as e:
                logger.warning("index_lookup_failed", key="sku", error=str(e))
                entry = None
            if entry is not None:
                return IndexHit(entry=entry, matched_by=MATCHED_BY_SKU)

        return None

    async def upsert(self, entry: IndexEntry) -> bool:
        """Best-effort write; returns False instead of raising on failure."""
        try:
            await self._store.upsert(entry)
        except Exception as e:
            logger.warning(
                "index_upsert_failed",
                tenant_id=entry.tenant_id,
                supplier_key=entry.supplier_key,
                error=str(e),
            )
            return False
        logger.info(
            "index_upserted",
            tenant_id=entry.tenant_id,
            supplier_key=entry.supplier_key,
            source_domain=entry.source_domain,
            confidence=round(entry.confidence, 4),
        )
        return True

    async def index_from_ingestion(
        self,
        tenant_id: str,
        supplier_key: str,
        source_url: str,
        supplier_name: str | None = None,
        sku: str | None = None,
        ndc_item_code: str | None = None,
        product_name: str | None = None,
        brand_name: str | None = None,
        source_ingestion_id: str | None = None,
        confidence: float = 1.0,
        signals: dict | None = None,
    ) -> bool:
        """Record a URL the upstream ingestion engine already scraped successfully."""
        if not is_safe_public_url(source_url):
            logger.warning("index_from_ingestion_unsafe_url", tenant_id=tenant_id)
            return False

        now = datetime.now(timezone.utc)
        entry = IndexEntry(
            tenant_id=tenant_id,
            supplier_key=normalize_supplier_key(supplier_key),
            supplier_name=supplier_name,
            sku=sku,
            sku_norm=normalize_sku(sku),
            ndc_item_code=ndc_item_code,
            ndc_item_code_norm=normalize_ndc_item_code(ndc_item_code),
            product_name=product_name,
            brand_name=brand_name,
            source_url=source_url,
            source_domain=domain_of(source_url),
            source_ingestion_id=source_ingestion_id,
            confidence=max(0.0, min(1.0, confidence)),
            signals=signals if signals is not None else {"matched_by": "ingestion"},
            last_seen_at=now,
            updated_at=now,
            created_at=now,
        )
        return await self.upsert(entry)
