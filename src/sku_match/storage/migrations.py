"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

SOURCE_INDEX_TABLE = """
CREATE TABLE IF NOT EXISTS product_source_index (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tenant_id TEXT NOT NULL,
    supplier_key TEXT NOT NULL,
    supplier_name TEXT,
    sku TEXT,
    sku_norm TEXT,
    ndc_item_code TEXT,
    ndc_item_code_norm TEXT,
    product_name TEXT,
    brand_name TEXT,
    source_url TEXT NOT NULL,
    source_domain TEXT NOT NULL,
    source_ingestion_id TEXT,
    confidence REAL NOT NULL DEFAULT 1.0,
    signals TEXT NOT NULL DEFAULT '{}',
    last_seen_at TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

# Upsert conflict target. NULL sku_norm values never conflict with each other.
SOURCE_INDEX_SKU_UNIQUE = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_source_index_tenant_supplier_sku
ON product_source_index(tenant_id, supplier_key, sku_norm)
"""

SOURCE_INDEX_NDC_INDEX = """
CREATE INDEX IF NOT EXISTS idx_source_index_tenant_supplier_ndc
ON product_source_index(tenant_id, supplier_key, ndc_item_code_norm)
"""

SOURCE_INDEX_DOMAIN_INDEX = """
CREATE INDEX IF NOT EXISTS idx_source_index_domain ON product_source_index(source_domain)
"""


async def initialize_index_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(SOURCE_INDEX_TABLE)
        await db.execute(SOURCE_INDEX_SKU_UNIQUE)
        await db.execute(SOURCE_INDEX_NDC_INDEX)
        await db.execute(SOURCE_INDEX_DOMAIN_INDEX)
        await db.commit()
