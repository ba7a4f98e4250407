"""SQLite-backed store for verified (tenant, supplier, identifier) -> URL mappings."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import aiosqlite

from sku_match.exceptions import IndexStoreError
from sku_match.models.domain import IndexEntry
from sku_match.storage.migrations import initialize_index_db

_COLUMNS = (
    "tenant_id",
    "supplier_key",
    "supplier_name",
    "sku",
    "sku_norm",
    "ndc_item_code",
    "ndc_item_code_norm",
    "product_name",
    "brand_name",
    "source_url",
    "source_domain",
    "source_ingestion_id",
    "confidence",
    "signals",
    "last_seen_at",
    "created_at",
    "updated_at",
)

# created_at is kept from the first insert
_UPDATE_ON_CONFLICT = ", ".join(
    f"{col} = excluded.{col}"
    for col in _COLUMNS
    if col not in ("tenant_id", "supplier_key", "sku_norm", "created_at")
)

UPSERT_SQL = (
    f"INSERT INTO product_source_index ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)}) "
    f"ON CONFLICT(tenant_id, supplier_key, sku_norm) DO UPDATE SET {_UPDATE_ON_CONFLICT}"
)


class SQLiteIndexStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_index_db(self._db_path)

    async def get_by_ndc(
        self, tenant_id: str, supplier_key: str, ndc_item_code_norm: str
    ) -> IndexEntry | None:
        return await self._get_latest("ndc_item_code_norm", tenant_id, supplier_key, ndc_item_code_norm)

    async def get_by_sku(
        self, tenant_id: str, supplier_key: str, sku_norm: str
    ) -> IndexEntry | None:
        return await self._get_latest("sku_norm", tenant_id, supplier_key, sku_norm)

    async def upsert(self, entry: IndexEntry) -> None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(UPSERT_SQL, self._entry_to_row(entry))
                await db.commit()
        except aiosqlite.Error as e:
            raise IndexStoreError(f"Index upsert failed: {e}") from e

    async def count_entries(self, tenant_id: str | None = None) -> int:
        sql = "SELECT COUNT(*) FROM product_source_index"
        params: tuple = ()
        if tenant_id is not None:
            sql += " WHERE tenant_id = ?"
            params = (tenant_id,)
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(sql, params) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    async def _get_latest(
        self, column: str, tenant_id: str, supplier_key: str, value: str
    ) -> IndexEntry | None:
        if not value:
            return None
        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    f"SELECT * FROM product_source_index "
                    f"WHERE tenant_id = ? AND supplier_key = ? AND {column} = ? "
                    f"ORDER BY last_seen_at DESC, updated_at DESC LIMIT 1",
                    (tenant_id, supplier_key, value),
                ) as cursor:
                    row = await cursor.fetchone()
                    if row is None:
                        return None
                    return self._row_to_entry(row)
        except aiosqlite.Error as e:
            raise IndexStoreError(f"Index lookup by {column} failed: {e}") from e

    @staticmethod
    def _entry_to_row(entry: IndexEntry) -> tuple:
        return (
            entry.tenant_id,
            entry.supplier_key,
            entry.supplier_name,
            entry.sku,
            entry.sku_norm or None,
            entry.ndc_item_code,
            entry.ndc_item_code_norm or None,
            entry.product_name,
            entry.brand_name,
            entry.source_url,
            entry.source_domain,
            entry.source_ingestion_id,
            entry.confidence,
            json.dumps(entry.signals),
            entry.last_seen_at.isoformat(),
            entry.created_at.isoformat(),
            entry.updated_at.isoformat(),
        )

    @staticmethod
    def _parse_ts(value: str) -> datetime:
        ts = datetime.fromisoformat(value)
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)

    @classmethod
    def _row_to_entry(cls, row: aiosqlite.Row) -> IndexEntry:
        return IndexEntry(
            tenant_id=row["tenant_id"],
            supplier_key=row["supplier_key"],
            supplier_name=row["supplier_name"],
            sku=row["sku"],
            sku_norm=row["sku_norm"],
            ndc_item_code=row["ndc_item_code"],
            ndc_item_code_norm=row["ndc_item_code_norm"],
            product_name=row["product_name"],
            brand_name=row["brand_name"],
            source_url=row["source_url"],
            source_domain=row["source_domain"],
            source_ingestion_id=row["source_ingestion_id"],
            confidence=row["confidence"],
            signals=json.loads(row["signals"]),
            last_seen_at=cls._parse_ts(row["last_seen_at"]),
            created_at=cls._parse_ts(row["created_at"]),
            updated_at=cls._parse_ts(row["updated_at"]),
        )
