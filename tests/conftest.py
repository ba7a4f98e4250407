"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from sku_match.config.settings import Settings
from sku_match.config.suppliers import SupplierDirectory
from sku_match.models.domain import FetchResponse, IndexEntry, ResolutionRequest


class FakeFetcher:
    """Serves canned pages by URL and records every fetch."""

    def __init__(self, pages: dict[str, object] | None = None) -> None:
        self.pages: dict[str, object] = dict(pages or {})
        self.calls: list[str] = []

    def add(self, url: str, text: str, status: int = 200) -> None:
        self.pages[url] = FetchResponse(url=url, status=status, text=text)

    async def fetch(self, url: str, timeout_s: float | None = None) -> FetchResponse:
        self.calls.append(url)
        page = self.pages.get(url)
        if isinstance(page, Exception):
            raise page
        if page is None:
            return FetchResponse(url=url, status=404, text="not found")
        return page


class FakeIndexStore:
    """In-memory index store keyed like the SQLite unique index."""

    def __init__(self) -> None:
        self.entries: dict[tuple, IndexEntry] = {}
        self.upsert_calls = 0
        self.fail_upsert = False
        self.fail_lookup = False

    async def get_by_ndc(self, tenant_id, supplier_key, ndc_item_code_norm):
        if self.fail_lookup:
            raise RuntimeError("lookup failed")
        for e in self.entries.values():
            if (e.tenant_id, e.supplier_key, e.ndc_item_code_norm) == (
                tenant_id,
                supplier_key,
                ndc_item_code_norm,
            ):
                return e
        return None

    async def get_by_sku(self, tenant_id, supplier_key, sku_norm):
        if self.fail_lookup:
            raise RuntimeError("lookup failed")
        return self.entries.get((tenant_id, supplier_key, sku_norm))

    async def upsert(self, entry: IndexEntry) -> None:
        self.upsert_calls += 1
        if self.fail_upsert:
            raise RuntimeError("disk full")
        self.entries[(entry.tenant_id, entry.supplier_key, entry.sku_norm)] = entry


@pytest.fixture
def settings():
    """Test settings with temp paths and no external search."""
    tmp = tempfile.mkdtemp()
    return Settings(
        index_db_path=str(Path(tmp) / "test_index.db"),
        supplier_config_path="",
        serpapi_key="",
    )


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def index_store():
    return FakeIndexStore()


@pytest.fixture
def directory():
    return SupplierDirectory.from_mapping(
        {
            "acme": {
                "allow_domains": ["shop.acme.com"],
                "url_patterns": [
                    {"key": "skuNorm", "template": "https://shop.acme.com/p/{skuNorm}"},
                    {"key": "ndcItemCodeNorm", "template": "https://shop.acme.com/ndc/{ndcItemCodeNorm}"},
                ],
            }
        }
    )


@pytest.fixture
def sample_request():
    return ResolutionRequest(
        tenant_id="t1",
        supplier_key="acme",
        supplier_name="Acme Medical",
        sku="ABC-123",
        product_name="Nitrile Exam Gloves",
        brand_name="Acme",
    )


@pytest.fixture
def tmp_dir():
    """Create a temporary directory."""
    return tempfile.mkdtemp()
