"""Per-supplier discovery configuration, loaded once and read-only afterwards."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from sku_match.exceptions import ConfigurationError


class UrlPattern(BaseModel):
    """URL template keyed to one normalized identifier, e.g. ``https://x.com/p/{skuNorm}``."""

    key: Literal["skuNorm", "ndcItemCodeNorm"]
    template: str


class SiteSearchConfig(BaseModel):
    base_url: str
    query_param: str = "q"
    result_link_selector: str | None = None
    max_results: int = 5


class ApiLookupConfig(BaseModel):
    # Placeholders: {skuNorm}, {ndcItemCodeNorm}
    endpoint_template: str
    results_field: str = "results"
    url_field: str = "url"
    max_results: int = 5


class SupplierConfig(BaseModel):
    allow_domains: list[str] = Field(default_factory=list)
    url_patterns: list[UrlPattern] = Field(default_factory=list)
    site_search: SiteSearchConfig | None = None
    api: ApiLookupConfig | None = None
    web_search_enabled: bool = False


class SupplierDirectory:
    """Maps canonical supplier keys to their configuration."""

    def __init__(self, suppliers: dict[str, SupplierConfig] | None = None) -> None:
        self._suppliers = {k.strip().lower(): v for k, v in (suppliers or {}).items()}

    @classmethod
    def from_mapping(cls, raw: dict) -> SupplierDirectory:
        try:
            parsed = {key: SupplierConfig.model_validate(cfg) for key, cfg in raw.items()}
        except ValidationError as e:
            raise ConfigurationError(f"Invalid supplier configuration: {e}") from e
        return cls(parsed)

    @classmethod
    def from_json_file(cls, path: str | Path) -> SupplierDirectory:
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot load supplier config '{path}': {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Supplier config '{path}' must be a JSON object")
        return cls.from_mapping(raw)

    def get(self, supplier_key: str) -> SupplierConfig | None:
        if not supplier_key:
            return None
        return self._suppliers.get(supplier_key.strip().lower())

    def allowlist_for(self, supplier_key: str) -> list[str]:
        cfg = self.get(supplier_key)
        if cfg is None:
            return []
        return [d.strip().lower() for d in cfg.allow_domains if d.strip()]

    def keys(self) -> list[str]:
        return sorted(self._suppliers)

    def __len__(self) -> int:
        return len(self._suppliers)
