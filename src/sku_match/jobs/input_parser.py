"""Parse pasted text or CSV uploads into batch match rows."""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field

from sku_match.exceptions import InputParsingError
from sku_match.models.domain import MatchRow
from sku_match.normalization.normalizer import (
    normalize_ndc_item_code,
    normalize_product_name,
    normalize_sku,
    normalize_supplier_key,
)

_HEADER_ALIASES: dict[str, str] = {
    "supplier": "supplier_name",
    "supplier_name": "supplier_name",
    "vendor": "supplier_name",
    "vendor_name": "supplier_name",
    "supplier_key": "supplier_key",
    "vendor_key": "supplier_key",
    "sku": "sku",
    "supplier_sku": "sku",
    "item_number": "sku",
    "part_number": "sku",
    "ndc": "ndc_item_code",
    "ndc_item_code": "ndc_item_code",
    "item_code": "ndc_item_code",
    "product_name": "product_name",
    "product": "product_name",
    "name": "product_name",
    "description": "product_name",
    "brand": "brand_name",
    "brand_name": "brand_name",
    "manufacturer": "brand_name",
}

_HEADER_SEP_RE = re.compile(r"[\s\-]+")
_WS_RE = re.compile(r"\s+")


@dataclass
class ParsedRows:
    rows: list[MatchRow] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def default_supplier_key(supplier_name: str | None) -> str:
    """Fallback key derived from a display name: ``"Henry Schein"`` -> ``"henry_schein"``."""
    return _WS_RE.sub("_", (supplier_name or "").strip().lower())


def _header_field(cell: str) -> str | None:
    return _HEADER_ALIASES.get(_HEADER_SEP_RE.sub("_", cell.strip().lower()))


def _detect_header(first: list[str]) -> dict[int, str] | None:
    mapping = {}
    for i, cell in enumerate(first):
        name = _header_field(cell)
        if name is not None and name not in mapping.values():
            mapping[i] = name
    identifying = {"sku", "ndc_item_code", "product_name"}
    if identifying & set(mapping.values()):
        return mapping
    return None


def _cell(record: list[str], i: int) -> str | None:
    if i >= len(record):
        return None
    value = record[i].strip()
    return value or None


def parse_match_rows(
    text: str,
    supplier_name: str | None = None,
    supplier_key: str | None = None,
) -> ParsedRows:
    """Parse a header CSV or a header-less ``sku,brand`` paste.

    ``supplier_name``/``supplier_key`` fill rows that do not carry their own.
    Rows without any identifier are skipped with an ``empty-row`` warning and
    repeats of the same (supplier, sku, ndc) with ``duplicate:<sku>``.
    """
    text = (text or "").strip()
    if not text:
        return ParsedRows()

    try:
        records = [r for r in csv.reader(io.StringIO(text)) if any(c.strip() for c in r)]
    except csv.Error as e:
        raise InputParsingError(f"Could not parse match input: {e}") from e

    header = _detect_header(records[0]) if records else None
    if header is not None:
        records = records[1:]
    else:
        header = {0: "sku", 1: "brand_name"}

    parsed = ParsedRows()
    seen: set[tuple[str, str, str, str]] = set()

    for record in records:
        values = {name: _cell(record, i) for i, name in header.items()}
        row = MatchRow(
            supplier_name=values.get("supplier_name") or supplier_name,
            supplier_key=values.get("supplier_key") or supplier_key or "",
            sku=values.get("sku"),
            ndc_item_code=values.get("ndc_item_code"),
            product_name=values.get("product_name"),
            brand_name=values.get("brand_name"),
        )
        if not row.supplier_key:
            row.supplier_key = default_supplier_key(row.supplier_name)

        sku_norm = normalize_sku(row.sku)
        ndc_norm = normalize_ndc_item_code(row.ndc_item_code)
        if not (sku_norm or ndc_norm or row.product_name):
            parsed.warnings.append("empty-row")
            continue

        # Name only matters for dedupe when no identifier is present
        name_key = "" if (sku_norm or ndc_norm) else normalize_product_name(row.product_name)
        dedupe_key = (normalize_supplier_key(row.supplier_key), sku_norm, ndc_norm, name_key)
        if dedupe_key in seen:
            parsed.warnings.append(f"duplicate:{sku_norm or ndc_norm or name_key}")
            continue
        seen.add(dedupe_key)
        parsed.rows.append(row)

    return parsed
