"""Canonical comparison keys for supplier-provided identifiers.

Every function here is total and idempotent: ``None`` or empty input yields
``""`` and ``f(f(x)) == f(x)``.
"""

from __future__ import annotations

import re

from sku_match.models.domain import NormalizedKey, ResolutionRequest

# NBSP, the en-quad..hair-space block and zero-width characters
_ODD_SPACE_RE = re.compile("[\u00a0\u2000-\u200d\u2028\u2029\u202f\u205f\u3000\ufeff]+")
_NON_KEY_CHARS_RE = re.compile(r"[^\w\-\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_SKU_CHARS_RE = re.compile(r"[^a-z0-9\-_]")
_TRADEMARK_RE = re.compile(r"[®™]")


def _text(s: object) -> str:
    if s is None:
        return ""
    return s if isinstance(s, str) else str(s)


def normalize_key(s: str | None) -> str:
    text = _text(s).strip().lower()
    if not text:
        return ""
    text = _ODD_SPACE_RE.sub(" ", text)
    text = _NON_KEY_CHARS_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_supplier_name(name: str | None) -> str:
    return normalize_key(name)


def normalize_supplier_key(key: str | None) -> str:
    return _text(key).strip().lower()


def normalize_sku(sku: str | None) -> str:
    return _NON_SKU_CHARS_RE.sub("", _text(sku).strip().lower())


def normalize_ndc_item_code(code: str | None) -> str:
    return _WHITESPACE_RE.sub("", _text(code).strip()).upper()


def normalize_product_name(name: str | None) -> str:
    text = _TRADEMARK_RE.sub("", _text(name))
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def normalize_request(request: ResolutionRequest) -> NormalizedKey:
    """Derive comparison keys from a request without touching it."""
    return NormalizedKey(
        supplier_key=normalize_supplier_key(request.supplier_key),
        sku_norm=normalize_sku(request.sku),
        ndc_item_code_norm=normalize_ndc_item_code(request.ndc_item_code),
        product_name_norm=normalize_product_name(request.product_name),
    )
