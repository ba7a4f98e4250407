"""Tests for batch input parsing."""

import pytest

from sku_match.exceptions import InputParsingError
from sku_match.jobs.input_parser import default_supplier_key, parse_match_rows


def test_empty_input():
    parsed = parse_match_rows("   \n ")
    assert parsed.rows == []
    assert parsed.warnings == []


def test_headerless_paste_is_sku_brand():
    parsed = parse_match_rows("ABC-1, Acme\nXYZ-2\n", supplier_name="Henry Schein")
    assert [r.sku for r in parsed.rows] == ["ABC-1", "XYZ-2"]
    assert parsed.rows[0].brand_name == "Acme"
    assert parsed.rows[1].brand_name is None
    assert parsed.rows[0].supplier_key == "henry_schein"


def test_header_csv_with_aliases():
    text = (
        "Vendor,Supplier SKU,NDC,Description,Manufacturer\n"
        "Acme Medical,ABC-1,5555-0101,Nitrile Gloves,Acme\n"
    )
    parsed = parse_match_rows(text)
    row = parsed.rows[0]
    assert row.supplier_name == "Acme Medical"
    assert row.supplier_key == "acme_medical"
    assert row.sku == "ABC-1"
    assert row.ndc_item_code == "5555-0101"
    assert row.product_name == "Nitrile Gloves"
    assert row.brand_name == "Acme"


def test_explicit_supplier_key_column_wins():
    text = "supplier_name,supplier_key,sku\nAcme Medical,acme,ABC-1\n"
    assert parse_match_rows(text).rows[0].supplier_key == "acme"


def test_duplicates_and_empty_rows_warn():
    text = "sku,ndc_item_code,product_name,brand_name\nABC-1,,,\nabc-1,,,Acme\n,,,Acme\n,5555,,\n"
    parsed = parse_match_rows(text, supplier_key="acme")
    assert [r.sku for r in parsed.rows] == ["ABC-1", None]
    assert parsed.warnings == ["duplicate:abc-1", "empty-row"]


def test_same_sku_different_supplier_is_not_a_duplicate():
    text = "supplier_key,sku\nacme,ABC-1\nglobex,ABC-1\n"
    assert len(parse_match_rows(text).rows) == 2


def test_name_only_rows_dedupe_on_name():
    text = "product_name\nGloves™\ngloves\nMasks\n"
    parsed = parse_match_rows(text, supplier_key="acme")
    assert [r.product_name for r in parsed.rows] == ["Gloves™", "Masks"]
    assert parsed.warnings == ["duplicate:gloves"]


def test_malformed_csv_raises():
    with pytest.raises(InputParsingError):
        parse_match_rows("sku\n" + "x" * 200_000)


def test_default_supplier_key():
    assert default_supplier_key("  Henry   Schein ") == "henry_schein"
    assert default_supplier_key(None) == ""
