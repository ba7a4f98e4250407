"""Integration tests for the HTTP API (no network: no suppliers configured)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sku_match.api.app import create_app


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["index_entries"] == 0
    assert body["suppliers_configured"] == 0
    assert "X-Request-ID" in response.headers


def test_unknown_supplier_is_unresolved(client):
    response = client.post(
        "/match/resolve", json={"tenant_id": "t1", "supplier_key": "nobody", "sku": "X1"}
    )
    assert response.status_code == 200
    assert response.json() == {
        "status": "unresolved",
        "resolved_url": None,
        "confidence": None,
        "matched_by": None,
        "signals": [],
        "candidates": [],
    }


def test_indexed_url_resolves_without_discovery(client):
    indexed = client.post(
        "/match/index",
        json={
            "tenant_id": "t1",
            "supplier_key": "acme",
            "source_url": "https://shop.acme.com/p/abc-123",
            "sku": "ABC-123",
        },
    )
    assert indexed.json() == {"indexed": True}

    response = client.post(
        "/match/resolve", json={"tenant_id": "t1", "supplier_key": "ACME", "sku": "abc-123"}
    )
    body = response.json()
    assert body["status"] == "resolved_confident"
    assert body["resolved_url"] == "https://shop.acme.com/p/abc-123"
    assert body["matched_by"] == "index:supplier+sku"


def test_index_rejects_unsafe_url(client):
    response = client.post(
        "/match/index",
        json={"tenant_id": "t1", "supplier_key": "acme", "source_url": "http://10.0.0.1/x"},
    )
    assert response.json() == {"indexed": False}


def test_batch_from_csv_text(client):
    response = client.post(
        "/match/batch",
        json={
            "tenant_id": "t1",
            "supplier_name": "Acme Medical",
            "csv_text": "sku,brand\nABC-1,Acme\nabc-1,Acme\n",
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "succeeded"
    assert body["warnings"] == ["duplicate:abc-1"]
    assert len(body["results"]) == 1
    assert body["results"][0]["supplier_key"] == "acme_medical"
    assert body["results"][0]["status"] == "unresolved"


def test_batch_requires_rows(client):
    response = client.post("/match/batch", json={"tenant_id": "t1"})
    assert response.status_code == 400
