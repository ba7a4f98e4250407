"""Tests for candidate discovery connectors and the registry."""

from __future__ import annotations

import json

import httpx

from sku_match.config.suppliers import (
    ApiLookupConfig,
    SiteSearchConfig,
    SupplierDirectory,
    UrlPattern,
)
from sku_match.connectors.api_lookup import ApiConnector, extract_urls
from sku_match.connectors.composite import CompositeConnector
from sku_match.connectors.generic import GenericConnector
from sku_match.connectors.pattern import PATTERN_CONFIDENCE, PatternConnector, fill_template
from sku_match.connectors.registry import ConnectorRegistry
from sku_match.connectors.site_search import (
    SiteSearchConnector,
    extract_result_links,
    search_query_for,
)
from sku_match.connectors.web_search import (
    WebSearchConnector,
    build_queries,
    parse_organic_results,
)
from sku_match.models.domain import (
    CandidateUrl,
    ConnectorResult,
    FetchResponse,
    ResolutionRequest,
    ResolveInput,
)
from sku_match.normalization.normalizer import normalize_request


def _input(**overrides) -> ResolveInput:
    fields = {"tenant_id": "t1", "supplier_key": "acme", "sku": "ABC-123"}
    fields.update(overrides)
    request = ResolutionRequest(**fields)
    return ResolveInput.from_request(request, normalize_request(request))


class StaticFetcher:
    """Returns the same body for every URL."""

    def __init__(self, text: str, status: int = 200) -> None:
        self.text = text
        self.status = status
        self.calls: list[str] = []

    async def fetch(self, url: str, timeout_s: float | None = None) -> FetchResponse:
        self.calls.append(url)
        return FetchResponse(url=url, status=self.status, text=self.text)


class ExplodingConnector:
    key = "boom"
    display_name = "Exploding connector"

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        raise RuntimeError("boom")


class FixedConnector:
    def __init__(self, urls: list[str]) -> None:
        self.key = "fixed"
        self.display_name = "Fixed connector"
        self._urls = urls

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        return ConnectorResult(
            candidates=[
                CandidateUrl(url=u, domain="", method="other", confidence=0.1) for u in self._urls
            ]
        )


# --- pattern ---


def test_fill_template_encodes_like_uri_component():
    url = fill_template("https://x.com/p/{skuNorm}", "skuNorm", "a b/c(1)")
    assert url == "https://x.com/p/a%20b%2Fc(1)"


async def test_pattern_connector_skips_missing_identifiers():
    connector = PatternConnector(
        "acme",
        [
            UrlPattern(key="skuNorm", template="https://shop.acme.com/p/{skuNorm}"),
            UrlPattern(key="ndcItemCodeNorm", template="https://shop.acme.com/ndc/{ndcItemCodeNorm}"),
        ],
    )
    result = await connector.resolve_candidates(_input())
    assert len(result.candidates) == 1
    c = result.candidates[0]
    assert c.url == "https://shop.acme.com/p/abc-123"
    assert c.method == "pattern"
    assert c.confidence == PATTERN_CONFIDENCE
    assert c.reasons[0] == "pattern"
    assert c.domain == "shop.acme.com"


# --- registry ---


async def test_unknown_supplier_gets_generic_connector(directory):
    registry = ConnectorRegistry(directory)
    connector = registry.get_connector("nobody")
    assert isinstance(connector, GenericConnector)
    result = await connector.resolve_candidates(_input(supplier_key="nobody"))
    assert result.candidates == []


def test_empty_key_gets_generic_connector(directory):
    assert isinstance(ConnectorRegistry(directory).get_connector(""), GenericConnector)


def test_registry_is_case_insensitive_and_caches(directory):
    registry = ConnectorRegistry(directory)
    first = registry.get_connector("ACME")
    assert isinstance(first, PatternConnector)
    assert registry.get_connector(" acme ") is first


def test_registered_connector_wins(directory):
    registry = ConnectorRegistry(directory)
    custom = FixedConnector(["https://shop.acme.com/x"])
    registry.register("Acme", custom)
    assert registry.get_connector("acme") is custom


def test_multiple_strategies_build_composite(settings, fetcher):
    directory = SupplierDirectory.from_mapping(
        {
            "acme": {
                "url_patterns": [{"key": "skuNorm", "template": "https://shop.acme.com/p/{skuNorm}"}],
                "api": {"endpoint_template": "https://api.acme.com/lookup/{skuNorm}"},
            }
        }
    )
    registry = ConnectorRegistry(directory, fetcher=fetcher, settings=settings)
    assert isinstance(registry.get_connector("acme"), CompositeConnector)


def test_network_strategies_need_a_fetcher(settings):
    directory = SupplierDirectory.from_mapping(
        {"acme": {"api": {"endpoint_template": "https://api.acme.com/lookup/{skuNorm}"}}}
    )
    registry = ConnectorRegistry(directory, fetcher=None, settings=settings)
    assert isinstance(registry.get_connector("acme"), GenericConnector)


def test_web_search_requires_api_key(settings, fetcher):
    directory = SupplierDirectory.from_mapping({"acme": {"web_search_enabled": True}})
    registry = ConnectorRegistry(directory, fetcher=fetcher, settings=settings)
    assert isinstance(registry.get_connector("acme"), GenericConnector)


# --- composite ---


async def test_composite_survives_failing_strategy():
    composite = CompositeConnector(
        "acme", [ExplodingConnector(), FixedConnector(["https://a.example/1", "https://a.example/2"])]
    )
    result = await composite.resolve_candidates(_input())
    assert [c.url for c in result.candidates] == ["https://a.example/1", "https://a.example/2"]


# --- site search ---


def test_extract_result_links_keeps_same_site_links():
    html = """
    <a href="/p/abc-123">ABC</a>
    <a href="/p/abc-123#reviews">ABC reviews</a>
    <a href="https://www.shop.acme.com/p/abc-124">ABC 124</a>
    <a href="https://other.example/p/1">elsewhere</a>
    <a href="#top">top</a>
    <a href="javascript:void(0)">js</a>
    """
    links = extract_result_links(html, "https://shop.acme.com/search?q=abc")
    assert links == [
        "https://shop.acme.com/p/abc-123",
        "https://www.shop.acme.com/p/abc-124",
    ]


def test_extract_result_links_honours_selector():
    html = '<div class="result"><a href="/p/1">one</a></div><nav><a href="/help">help</a></nav>'
    links = extract_result_links(html, "https://shop.acme.com/search", "div.result a")
    assert links == ["https://shop.acme.com/p/1"]


def test_search_query_prefers_sku():
    assert search_query_for(_input(product_name="Gloves")) == "ABC-123"
    assert search_query_for(_input(sku=None, product_name="Gloves")) == "Gloves"


async def test_site_search_connector_builds_candidates():
    fetcher = StaticFetcher('<a href="/p/abc-123">hit</a><a href="/p/abc-999">other</a>')
    config = SiteSearchConfig(base_url="https://shop.acme.com/search", max_results=1)
    connector = SiteSearchConnector("acme", config, fetcher)

    result = await connector.resolve_candidates(_input())

    assert fetcher.calls == ["https://shop.acme.com/search?q=ABC-123"]
    assert [c.url for c in result.candidates] == ["https://shop.acme.com/p/abc-123"]
    assert result.candidates[0].method == "site-search"


async def test_site_search_bad_status_yields_nothing():
    fetcher = StaticFetcher("oops", status=503)
    connector = SiteSearchConnector(
        "acme", SiteSearchConfig(base_url="https://shop.acme.com/search"), fetcher
    )
    result = await connector.resolve_candidates(_input())
    assert result.candidates == []


# --- api lookup ---


def test_extract_urls_from_object_and_list():
    payload = {"results": [{"url": "https://a.example/1"}, {"name": "no url"}, "junk"]}
    assert extract_urls(payload, "results", "url") == ["https://a.example/1"]
    assert extract_urls([{"link": "https://b.example"}], "results", "link") == ["https://b.example"]
    assert extract_urls("nope", "results", "url") == []


async def test_api_connector_needs_every_placeholder():
    fetcher = StaticFetcher("{}")
    connector = ApiConnector(
        "acme",
        ApiLookupConfig(endpoint_template="https://api.acme.com/ndc/{ndcItemCodeNorm}"),
        fetcher,
    )
    result = await connector.resolve_candidates(_input())
    assert result.candidates == []
    assert fetcher.calls == []


async def test_api_connector_reads_results():
    fetcher = StaticFetcher(json.dumps({"results": [{"url": "https://shop.acme.com/p/abc-123"}]}))
    connector = ApiConnector(
        "acme", ApiLookupConfig(endpoint_template="https://api.acme.com/lookup/{skuNorm}"), fetcher
    )
    result = await connector.resolve_candidates(_input())
    assert fetcher.calls == ["https://api.acme.com/lookup/abc-123"]
    assert [c.url for c in result.candidates] == ["https://shop.acme.com/p/abc-123"]
    assert result.candidates[0].method == "api"


async def test_api_connector_tolerates_invalid_json():
    connector = ApiConnector(
        "acme",
        ApiLookupConfig(endpoint_template="https://api.acme.com/lookup/{skuNorm}"),
        StaticFetcher("<html>"),
    )
    result = await connector.resolve_candidates(_input())
    assert result.candidates == []


# --- web search ---


def test_build_queries_dedupes_case_insensitively():
    queries = build_queries(
        _input(supplier_key="acme", supplier_name="ACME", product_name="Gloves", brand_name="Acme")
    )
    assert queries[0] == "ABC-123 ACME"
    assert "ABC-123 acme" not in queries
    assert '"Gloves" Acme' in queries
    assert len(queries) == len({q.lower() for q in queries})


def test_parse_organic_results():
    payload = {"organic_results": [{"link": "https://a.example/p#x"}, {"title": "no link"}]}
    assert parse_organic_results(payload) == ["https://a.example/p"]
    assert parse_organic_results(None) == []


async def test_web_search_without_key_does_nothing():
    fetcher = StaticFetcher("{}")
    connector = WebSearchConnector("acme", fetcher, api_key="")
    result = await connector.resolve_candidates(_input())
    assert result.candidates == []
    assert fetcher.calls == []


async def test_web_search_collects_unique_results():
    payload = {"organic_results": [{"link": "https://a.example/1"}, {"link": "https://a.example/2"}]}
    fetcher = StaticFetcher(json.dumps(payload))
    connector = WebSearchConnector("acme", fetcher, api_key="k", max_results=2)

    result = await connector.resolve_candidates(_input())

    assert [c.url for c in result.candidates] == ["https://a.example/1", "https://a.example/2"]
    assert all(c.method == "web-search" for c in result.candidates)
    # Enough results after the first query
    assert len(fetcher.calls) == 1
    assert httpx.URL(fetcher.calls[0]).params["api_key"] == "k"
