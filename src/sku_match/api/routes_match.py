"""Resolution, batch and index endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from sku_match.api.dependencies import (
    get_batch_matcher,
    get_resolver,
    get_settings,
    get_source_index,
)
from sku_match.config.settings import Settings
from sku_match.exceptions import InputParsingError, MatchEngineError, ResolutionTimeout
from sku_match.index.source_index import SourceIndex
from sku_match.jobs.batch import BatchMatcher
from sku_match.jobs.input_parser import default_supplier_key, parse_match_rows
from sku_match.models.schemas import (
    BatchRequest,
    BatchResponse,
    IndexRequest,
    IndexResponse,
    ResolveRequest,
    ResolveResponse,
)
from sku_match.resolution.resolver import SkuResolver, resolve_within_budget

router = APIRouter(prefix="/match")


@router.post("/resolve", response_model=ResolveResponse)
async def resolve(
    request: ResolveRequest,
    resolver: SkuResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> ResolveResponse:
    try:
        outcome = await resolve_within_budget(
            resolver, request.to_domain(), settings.resolve_budget_s
        )
    except ResolutionTimeout as e:
        raise HTTPException(status_code=504, detail=str(e))
    except MatchEngineError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ResolveResponse.from_outcome(outcome)


@router.post("/batch", response_model=BatchResponse)
async def batch(
    request: BatchRequest,
    matcher: BatchMatcher = Depends(get_batch_matcher),
) -> BatchResponse:
    rows = []
    for r in request.rows:
        row = r.to_domain()
        row.supplier_name = row.supplier_name or request.supplier_name
        row.supplier_key = (
            row.supplier_key or request.supplier_key or default_supplier_key(row.supplier_name)
        )
        rows.append(row)
    warnings: list[str] = []

    if request.csv_text:
        try:
            parsed = parse_match_rows(
                request.csv_text,
                supplier_name=request.supplier_name,
                supplier_key=request.supplier_key,
            )
        except InputParsingError as e:
            raise HTTPException(status_code=400, detail=str(e))
        rows.extend(parsed.rows)
        warnings.extend(parsed.warnings)

    if not rows:
        raise HTTPException(status_code=400, detail="No rows to match")

    summary = await matcher.run(request.tenant_id, rows, warnings=warnings)
    return BatchResponse.from_summary(summary)


@router.post("/index", response_model=IndexResponse)
async def index(
    request: IndexRequest,
    source_index: SourceIndex = Depends(get_source_index),
) -> IndexResponse:
    indexed = await source_index.index_from_ingestion(
        tenant_id=request.tenant_id,
        supplier_key=request.supplier_key,
        source_url=request.source_url,
        supplier_name=request.supplier_name,
        sku=request.sku,
        ndc_item_code=request.ndc_item_code,
        product_name=request.product_name,
        brand_name=request.brand_name,
        source_ingestion_id=request.source_ingestion_id,
        confidence=request.confidence,
    )
    return IndexResponse(indexed=indexed)
