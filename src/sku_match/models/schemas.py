"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from sku_match.models.domain import (
    BatchSummary,
    MatchRow,
    ResolutionOutcome,
    ResolutionRequest,
    ResolvedConfident,
)


class ResolveRequest(BaseModel):
    tenant_id: str
    supplier_key: str = ""
    supplier_name: str | None = None
    sku: str | None = None
    ndc_item_code: str | None = None
    product_name: str | None = None
    brand_name: str | None = None

    def to_domain(self) -> ResolutionRequest:
        return ResolutionRequest(**self.model_dump())


class CandidateSummaryModel(BaseModel):
    url: str
    score: float
    signals: list[str]


class ResolveResponse(BaseModel):
    status: Literal["resolved_confident", "resolved_needs_review", "unresolved"]
    resolved_url: str | None = None
    confidence: float | None = None
    matched_by: str | None = None
    signals: list[str] = Field(default_factory=list)
    candidates: list[CandidateSummaryModel] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: ResolutionOutcome) -> ResolveResponse:
        if isinstance(outcome, ResolvedConfident):
            return cls(
                status=outcome.status,
                resolved_url=outcome.resolved_url,
                confidence=outcome.confidence,
                matched_by=outcome.matched_by,
                signals=outcome.signals,
            )
        return cls(
            status=outcome.status,
            candidates=[
                CandidateSummaryModel(url=c.url, score=c.score, signals=c.signals)
                for c in outcome.candidates
            ],
        )


class MatchRowModel(BaseModel):
    supplier_key: str = ""
    supplier_name: str | None = None
    sku: str | None = None
    ndc_item_code: str | None = None
    product_name: str | None = None
    brand_name: str | None = None

    def to_domain(self) -> MatchRow:
        return MatchRow(**self.model_dump())


class BatchRequest(BaseModel):
    tenant_id: str
    rows: list[MatchRowModel] = Field(default_factory=list)
    csv_text: str | None = None
    supplier_name: str | None = None
    supplier_key: str | None = None


class RowResultModel(BaseModel):
    row_index: int
    supplier_key: str
    sku: str | None = None
    status: Literal["resolved_confident", "resolved_needs_review", "unresolved", "error"]
    resolved_url: str | None = None
    confidence: float | None = None
    matched_by: str | None = None
    candidates: list[CandidateSummaryModel] = Field(default_factory=list)
    error: str | None = None


class BatchResponse(BaseModel):
    job_id: str
    tenant_id: str
    status: Literal["succeeded", "partial", "failed"]
    counts: dict[str, int]
    warnings: list[str]
    results: list[RowResultModel]
    duration_ms: float

    @classmethod
    def from_summary(cls, summary: BatchSummary) -> BatchResponse:
        return cls(
            job_id=summary.job_id,
            tenant_id=summary.tenant_id,
            status=summary.status,
            counts=summary.counts,
            warnings=summary.warnings,
            duration_ms=summary.duration_ms,
            results=[
                RowResultModel(
                    row_index=r.row_index,
                    supplier_key=r.supplier_key,
                    sku=r.sku,
                    status=r.status,
                    resolved_url=r.resolved_url,
                    confidence=r.confidence,
                    matched_by=r.matched_by,
                    candidates=[
                        CandidateSummaryModel(url=c.url, score=c.score, signals=c.signals)
                        for c in r.candidates
                    ],
                    error=r.error,
                )
                for r in summary.results
            ],
        )


class IndexRequest(BaseModel):
    tenant_id: str
    supplier_key: str
    source_url: str
    supplier_name: str | None = None
    sku: str | None = None
    ndc_item_code: str | None = None
    product_name: str | None = None
    brand_name: str | None = None
    source_ingestion_id: str | None = None
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class IndexResponse(BaseModel):
    indexed: bool


class HealthResponse(BaseModel):
    status: str
    index_entries: int
    suppliers_configured: int
