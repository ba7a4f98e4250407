"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Union

ConnectorMethod = Literal["pattern", "site-search", "api", "web-search", "other"]


@dataclass(frozen=True)
class ResolutionRequest:
    tenant_id: str
    supplier_key: str
    supplier_name: str | None = None
    sku: str | None = None
    ndc_item_code: str | None = None
    product_name: str | None = None
    brand_name: str | None = None


@dataclass(frozen=True)
class NormalizedKey:
    supplier_key: str
    sku_norm: str
    ndc_item_code_norm: str
    product_name_norm: str


@dataclass(frozen=True)
class ResolveInput:
    """Raw and normalized identifiers handed to connectors and the verifier."""

    tenant_id: str
    supplier_key: str
    supplier_name: str | None = None
    sku: str | None = None
    sku_norm: str = ""
    ndc_item_code: str | None = None
    ndc_item_code_norm: str = ""
    product_name: str | None = None
    product_name_norm: str = ""
    brand_name: str | None = None

    @classmethod
    def from_request(cls, request: ResolutionRequest, key: NormalizedKey) -> ResolveInput:
        return cls(
            tenant_id=request.tenant_id,
            supplier_key=key.supplier_key,
            supplier_name=request.supplier_name,
            sku=request.sku,
            sku_norm=key.sku_norm,
            ndc_item_code=request.ndc_item_code,
            ndc_item_code_norm=key.ndc_item_code_norm,
            product_name=request.product_name,
            product_name_norm=key.product_name_norm,
            brand_name=request.brand_name,
        )


@dataclass
class CandidateUrl:
    url: str
    domain: str
    method: ConnectorMethod
    confidence: float
    reasons: list[str] = field(default_factory=list)


@dataclass
class ConnectorResult:
    candidates: list[CandidateUrl]
    debug: dict = field(default_factory=dict)


@dataclass
class VerificationResult:
    ok: bool
    score: float
    signals: list[str]
    error: str | None = None
    needs_review: bool = False
    extracted: dict | None = None


@dataclass
class VerifiedCandidate:
    candidate: CandidateUrl
    verify: VerificationResult


@dataclass
class IndexEntry:
    tenant_id: str
    supplier_key: str
    source_url: str
    source_domain: str
    confidence: float
    signals: dict = field(default_factory=dict)
    supplier_name: str | None = None
    sku: str | None = None
    sku_norm: str | None = None
    ndc_item_code: str | None = None
    ndc_item_code_norm: str | None = None
    product_name: str | None = None
    brand_name: str | None = None
    source_ingestion_id: str | None = None
    last_seen_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class IndexHit:
    entry: IndexEntry
    matched_by: str  # "index:supplier+ndc" or "index:supplier+sku"


@dataclass
class CandidateSummary:
    url: str
    score: float
    signals: list[str]


@dataclass
class ResolvedConfident:
    resolved_url: str
    confidence: float
    matched_by: str
    signals: list[str]
    status: Literal["resolved_confident"] = "resolved_confident"


@dataclass
class ResolvedNeedsReview:
    candidates: list[CandidateSummary]
    status: Literal["resolved_needs_review"] = "resolved_needs_review"


@dataclass
class Unresolved:
    candidates: list[CandidateSummary]
    status: Literal["unresolved"] = "unresolved"


ResolutionOutcome = Union[ResolvedConfident, ResolvedNeedsReview, Unresolved]


@dataclass
class FetchResponse:
    url: str
    status: int
    text: str
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class MatchRow:
    """One line of batch input before resolution."""

    supplier_key: str = ""
    supplier_name: str | None = None
    sku: str | None = None
    ndc_item_code: str | None = None
    product_name: str | None = None
    brand_name: str | None = None


RowStatus = Literal["resolved_confident", "resolved_needs_review", "unresolved", "error"]
JobStatus = Literal["succeeded", "partial", "failed"]


@dataclass
class RowResult:
    row_index: int
    supplier_key: str
    sku: str | None
    status: RowStatus
    resolved_url: str | None = None
    confidence: float | None = None
    matched_by: str | None = None
    candidates: list[CandidateSummary] = field(default_factory=list)
    error: str | None = None


@dataclass
class BatchSummary:
    job_id: str
    tenant_id: str
    status: JobStatus
    results: list[RowResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def counts(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for r in self.results:
            totals[r.status] = totals.get(r.status, 0) + 1
        return totals
