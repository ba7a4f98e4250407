"""SKU-to-URL resolver: index lookup, then discovery, verification and classification."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from sku_match.config.settings import Settings
from sku_match.connectors.registry import ConnectorRegistry
from sku_match.exceptions import ResolutionTimeout
from sku_match.index.source_index import SourceIndex
from sku_match.models.domain import (
    CandidateSummary,
    CandidateUrl,
    IndexEntry,
    IndexHit,
    NormalizedKey,
    ResolutionOutcome,
    ResolutionRequest,
    ResolvedConfident,
    ResolvedNeedsReview,
    ResolveInput,
    Unresolved,
    VerificationResult,
    VerifiedCandidate,
)
from sku_match.normalization.normalizer import normalize_request
from sku_match.observability.logger import get_logger
from sku_match.observability.metrics import log_discovery_metrics, log_resolution_metrics
from sku_match.observability.tracing import TraceContext
from sku_match.safety.net_safety import domain_of, is_safe_public_url
from sku_match.verification.signals import Signal
from sku_match.verification.verifier import CandidateVerifier

logger = get_logger("resolver")


def select_candidates(candidates: list[CandidateUrl], limit: int) -> list[CandidateUrl]:
    """Drop unsafe URLs, dedupe by exact URL (first wins), keep the first ``limit``."""
    seen: set[str] = set()
    kept: list[CandidateUrl] = []
    for c in candidates:
        if not is_safe_public_url(c.url) or c.url in seen:
            continue
        seen.add(c.url)
        kept.append(c)
        if len(kept) >= limit:
            break
    return kept


def rank_verified(verified: list[VerifiedCandidate]) -> list[VerifiedCandidate]:
    # Stable sort: equal scores keep discovery order
    return sorted(verified, key=lambda v: v.verify.score, reverse=True)


def _summaries(verified: list[VerifiedCandidate], limit: int) -> list[CandidateSummary]:
    return [
        CandidateSummary(url=v.candidate.url, score=v.verify.score, signals=list(v.verify.signals))
        for v in verified[:limit]
    ]


def _signal_tags(signals: object) -> list[str]:
    if isinstance(signals, dict):
        tags = signals.get("tags", [])
        return [str(t) for t in tags] if isinstance(tags, list) else []
    if isinstance(signals, list):
        return [str(t) for t in signals]
    return []


def _log_outcome(
    trace: TraceContext,
    outcome: ResolutionOutcome,
    scores: list[float],
    verified: int,
    matched_by: str | None = None,
) -> None:
    log_resolution_metrics(
        trace.trace_id,
        outcome.status,
        scores,
        verified,
        matched_by,
        spans=trace.span_summary(),
        total_ms=trace.elapsed_ms,
    )


class SkuResolver:
    def __init__(
        self,
        index: SourceIndex,
        registry: ConnectorRegistry,
        verifier: CandidateVerifier,
        settings: Settings,
    ) -> None:
        self._index = index
        self._registry = registry
        self._verifier = verifier
        self._settings = settings

    async def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        trace = TraceContext()
        key = normalize_request(request)

        # Phase 1: index lookup (no network)
        with trace.span("index_lookup"):
            hit = await self._index.lookup(
                request.tenant_id,
                key.supplier_key,
                sku_norm=key.sku_norm or None,
                ndc_norm=key.ndc_item_code_norm or None,
            )
        if hit is not None:
            outcome = self._from_index_hit(hit)
            _log_outcome(trace, outcome, [outcome.confidence], 0, hit.matched_by)
            return outcome

        # Phase 2: discovery
        input = ResolveInput.from_request(request, key)
        with trace.span("discovery", supplier_key=key.supplier_key):
            proposed = await self._discover(input)
            candidates = select_candidates(proposed, self._settings.max_candidates)
        log_discovery_metrics(trace.trace_id, key.supplier_key, len(proposed), len(candidates))

        if not candidates:
            outcome = Unresolved(
                candidates=[
                    CandidateSummary(url=c.url, score=0.0, signals=[Signal.UNVERIFIED])
                    for c in proposed[: self._settings.unverified_candidates]
                ]
            )
            _log_outcome(trace, outcome, [], 0)
            return outcome

        with trace.span("verification", candidates=len(candidates)):
            verified = await self._verify_all(input, candidates)

        ranked = rank_verified(verified)
        outcome = await self._classify(request, key, ranked)
        _log_outcome(
            trace,
            outcome,
            [v.verify.score for v in ranked],
            len(ranked),
            getattr(outcome, "matched_by", None),
        )
        return outcome

    async def _discover(self, input: ResolveInput) -> list[CandidateUrl]:
        connector = self._registry.get_connector(input.supplier_key or "generic")
        try:
            result = await connector.resolve_candidates(input)
        except Exception as e:
            logger.warning(
                "candidate_discovery_failed",
                supplier_key=input.supplier_key,
                connector=connector.display_name,
                error=str(e),
            )
            return []
        return list(result.candidates)

    async def _verify_one(self, input: ResolveInput, candidate: CandidateUrl) -> VerifiedCandidate:
        try:
            result = await self._verifier.verify(input, candidate.url)
        except Exception as e:
            logger.warning("candidate_verify_failed", url=candidate.url, error=str(e))
            result = VerificationResult(
                ok=False, score=0.0, signals=[Signal.VERIFY_FAILED], error=str(e)
            )
        return VerifiedCandidate(candidate=candidate, verify=result)

    async def _verify_all(
        self, input: ResolveInput, candidates: list[CandidateUrl]
    ) -> list[VerifiedCandidate]:
        concurrency = self._settings.verify_concurrency
        if concurrency <= 1:
            return [await self._verify_one(input, c) for c in candidates]

        semaphore = asyncio.Semaphore(concurrency)

        async def bounded(c: CandidateUrl) -> VerifiedCandidate:
            async with semaphore:
                return await self._verify_one(input, c)

        # gather preserves input order, which keeps tie-breaking deterministic
        return list(await asyncio.gather(*(bounded(c) for c in candidates)))

    async def _classify(
        self,
        request: ResolutionRequest,
        key: NormalizedKey,
        ranked: list[VerifiedCandidate],
    ) -> ResolutionOutcome:
        best = ranked[0]
        score = best.verify.score

        if best.verify.ok and score >= self._settings.confident_threshold:
            matched_by = f"connector:{best.candidate.method or 'unknown'}"
            await self._index.upsert(self._build_entry(request, key, best, matched_by))
            return ResolvedConfident(
                resolved_url=best.candidate.url,
                confidence=min(1.0, score),
                matched_by=matched_by,
                signals=list(best.verify.signals),
            )

        if score >= self._settings.review_threshold:
            return ResolvedNeedsReview(
                candidates=_summaries(ranked, self._settings.review_candidates)
            )

        return Unresolved(candidates=_summaries(ranked, self._settings.review_candidates))

    @staticmethod
    def _from_index_hit(hit: IndexHit) -> ResolvedConfident:
        entry = hit.entry
        confidence = entry.confidence if entry.confidence is not None else 1.0
        return ResolvedConfident(
            resolved_url=entry.source_url,
            confidence=float(confidence),
            matched_by=hit.matched_by,
            signals=_signal_tags(entry.signals),
        )

    @staticmethod
    def _build_entry(
        request: ResolutionRequest,
        key: NormalizedKey,
        best: VerifiedCandidate,
        matched_by: str,
    ) -> IndexEntry:
        now = datetime.now(timezone.utc)
        return IndexEntry(
            tenant_id=request.tenant_id,
            supplier_key=key.supplier_key,
            supplier_name=request.supplier_name,
            sku=request.sku,
            sku_norm=key.sku_norm,
            ndc_item_code=request.ndc_item_code,
            ndc_item_code_norm=key.ndc_item_code_norm,
            product_name=request.product_name,
            brand_name=request.brand_name,
            source_url=best.candidate.url,
            source_domain=domain_of(best.candidate.url),
            confidence=min(1.0, best.verify.score),
            signals={
                "tags": list(best.verify.signals),
                "matched_by": matched_by,
                "extracted": best.verify.extracted or {},
            },
            last_seen_at=now,
            updated_at=now,
            created_at=now,
        )


async def resolve_within_budget(
    resolver: SkuResolver, request: ResolutionRequest, budget_s: float
) -> ResolutionOutcome:
    """Caller-side wall-clock bound for a full resolution."""
    try:
        return await asyncio.wait_for(resolver.resolve(request), timeout=budget_s)
    except asyncio.TimeoutError as e:
        raise ResolutionTimeout(
            f"Resolution for supplier '{request.supplier_key}' exceeded {budget_s}s"
        ) from e
