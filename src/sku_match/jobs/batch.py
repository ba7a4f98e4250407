"""Batch matching: resolve many rows for one tenant and summarize the job."""

from __future__ import annotations

import time
from uuid import uuid4

from sku_match.config.settings import Settings
from sku_match.models.domain import (
    BatchSummary,
    JobStatus,
    MatchRow,
    ResolutionRequest,
    ResolvedConfident,
    RowResult,
)
from sku_match.observability.logger import get_logger
from sku_match.resolution.resolver import SkuResolver, resolve_within_budget

logger = get_logger("batch")


def job_status(results: list[RowResult]) -> JobStatus:
    errors = sum(1 for r in results if r.status == "error")
    if errors == 0:
        return "succeeded"
    if errors < len(results):
        return "partial"
    return "failed"


class BatchMatcher:
    def __init__(self, resolver: SkuResolver, settings: Settings) -> None:
        self._resolver = resolver
        self._settings = settings

    async def run(
        self,
        tenant_id: str,
        rows: list[MatchRow],
        warnings: list[str] | None = None,
        job_id: str | None = None,
    ) -> BatchSummary:
        job_id = job_id or str(uuid4())
        start = time.monotonic()
        logger.info("batch_started", job_id=job_id, tenant_id=tenant_id, rows=len(rows))

        results = []
        for i, row in enumerate(rows):
            results.append(await self._run_row(tenant_id, i, row))

        summary = BatchSummary(
            job_id=job_id,
            tenant_id=tenant_id,
            status=job_status(results),
            results=results,
            warnings=list(warnings or []),
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        logger.info(
            "batch_completed",
            job_id=job_id,
            status=summary.status,
            counts=summary.counts,
            duration_ms=summary.duration_ms,
        )
        return summary

    async def _run_row(self, tenant_id: str, index: int, row: MatchRow) -> RowResult:
        request = ResolutionRequest(
            tenant_id=tenant_id,
            supplier_key=row.supplier_key,
            supplier_name=row.supplier_name,
            sku=row.sku,
            ndc_item_code=row.ndc_item_code,
            product_name=row.product_name,
            brand_name=row.brand_name,
        )
        try:
            outcome = await resolve_within_budget(
                self._resolver, request, self._settings.resolve_budget_s
            )
        except Exception as e:
            logger.warning("batch_row_failed", row=index, sku=row.sku, error=str(e))
            return RowResult(
                row_index=index,
                supplier_key=row.supplier_key,
                sku=row.sku,
                status="error",
                error=str(e) or type(e).__name__,
            )

        if isinstance(outcome, ResolvedConfident):
            return RowResult(
                row_index=index,
                supplier_key=row.supplier_key,
                sku=row.sku,
                status=outcome.status,
                resolved_url=outcome.resolved_url,
                confidence=outcome.confidence,
                matched_by=outcome.matched_by,
            )
        return RowResult(
            row_index=index,
            supplier_key=row.supplier_key,
            sku=row.sku,
            status=outcome.status,
            candidates=list(outcome.candidates),
        )
