"""Metric recording helpers for resolutions."""

from __future__ import annotations

from sku_match.observability.logger import get_logger

logger = get_logger("metrics")


def log_discovery_metrics(
    trace_id: str,
    supplier_key: str,
    proposed: int,
    kept: int,
) -> None:
    logger.info(
        "discovery_metrics",
        trace_id=trace_id,
        supplier_key=supplier_key,
        proposed=proposed,
        kept=kept,
        dropped=proposed - kept,
    )


def log_resolution_metrics(
    trace_id: str,
    status: str,
    top_scores: list[float],
    verified: int,
    matched_by: str | None = None,
    spans: list[dict] | None = None,
    total_ms: float | None = None,
) -> None:
    logger.info(
        "resolution_metrics",
        trace_id=trace_id,
        status=status,
        top_scores=[round(s, 4) for s in top_scores[:5]],
        verified=verified,
        matched_by=matched_by,
        spans=spans or [],
        total_ms=round(total_ms, 2) if total_ms is not None else None,
    )


def log_latency(trace_id: str, stage: str, duration_ms: float) -> None:
    logger.info(
        "latency",
        trace_id=trace_id,
        stage=stage,
        duration_ms=round(duration_ms, 2),
    )
