"""Evidence-based verification of a single candidate product page.

The verifier fetches the candidate once and adds up independent evidence
weights found in the lowercased body:

    raw SKU              +w_sku          sku_found
    normalized SKU       +w_sku_norm     sku_norm_found (only if raw missed)
    normalized NDC code  +w_ndc          ndc_found
    product-name tokens  +w_name * ratio name_tokens
    brand name           +w_brand        brand_found

Listing/search pages below the confident threshold are penalized. The score
is left unclamped (every term firing sums to 1.35); thresholds
operate on that raw value.
"""

from __future__ import annotations

import re

from sku_match.config.settings import Settings
from sku_match.config.suppliers import SupplierDirectory
from sku_match.models.domain import ResolveInput, VerificationResult
from sku_match.normalization.normalizer import (
    normalize_ndc_item_code,
    normalize_product_name,
    normalize_sku,
)
from sku_match.observability.logger import get_logger
from sku_match.protocols.fetcher import PageFetcher
from sku_match.safety.net_safety import domain_of, is_allowlisted, is_safe_public_url
from sku_match.verification.signals import Signal

logger = get_logger("verifier")

SEARCH_PAGE_RE = re.compile(
    r"<input[^>]*name=[\"']?q|search results|category|product-listing",
    re.IGNORECASE,
)


def is_search_page(html: str) -> bool:
    return SEARCH_PAGE_RE.search(html) is not None


class CandidateVerifier:
    def __init__(
        self,
        fetcher: PageFetcher,
        settings: Settings,
        directory: SupplierDirectory | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._settings = settings
        self._directory = directory or SupplierDirectory()

    async def verify(self, input: ResolveInput, candidate_url: str) -> VerificationResult:
        if not is_safe_public_url(candidate_url):
            return VerificationResult(ok=False, score=0.0, signals=[Signal.UNSAFE_URL])

        allowlist = self._directory.allowlist_for(input.supplier_key)
        if not is_allowlisted(candidate_url, allowlist):
            return VerificationResult(ok=False, score=0.0, signals=[Signal.NOT_IN_ALLOWLIST])

        try:
            response = await self._fetcher.fetch(
                candidate_url, timeout_s=self._settings.fetch_timeout_s
            )
        except Exception as e:
            logger.warning("candidate_fetch_failed", url=candidate_url, error=str(e))
            return VerificationResult(
                ok=False, score=0.0, signals=[Signal.FETCH_ERROR], error=str(e) or type(e).__name__
            )

        text = response.text or ""
        score, signals = self.score_body(input, text)

        ok = score >= self._settings.confident_threshold
        needs_review = not ok and score >= self._settings.review_threshold
        body = text.lower()
        logger.debug(
            "candidate_verified",
            url=candidate_url,
            status=response.status,
            score=round(score, 4),
            signals=signals,
        )
        return VerificationResult(
            ok=ok,
            score=score,
            signals=signals,
            needs_review=needs_review,
            extracted={
                "domain": domain_of(candidate_url),
                "body_snippet": body[: self._settings.body_snippet_chars],
            },
        )

    def score_body(self, input: ResolveInput, text: str) -> tuple[float, list[str]]:
        s = self._settings
        body = text.lower()
        score = 0.0
        signals: list[str] = []

        sku = (input.sku or "").lower()
        if sku and sku in body:
            score += s.w_sku
            signals.append(Signal.SKU_FOUND)

        sku_norm = normalize_sku(input.sku_norm or input.sku)
        if sku_norm and sku_norm in body:
            score += s.w_sku_norm
            if Signal.SKU_FOUND not in signals:
                signals.append(Signal.SKU_NORM_FOUND)

        ndc = normalize_ndc_item_code(input.ndc_item_code_norm or input.ndc_item_code)
        if ndc and ndc.lower() in body:
            score += s.w_ndc
            signals.append(Signal.NDC_FOUND)

        name = normalize_product_name(input.product_name or input.product_name_norm)
        if name:
            tokens = name.split()[: s.name_token_limit]
            hits = sum(1 for t in tokens if len(t) >= s.name_token_min_len and t in body)
            token_score = min(1.0, hits / max(1, len(tokens))) * s.w_name_tokens
            if token_score > 0:
                score += token_score
                signals.append(Signal.NAME_TOKENS)

        brand = (input.brand_name or "").lower()
        if brand and brand in body:
            score += s.w_brand
            signals.append(Signal.BRAND_FOUND)

        if is_search_page(text) and score < s.confident_threshold:
            signals.append(Signal.SEARCH_PAGE)
            score = max(0.0, score - s.search_page_penalty)

        return score, signals
