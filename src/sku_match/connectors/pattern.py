"""Pattern connector: substitutes normalized identifiers into URL templates."""

from __future__ import annotations

from urllib.parse import quote

from sku_match.config.suppliers import UrlPattern
from sku_match.models.domain import CandidateUrl, ConnectorResult, ResolveInput
from sku_match.safety.net_safety import domain_of

PATTERN_CONFIDENCE = 0.5

# Characters encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


def template_value(input: ResolveInput, key: str) -> str:
    if key == "skuNorm":
        return input.sku_norm or ""
    if key == "ndcItemCodeNorm":
        return input.ndc_item_code_norm or ""
    return ""


def fill_template(template: str, key: str, value: str) -> str:
    return template.replace("{" + key + "}", quote(value, safe=_URI_COMPONENT_SAFE))


class PatternConnector:
    def __init__(self, supplier_key: str, patterns: list[UrlPattern]) -> None:
        self.key = supplier_key
        self.display_name = f"Pattern connector for {supplier_key}"
        self._patterns = patterns

    async def resolve_candidates(self, input: ResolveInput) -> ConnectorResult:
        candidates: list[CandidateUrl] = []
        for pattern in self._patterns:
            value = template_value(input, pattern.key)
            if not value:
                continue
            url = fill_template(pattern.template, pattern.key, value)
            candidates.append(
                CandidateUrl(
                    url=url,
                    domain=domain_of(url),
                    method="pattern",
                    confidence=PATTERN_CONFIDENCE,
                    reasons=["pattern", f"key:{pattern.key}"],
                )
            )
        return ConnectorResult(candidates=candidates, debug={"patterns": len(self._patterns)})
