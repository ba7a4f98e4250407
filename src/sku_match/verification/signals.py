"""Evidence tags attached to verification results."""


class Signal:
    SKU_FOUND = "sku_found"
    SKU_NORM_FOUND = "sku_norm_found"
    NDC_FOUND = "ndc_found"
    NAME_TOKENS = "name_tokens"
    BRAND_FOUND = "brand_found"
    SEARCH_PAGE = "search_page"

    UNSAFE_URL = "unsafe_url"
    NOT_IN_ALLOWLIST = "not_in_allowlist"
    FETCH_ERROR = "fetch_error"
    VERIFY_FAILED = "verify_failed"

    UNVERIFIED = "unverified"
