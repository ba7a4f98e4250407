"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Classification thresholds (compared against the unclamped score)
    confident_threshold: float = 0.75
    review_threshold: float = 0.55

    # Evidence weights
    w_sku: float = 0.35
    w_sku_norm: float = 0.35
    w_ndc: float = 0.35
    w_name_tokens: float = 0.20
    w_brand: float = 0.10
    search_page_penalty: float = 0.15
    name_token_limit: int = 8
    name_token_min_len: int = 3
    body_snippet_chars: int = 300

    # Fetching
    fetch_timeout_s: float = 10.0
    fetch_max_bytes: int = 2_000_000
    user_agent: str = "SkuMatch/1.0 (+https://example.com/bot)"

    # Resolution
    max_candidates: int = 10
    review_candidates: int = 5
    unverified_candidates: int = 3
    verify_concurrency: int = 1
    resolve_budget_s: float = 60.0

    # Storage
    index_db_path: str = "data/source_index.db"

    # Supplier configuration (JSON file, empty = no suppliers configured)
    supplier_config_path: str = ""

    # Web search (SerpAPI)
    serpapi_key: str = ""
    serpapi_endpoint: str = "https://serpapi.com/search.json"
    web_search_results: int = 5

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_file": ".env", "env_prefix": "MATCH_"}
