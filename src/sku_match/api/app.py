"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from sku_match.api.middleware import RequestTimingMiddleware
from sku_match.api.routes_health import router as health_router
from sku_match.api.routes_match import router as match_router
from sku_match.config.settings import Settings
from sku_match.config.suppliers import SupplierDirectory
from sku_match.connectors.registry import ConnectorRegistry
from sku_match.fetching.http_fetcher import HttpxPageFetcher
from sku_match.index.source_index import SourceIndex
from sku_match.jobs.batch import BatchMatcher
from sku_match.observability.logger import get_logger, setup_logging
from sku_match.resolution.resolver import SkuResolver
from sku_match.storage.sqlite_index_store import SQLiteIndexStore
from sku_match.verification.verifier import CandidateVerifier

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = getattr(app.state, "settings", None) or Settings()
    setup_logging()

    # Ensure data directory exists
    Path(settings.index_db_path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    index_store = SQLiteIndexStore(settings.index_db_path)
    await index_store.initialize()
    source_index = SourceIndex(index_store)

    # Supplier configuration
    if settings.supplier_config_path:
        directory = SupplierDirectory.from_json_file(settings.supplier_config_path)
    else:
        directory = SupplierDirectory()

    # Network
    fetcher = HttpxPageFetcher(
        timeout_s=settings.fetch_timeout_s,
        max_bytes=settings.fetch_max_bytes,
        user_agent=settings.user_agent,
    )

    # Discovery, verification, resolution
    registry = ConnectorRegistry(directory, fetcher=fetcher, settings=settings)
    verifier = CandidateVerifier(fetcher, settings, directory=directory)
    resolver = SkuResolver(
        index=source_index,
        registry=registry,
        verifier=verifier,
        settings=settings,
    )
    batch_matcher = BatchMatcher(resolver, settings)

    # Attach to app state
    app.state.settings = settings
    app.state.index_store = index_store
    app.state.source_index = source_index
    app.state.directory = directory
    app.state.resolver = resolver
    app.state.batch_matcher = batch_matcher

    logger.info(
        "startup_complete",
        index_entries=await index_store.count_entries(),
        suppliers=len(directory),
    )

    yield

    await fetcher.aclose()
    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="SKU Match Engine",
        version="1.0.0",
        description="Resolve supplier SKUs to verified product page URLs",
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(match_router, tags=["match"])
    return app
