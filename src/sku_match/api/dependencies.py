"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from sku_match.config.settings import Settings
from sku_match.config.suppliers import SupplierDirectory
from sku_match.index.source_index import SourceIndex
from sku_match.jobs.batch import BatchMatcher
from sku_match.resolution.resolver import SkuResolver
from sku_match.storage.sqlite_index_store import SQLiteIndexStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_resolver(request: Request) -> SkuResolver:
    return request.app.state.resolver


def get_batch_matcher(request: Request) -> BatchMatcher:
    return request.app.state.batch_matcher


def get_source_index(request: Request) -> SourceIndex:
    return request.app.state.source_index


def get_index_store(request: Request) -> SQLiteIndexStore:
    return request.app.state.index_store


def get_directory(request: Request) -> SupplierDirectory:
    return request.app.state.directory
