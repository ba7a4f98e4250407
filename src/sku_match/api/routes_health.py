"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sku_match.api.dependencies import get_directory, get_index_store
from sku_match.config.suppliers import SupplierDirectory
from sku_match.models.schemas import HealthResponse
from sku_match.storage.sqlite_index_store import SQLiteIndexStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    index_store: SQLiteIndexStore = Depends(get_index_store),
    directory: SupplierDirectory = Depends(get_directory),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        index_entries=await index_store.count_entries(),
        suppliers_configured=len(directory),
    )
