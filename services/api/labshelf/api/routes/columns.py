from __future__ import annotations

from labshelf.api.deps import get_column_settings, get_store
from labshelf.schemas.catalog import ColumnOut, ColumnPatchIn
from labshelf.services.catalog_store import CatalogStore
from labshelf.services.columns import ColumnSettings
from fastapi import APIRouter, Depends, HTTPException

router = APIRouter(prefix="/v1/columns", tags=["columns"])


@router.get("", response_model=list[ColumnOut])
def list_columns(
    columns: ColumnSettings = Depends(get_column_settings),
    store: CatalogStore = Depends(get_store),
):
    return columns.for_catalog(store.load())


@router.patch("/{key}", response_model=list[ColumnOut])
def patch_column(
    key: str,
    payload: ColumnPatchIn,
    columns: ColumnSettings = Depends(get_column_settings),
    store: CatalogStore = Depends(get_store),
):
    try:
        return columns.set_visible(key, payload.visible, store.load())
    except KeyError:
        raise HTTPException(status_code=404, detail="Column not found")


@router.post("/reset", response_model=list[ColumnOut])
def reset_columns(columns: ColumnSettings = Depends(get_column_settings)):
    return columns.reset()
