from __future__ import annotations

from labshelf.api.deps import get_store
from labshelf.schemas.catalog import BookOut, LookupOut
from labshelf.services.catalog_store import BookNotFound, CatalogStore
from labshelf.services.lookup.factory import build_client, get_providers
from labshelf.services.lookup.service import (
    InvalidIsbn,
    LookupEmpty,
    LookupFailed,
    fill_from_lookup,
    lookup_isbn,
)
from labshelf.services.lookup.types import BibliographicRecord
from fastapi import APIRouter, Depends, HTTPException

router = APIRouter(prefix="/v1", tags=["lookup"])


async def _lookup(code: str) -> BibliographicRecord:
    try:
        async with build_client() as client:
            return await lookup_isbn(code, get_providers(client))
    except InvalidIsbn as e:
        raise HTTPException(status_code=422, detail=str(e))
    except LookupEmpty as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LookupFailed as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/lookup/{code}", response_model=LookupOut)
async def lookup(code: str):
    return await _lookup(code)


@router.post("/books/{book_id}/lookup", response_model=BookOut)
async def fill_book_from_lookup(book_id: str, store: CatalogStore = Depends(get_store)):
    try:
        book = store.get(book_id)
    except BookNotFound:
        raise HTTPException(status_code=404, detail="Book not found")
    if not book.isbn:
        raise HTTPException(status_code=422, detail="Book has no ISBN to look up")

    record = await _lookup(book.isbn)
    filled = fill_from_lookup(book, record)
    if filled != book:
        store.upsert(filled)
    return filled
