from __future__ import annotations

from labshelf.api.deps import get_store
from labshelf.domain.book import BookStatus
from labshelf.schemas.catalog import BookIn, BookListOut, BookOut, BulkDeleteIn, DeleteOut
from labshelf.services.catalog_query import CatalogQuery, SortDir, SortField, all_tags, filter_books
from labshelf.services.catalog_store import BookNotFound, CatalogStore, ConfirmationRequired
from fastapi import APIRouter, Depends, HTTPException

router = APIRouter(prefix="/v1/books", tags=["books"])


def _confirmation_needed(e: ConfirmationRequired) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"message": f"{e} Resend with confirm=true.", "count": e.count},
    )


@router.get("", response_model=BookListOut)
def list_books(
    q: str = "",
    tag: str = "",
    status: BookStatus | None = None,
    sort_by: SortField = SortField.title,
    sort_dir: SortDir = SortDir.asc,
    store: CatalogStore = Depends(get_store),
):
    books = store.load()
    items = filter_books(
        books,
        CatalogQuery(q=q, tag=tag, status=status, sort_by=sort_by, sort_dir=sort_dir),
    )
    return BookListOut(total=len(books), items=[b.model_dump() for b in items])


@router.get("/tags", response_model=list[str])
def list_tags(store: CatalogStore = Depends(get_store)):
    return all_tags(store.load())


@router.post("/samples", response_model=list[BookOut])
def add_samples(store: CatalogStore = Depends(get_store)):
    return store.seed_samples()


@router.post("/bulk-delete", response_model=DeleteOut)
def bulk_delete(payload: BulkDeleteIn, store: CatalogStore = Depends(get_store)):
    try:
        deleted = store.delete_many(payload.ids, confirmed=payload.confirm)
    except ConfirmationRequired as e:
        raise _confirmation_needed(e)
    return DeleteOut(deleted=deleted)


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: str, store: CatalogStore = Depends(get_store)):
    try:
        return store.get(book_id)
    except BookNotFound:
        raise HTTPException(status_code=404, detail="Book not found")


@router.post("", response_model=BookOut)
def create_book(payload: BookIn, store: CatalogStore = Depends(get_store)):
    return store.upsert(payload.to_book())


@router.put("/{book_id}", response_model=BookOut)
def update_book(book_id: str, payload: BookIn, store: CatalogStore = Depends(get_store)):
    try:
        store.get(book_id)
    except BookNotFound:
        raise HTTPException(status_code=404, detail="Book not found")
    return store.upsert(payload.to_book(book_id))


@router.delete("/{book_id}", response_model=DeleteOut)
def delete_book(book_id: str, confirm: bool = False, store: CatalogStore = Depends(get_store)):
    try:
        store.delete(book_id, confirmed=confirm)
    except BookNotFound:
        raise HTTPException(status_code=404, detail="Book not found")
    except ConfirmationRequired as e:
        raise _confirmation_needed(e)
    return DeleteOut(deleted=1)
