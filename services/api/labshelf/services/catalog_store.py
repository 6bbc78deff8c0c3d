from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable

from pydantic import ValidationError
from sqlalchemy.orm import Session

from labshelf.core.config import settings
from labshelf.crud.storage import get_payload, put_payload
from labshelf.domain.book import Book, BookStatus, catalog_adapter, new_book_id

logger = logging.getLogger(__name__)


class StorageCorrupt(Exception):
    pass


class BookNotFound(Exception):
    def __init__(self, book_id: str):
        super().__init__(f"Book not found: {book_id}")
        self.book_id = book_id


class ConfirmationRequired(Exception):
    """A destructive operation was requested without confirmation."""

    def __init__(self, count: int):
        super().__init__(f"Deleting {count} book(s) requires confirmation.")
        self.count = count


def decode_catalog(payload: str) -> list[Book]:
    try:
        return catalog_adapter.validate_json(payload)
    except ValidationError as e:
        raise StorageCorrupt(str(e)) from e


def encode_catalog_json(books: list[Book]) -> str:
    return catalog_adapter.dump_json(books).decode("utf-8")


def _assign_missing_ids(books: list[Book]) -> list[Book]:
    """Give records with an empty or repeated id a new one.

    Returns ``books`` itself when nothing needed fixing.
    """
    seen: set[str] = set()
    out: list[Book] = []
    changed = False
    for b in books:
        if not b.id or b.id in seen:
            b = b.model_copy(update={"id": new_book_id()})
            changed = True
        seen.add(b.id)
        out.append(b)
    return out if changed else books


class CatalogStore:
    """The whole catalog, stored as one document under a storage key.

    Every successful mutation is persisted immediately and as a whole, so a
    reader never sees a partially applied change.
    """

    def __init__(self, db: Session, *, key: str | None = None):
        self.db = db
        self.key = key or settings.catalog_storage_key

    def load(self) -> list[Book]:
        payload = get_payload(self.db, key=self.key)
        if not payload:
            return []
        try:
            books = decode_catalog(payload)
        except StorageCorrupt as exc:
            logger.warning("Stored catalog %r is unreadable; starting empty: %s", self.key, exc)
            return []
        repaired = _assign_missing_ids(books)
        if repaired is not books:
            logger.info("Assigned ids to stored records in %r", self.key)
            self.persist(repaired)
        return repaired

    def persist(self, books: list[Book]) -> None:
        put_payload(self.db, key=self.key, payload=encode_catalog_json(books))

    def mutate(self, fn: Callable[[list[Book]], list[Book]]) -> list[Book]:
        books = fn(self.load())
        self.persist(books)
        return books

    def get(self, book_id: str) -> Book:
        for b in self.load():
            if b.id == book_id:
                return b
        raise BookNotFound(book_id)

    def upsert(self, book: Book) -> Book:
        """Replace the record with the same id, or add it at the top."""
        if not book.id:
            book = book.model_copy(update={"id": new_book_id()})

        def apply(books: list[Book]) -> list[Book]:
            for i, b in enumerate(books):
                if b.id == book.id:
                    return books[:i] + [book] + books[i + 1 :]
            return [book, *books]

        self.mutate(apply)
        return book

    def delete(self, book_id: str, *, confirmed: bool = False) -> Book:
        target = self.get(book_id)
        if not confirmed:
            raise ConfirmationRequired(1)
        self.mutate(lambda books: [b for b in books if b.id != book_id])
        return target

    def delete_many(self, book_ids: Iterable[str], *, confirmed: bool = False) -> int:
        wanted = set(book_ids)
        books = self.load()
        count = sum(1 for b in books if b.id in wanted)
        if count == 0:
            return 0
        if not confirmed:
            raise ConfirmationRequired(count)
        self.persist([b for b in books if b.id not in wanted])
        return count

    def seed_samples(self) -> list[Book]:
        samples = sample_books()
        self.mutate(lambda books: samples + books)
        return samples


def sample_books() -> list[Book]:
    now = datetime.now(timezone.utc).isoformat()
    return [
        Book(
            id=new_book_id(),
            title="消費社会の神話と構造",
            author="ジャン・ボードリヤール",
            isbn="9784480090474",
            year="1970/2008",
            publisher="ちくま学芸文庫",
            tags=["社会学", "理論"],
            location="研究室A-3",
            status=BookStatus.held,
            note="付箋多数",
            extras={"timestamp": now, "cover": "https://cover.openbd.jp/9784480090474.jpg"},
        ),
        Book(
            id=new_book_id(),
            title="音楽・メディア論集",
            author="T.W. アドルノ",
            year="1998",
            publisher="平凡社",
            tags=["メディア論", "音楽"],
            location="自宅書斎B-2",
            status=BookStatus.held,
            note="講義用資料",
            extras={"timestamp": now},
        ),
        Book(
            id=new_book_id(),
            title="現代思想 2023年9月号 特集＝生活史／エスノグラフィー",
            author="編集部",
            isbn="4910032930934",
            year="2023/09",
            publisher="青土社",
            tags=["生活史", "エスノグラフィー"],
            location="PDF/クラウド",
            status=BookStatus.checked_out,
            note="学生貸出中（佐藤さん）",
            extras={"magazine_code": "4910032930934", "timestamp": now},
        ),
    ]
