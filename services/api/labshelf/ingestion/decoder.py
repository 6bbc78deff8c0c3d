from __future__ import annotations

from dataclasses import dataclass, field

from labshelf.domain.book import Book
from labshelf.domain.normalize import (
    IsbnFallback,
    is_canonical_isbn,
    normalize_isbn,
    parse_tags,
)
from labshelf.ingestion.headers import EXTRAS_PREFIX, ColumnMap


@dataclass
class DecodeResult:
    books: list[Book] = field(default_factory=list)
    # Data rows that were not blank but still did not form a valid record.
    rejected: int = 0
    blank: int = 0


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return (row[index] or "").strip()


def is_blank_row(row: list[str]) -> bool:
    return all(not (c or "").strip() for c in row)


def decode_row(
    row: list[str],
    column_map: ColumnMap,
    *,
    isbn_fallback: IsbnFallback = IsbnFallback.KEEP,
) -> Book | None:
    """Turn one data row into a Book, or None when the row is not a record.

    A row is skipped when every cell is blank, or when it has no title, no
    usable ISBN and (for layouts with an id column) no id.
    """
    if is_blank_row(row):
        return None

    def get(target: str) -> str:
        return _cell(row, column_map.index_of(target))

    variant = column_map.variant

    isbn = normalize_isbn(get("isbn"), isbn_fallback)
    title = get("title")
    book_id = get("id") if variant.has_id else ""

    if not title and not is_canonical_isbn(isbn) and not book_id:
        return None

    extras: dict[str, str] = {}
    for target in variant.targets:
        if target.startswith(EXTRAS_PREFIX):
            value = get(target)
            if value:
                extras[target[len(EXTRAS_PREFIX) :]] = value
    for key, index in column_map.extra_columns:
        value = _cell(row, index)
        if value:
            extras[key] = value

    return Book(
        id=book_id,
        title=title,
        author=get("author"),
        isbn=isbn,
        year=get("year"),
        publisher=get("publisher"),
        tags=parse_tags(get("tags")),
        location=get("location"),
        status=variant.parse_status(get("status")),
        note=get("note"),
        extras=extras,
    )


def decode_rows(
    rows: list[list[str]],
    column_map: ColumnMap,
    *,
    isbn_fallback: IsbnFallback = IsbnFallback.KEEP,
) -> DecodeResult:
    result = DecodeResult()
    for row in rows:
        if is_blank_row(row):
            result.blank += 1
            continue
        book = decode_row(row, column_map, isbn_fallback=isbn_fallback)
        if book is None:
            result.rejected += 1
            continue
        result.books.append(book)
    return result
