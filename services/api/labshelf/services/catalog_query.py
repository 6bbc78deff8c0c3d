from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from labshelf.domain.book import Book, BookStatus
from labshelf.domain.normalize import normalize_text
from labshelf.ingestion.headers import CURRENT_VARIANT


class SortField(str, Enum):
    title = "title"
    author = "author"
    year = "year"
    location = "location"
    status = "status"


class SortDir(str, Enum):
    asc = "asc"
    desc = "desc"


@dataclass
class CatalogQuery:
    q: str = ""
    tag: str = ""
    status: BookStatus | None = None
    sort_by: SortField = SortField.title
    sort_dir: SortDir = SortDir.asc


def _haystack(b: Book) -> str:
    parts = [
        b.title,
        b.author,
        b.isbn,
        b.year,
        b.publisher,
        " ".join(b.tags),
        b.location,
        b.status.value,
        CURRENT_VARIANT.status_label(b.status),
        b.note,
        *b.extras.values(),
    ]
    return " ".join(normalize_text(p) for p in parts)


def _sort_key(b: Book, field: SortField) -> str:
    value = b.status.value if field is SortField.status else getattr(b, field.value)
    return normalize_text(value)


def filter_books(books: list[Book], query: CatalogQuery) -> list[Book]:
    needle = normalize_text(query.q)

    out = []
    for b in books:
        if needle and needle not in _haystack(b):
            continue
        if query.tag and query.tag not in b.tags:
            continue
        if query.status is not None and b.status is not query.status:
            continue
        out.append(b)

    # Stable sort keeps catalog order among equal keys in both directions.
    out.sort(
        key=lambda b: _sort_key(b, query.sort_by),
        reverse=query.sort_dir is SortDir.desc,
    )
    return out


def all_tags(books: list[Book]) -> list[str]:
    tags: set[str] = set()
    for b in books:
        tags.update(b.tags)
    return sorted(tags)

