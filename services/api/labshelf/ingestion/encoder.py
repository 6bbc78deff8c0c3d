from __future__ import annotations

import re
from datetime import date

from labshelf.domain.book import Book
from labshelf.ingestion.headers import CURRENT_VARIANT, EXTRAS_PREFIX, FIXED_EXTRA_KEYS

_needs_quotes = re.compile(r'[",\r\n]')

CSV_MEDIA_TYPE = "text/csv"


def csv_escape(value: str | None) -> str:
    v = value or ""
    if _needs_quotes.search(v):
        return '"' + v.replace('"', '""') + '"'
    return v


def extra_column_keys(books: list[Book]) -> list[str]:
    """Extras keys that need their own trailing column, sorted."""
    keys: set[str] = set()
    for b in books:
        keys.update(k for k in b.extras if k not in FIXED_EXTRA_KEYS)
    return sorted(keys)


def _cell(book: Book, target: str) -> str:
    if target.startswith(EXTRAS_PREFIX):
        return book.extras.get(target[len(EXTRAS_PREFIX) :], "")
    if target == "tags":
        return ";".join(book.tags)
    if target == "status":
        return CURRENT_VARIANT.status_label(book.status)
    return getattr(book, target)


def encode_catalog(books: list[Book]) -> str:
    """Serialize the catalog with the current header layout.

    Extras without a fixed column are appended as extra columns so that a
    later import restores them.
    """
    extra_keys = extra_column_keys(books)
    header = CURRENT_VARIANT.labels + extra_keys
    lines = [",".join(csv_escape(h) for h in header)]

    for b in books:
        cells = [_cell(b, target) for target in CURRENT_VARIANT.targets]
        cells += [b.extras.get(k, "") for k in extra_keys]
        lines.append(",".join(csv_escape(c) for c in cells))

    return "\n".join(lines) + "\n"


def export_filename(prefix: str, today: date) -> str:
    return f"{prefix}_{today.isoformat()}.csv"
