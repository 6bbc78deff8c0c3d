from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from labshelf.domain.book import Book
from labshelf.domain.normalize import IsbnFallback, digits_only, normalize_isbn
from labshelf.services.lookup.provider import LookupProvider
from labshelf.services.lookup.types import (
    LOOKUP_FIELDS,
    BibliographicRecord,
    ProviderUnavailable,
)

logger = logging.getLogger(__name__)


class BibliographicLookupError(Exception):
    pass


class InvalidIsbn(BibliographicLookupError):
    pass


class LookupFailed(BibliographicLookupError):
    """Every service failed at the transport level."""


class LookupEmpty(BibliographicLookupError):
    """At least one service answered, but none had bibliographic data."""


def lookup_key(code: str) -> str:
    """Canonical ISBN for a typed or scanned code, or InvalidIsbn."""
    isbn = normalize_isbn(digits_only(code), IsbnFallback.DISCARD)
    if not isbn:
        raise InvalidIsbn(f"Not an ISBN: {code!r}")
    return isbn


def combine(isbn: str, records: Sequence[BibliographicRecord]) -> BibliographicRecord:
    """Per field, take the value of the first record that has one."""
    out = BibliographicRecord(isbn=isbn)
    for rec in records:
        contributed = False
        for name in LOOKUP_FIELDS:
            if not getattr(out, name) and getattr(rec, name):
                setattr(out, name, getattr(rec, name))
                contributed = True
        if contributed:
            out.sources.extend(rec.sources)
    return out


async def lookup_isbn(code: str, providers: Sequence[LookupProvider]) -> BibliographicRecord:
    """Query every provider concurrently and merge what they return.

    ``providers`` is in priority order. Raises LookupFailed when all of them
    failed to answer and LookupEmpty when none had usable data.
    """
    isbn = lookup_key(code)

    results = await asyncio.gather(
        *(p.fetch(isbn) for p in providers), return_exceptions=True
    )

    found: list[BibliographicRecord] = []
    failures: list[ProviderUnavailable] = []
    for provider, res in zip(providers, results):
        if isinstance(res, ProviderUnavailable):
            logger.warning("lookup via %s failed: %s", provider.name, res)
            failures.append(res)
            continue
        if isinstance(res, BaseException):
            raise res
        if res is not None and res.usable:
            found.append(res)

    if found:
        return combine(isbn, found)
    if providers and len(failures) == len(providers):
        raise LookupFailed(f"Could not reach any bibliographic service for {isbn}.")
    raise LookupEmpty(f"No bibliographic data found for {isbn}.")


def fill_from_lookup(book: Book, record: BibliographicRecord) -> Book:
    """Fill the book's blank fields from a lookup; stored values are kept."""
    updates: dict = {}
    for name in ("title", "author", "publisher", "year"):
        if not getattr(book, name) and getattr(record, name):
            updates[name] = getattr(record, name)
    if not book.isbn:
        updates["isbn"] = record.isbn
    if record.cover and not book.extras.get("cover"):
        updates["extras"] = {**book.extras, "cover": record.cover}
    return book.model_copy(update=updates) if updates else book
