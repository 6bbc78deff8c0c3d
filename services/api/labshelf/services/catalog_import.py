from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from labshelf.domain.book import Book
from labshelf.domain.normalize import IsbnFallback
from labshelf.ingestion.csv_tokenizer import decode_csv_bytes, tokenize
from labshelf.ingestion.decoder import decode_rows
from labshelf.ingestion.encoder import encode_catalog, export_filename
from labshelf.ingestion.errors import EmptyImport
from labshelf.ingestion.headers import resolve_header
from labshelf.services.catalog_store import CatalogStore
from labshelf.services.merge import MergePolicy, MergeReport, merge_catalog

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    report: MergeReport
    variant: str
    rejected_rows: int
    books: list[Book]

    @property
    def message(self) -> str:
        msg = f"Imported ({self.variant}): {self.report.summary()}"
        if self.rejected_rows:
            msg += f" / {self.rejected_rows} row(s) without title, ISBN or id ignored"
        return msg


def read_incoming(
    content: str | bytes,
    *,
    isbn_fallback: IsbnFallback = IsbnFallback.KEEP,
) -> tuple[list[Book], str, int]:
    """Parse a CSV file into candidate records.

    Returns (records, layout name, rejected row count). Raises
    MalformedCsv, MalformedHeader or EmptyImport.
    """
    text = decode_csv_bytes(content) if isinstance(content, bytes) else content
    rows = tokenize(text)
    if not rows:
        raise EmptyImport("The CSV file is empty.")

    column_map = resolve_header(rows[0])
    decoded = decode_rows(rows[1:], column_map, isbn_fallback=isbn_fallback)
    if not decoded.books:
        raise EmptyImport("The CSV file has no book rows.")
    return decoded.books, column_map.variant.name, decoded.rejected


def import_csv(
    store: CatalogStore,
    content: str | bytes,
    *,
    policy: MergePolicy = MergePolicy.FILL_BLANKS,
    isbn_fallback: IsbnFallback = IsbnFallback.KEEP,
) -> ImportOutcome:
    """Merge a CSV file into the stored catalog.

    Header and empty-file failures propagate before anything is written.
    """
    incoming, variant, rejected = read_incoming(content, isbn_fallback=isbn_fallback)

    result = merge_catalog(
        store.load(), incoming, policy=policy, isbn_fallback=isbn_fallback
    )
    if result.report.changed:
        store.persist(result.books)

    outcome = ImportOutcome(
        report=result.report,
        variant=variant,
        rejected_rows=rejected,
        books=result.books,
    )
    logger.info("csv import (%s, %s): %s", variant, policy.value, outcome.message)
    return outcome


def export_csv(store: CatalogStore, *, prefix: str, today: date) -> tuple[str, str]:
    """Return (filename, csv text) for the whole catalog."""
    return export_filename(prefix, today), encode_catalog(store.load())
