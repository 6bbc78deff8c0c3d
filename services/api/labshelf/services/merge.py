from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from labshelf.domain.book import TEXT_FIELDS, Book, new_book_id
from labshelf.domain.normalize import (
    IsbnFallback,
    dedupe,
    normalize_isbn,
)


class MergePolicy(str, Enum):
    # Keep non-empty stored values, only fill blanks (status always follows the file).
    FILL_BLANKS = "fill_blanks"
    # The file wins for every field except id; extras are shallow-merged.
    OVERWRITE = "overwrite"


@dataclass
class MergeReport:
    added: int = 0
    updated: int = 0
    # Matched records whose merge changed nothing.
    skipped: int = 0
    id_conflicts: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)

    def summary(self) -> str:
        return (
            f"added {self.added} / updated {self.updated} / "
            f"unchanged {self.skipped} / id conflicts {self.id_conflicts}"
        )


@dataclass
class MergeResult:
    books: list[Book]
    report: MergeReport = field(default_factory=MergeReport)


def _fill_blanks(existing: Book, incoming: Book) -> dict:
    out: dict = {}
    for name in TEXT_FIELDS:
        current = getattr(existing, name)
        out[name] = current if current else getattr(incoming, name)

    out["tags"] = dedupe([*existing.tags, *incoming.tags])

    extras = dict(existing.extras)
    for k, v in incoming.extras.items():
        if not extras.get(k):
            extras[k] = v
    out["extras"] = extras

    # Decoded status is never blank, so the incoming statement always wins.
    out["status"] = incoming.status
    return out


def _overwrite(existing: Book, incoming: Book) -> dict:
    out: dict = {name: getattr(incoming, name) for name in TEXT_FIELDS}
    out["tags"] = list(incoming.tags)
    out["status"] = incoming.status
    out["extras"] = {**existing.extras, **incoming.extras}
    return out


_POLICIES = {
    MergePolicy.FILL_BLANKS: _fill_blanks,
    MergePolicy.OVERWRITE: _overwrite,
}


def _isbn_key(value: str, fallback: IsbnFallback) -> str | None:
    # Under KEEP an odd-length digit string still identifies its record.
    return normalize_isbn(value, fallback) or None


def merge_catalog(
    existing: list[Book],
    incoming: list[Book],
    *,
    policy: MergePolicy = MergePolicy.FILL_BLANKS,
    isbn_fallback: IsbnFallback = IsbnFallback.KEEP,
) -> MergeResult:
    """Merge decoded records into a catalog snapshot.

    Each incoming record is matched in priority order:

    1. a record that was already in the catalog before this import and has
       the same non-empty id,
    2. otherwise any record (including ones added earlier in this batch)
       with the same normalized ISBN; the first in catalog order wins,
    3. otherwise the record is added. It keeps its id when that id is free,
       and gets a generated one when it has none or the id is taken.

    When a match was made through the ISBN and the incoming record carries a
    different id, the stored record takes that id unless another record
    already uses it. Refused ids (here and in case 3) are counted in
    ``id_conflicts``; the record's other fields are still merged or added.

    Neither input list nor the records in it are modified. Existing records
    are never removed; new ones are appended in input order.
    """
    merge_fields = _POLICIES[policy]

    books = list(existing)
    # id -> index for every record in the working catalog
    by_id: dict[str, int] = {}
    by_isbn: dict[str, int] = {}
    for i, b in enumerate(books):
        if b.id:
            by_id.setdefault(b.id, i)
        key = _isbn_key(b.isbn, isbn_fallback)
        if key:
            by_isbn.setdefault(key, i)
    preexisting = len(books)

    report = MergeReport()

    for inc in incoming:
        idx: int | None = None
        via_isbn = False

        owner = by_id.get(inc.id) if inc.id else None
        if owner is not None and owner < preexisting:
            idx = owner
        else:
            key = _isbn_key(inc.isbn, isbn_fallback)
            if key and key in by_isbn:
                idx = by_isbn[key]
                via_isbn = True

        if idx is None:
            new_id = inc.id
            if not new_id or new_id in by_id:
                if new_id:
                    report.id_conflicts += 1
                new_id = new_book_id()
            new = inc.model_copy(
                update={"id": new_id, "isbn": normalize_isbn(inc.isbn, isbn_fallback)}
            )
            books.append(new)
            idx = len(books) - 1
            by_id[new.id] = idx
            key = _isbn_key(new.isbn, isbn_fallback)
            if key:
                by_isbn.setdefault(key, idx)
            report.added += 1
            continue

        current = books[idx]
        fields = merge_fields(current, inc)
        fields["isbn"] = normalize_isbn(fields["isbn"], isbn_fallback)
        fields["id"] = current.id

        if via_isbn and inc.id and inc.id != current.id:
            if owner is not None and owner != idx:
                report.id_conflicts += 1
            else:
                fields["id"] = inc.id

        merged = Book.model_validate({**current.model_dump(), **fields})
        if merged == current:
            report.skipped += 1
            continue

        books[idx] = merged
        if merged.id != current.id:
            if by_id.get(current.id) == idx:
                del by_id[current.id]
            by_id[merged.id] = idx
        old_key = _isbn_key(current.isbn, isbn_fallback)
        new_key = _isbn_key(merged.isbn, isbn_fallback)
        if old_key != new_key:
            if old_key and by_isbn.get(old_key) == idx:
                del by_isbn[old_key]
            if new_key:
                by_isbn.setdefault(new_key, idx)
        report.updated += 1

    return MergeResult(books=books, report=report)
