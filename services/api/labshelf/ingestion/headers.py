"""Known CSV header layouts and detection of which one a file uses.

Two lineages exist. The localized one is what the app writes; its older
forms lack the leading ``id`` column and/or the trailing ``タグ`` column.
The generic one uses Latin column names and is accepted on import only.

A layout matches when its labels appear, in order, as a prefix of the
header row. Anything after that prefix is an extra column whose values end
up in ``Book.extras`` keyed by the header text.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from labshelf.domain.book import BookStatus
from labshelf.domain.normalize import normalize_header_cell
from labshelf.ingestion.errors import MalformedHeader

# Column targets: a Book attribute, or "extras.<key>" for a fixed extra.
EXTRAS_PREFIX = "extras."


@dataclass(frozen=True)
class HeaderVariant:
    name: str
    columns: tuple[tuple[str, str], ...]  # (label, target)
    held_label: str
    checked_out_label: str
    current: bool = False

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.columns]

    @property
    def targets(self) -> list[str]:
        return [target for _, target in self.columns]

    @property
    def has_id(self) -> bool:
        return "id" in self.targets

    @property
    def has_tags(self) -> bool:
        return "tags" in self.targets

    def status_label(self, status: BookStatus) -> str:
        if status is BookStatus.checked_out:
            return self.checked_out_label
        return self.held_label

    def parse_status(self, cell: str) -> BookStatus:
        if cell == self.checked_out_label:
            return BookStatus.checked_out
        return BookStatus.held


_LOCALIZED_BODY: tuple[tuple[str, str], ...] = (
    ("ISBNコード", "isbn"),
    ("雑誌コード", "extras.magazine_code"),
    ("タイトル", "title"),
    ("著者", "author"),
    ("出版社", "publisher"),
    ("年", "year"),
    ("タイムスタンプ", "extras.timestamp"),
    ("表紙", "extras.cover"),
    ("場所", "location"),
    ("状態", "status"),
    ("メモ", "note"),
)
_LOCALIZED_ID = (("id", "id"),)
_LOCALIZED_TAGS = (("タグ", "tags"),)

_GENERIC_BODY: tuple[tuple[str, str], ...] = (
    ("title", "title"),
    ("author", "author"),
    ("isbn", "isbn"),
    ("year", "year"),
    ("publisher", "publisher"),
    ("tags", "tags"),
    ("location", "location"),
    ("status", "status"),
    ("note", "note"),
)


def _localized(name: str, columns: tuple[tuple[str, str], ...], *, current: bool = False) -> HeaderVariant:
    return HeaderVariant(
        name=name,
        columns=columns,
        held_label="所蔵",
        checked_out_label="貸出中",
        current=current,
    )


def _generic(name: str, columns: tuple[tuple[str, str], ...]) -> HeaderVariant:
    return HeaderVariant(
        name=name,
        columns=columns,
        held_label="held",
        checked_out_label="checked-out",
    )


CURRENT_VARIANT = _localized(
    "localized", _LOCALIZED_ID + _LOCALIZED_BODY + _LOCALIZED_TAGS, current=True
)

# Priority order: most specific (longest) layouts first.
VARIANTS: tuple[HeaderVariant, ...] = (
    CURRENT_VARIANT,
    _localized("localized-no-tags", _LOCALIZED_ID + _LOCALIZED_BODY),
    _localized("localized-no-id", _LOCALIZED_BODY + _LOCALIZED_TAGS),
    _localized("localized-legacy", _LOCALIZED_BODY),
    _generic("generic", (("id", "id"),) + _GENERIC_BODY),
    _generic("generic-no-id", _GENERIC_BODY),
)

# Semantic keys of the fixed extras columns, e.g. "magazine_code".
FIXED_EXTRA_KEYS: tuple[str, ...] = tuple(
    t[len(EXTRAS_PREFIX) :] for t in CURRENT_VARIANT.targets if t.startswith(EXTRAS_PREFIX)
)


@dataclass(frozen=True)
class ColumnMap:
    variant: HeaderVariant
    positions: dict[str, int]
    # (extras key, column index) for columns past the matched layout
    extra_columns: list[tuple[str, int]] = field(default_factory=list)

    def index_of(self, target: str) -> int | None:
        """Column index of a target, or None when the layout lacks it."""
        return self.positions.get(target)


def _matches(variant: HeaderVariant, norm: list[str]) -> bool:
    expected = [normalize_header_cell(label) for label in variant.labels]
    if len(norm) < len(expected):
        return False
    return all(norm[i] == h for i, h in enumerate(expected))


def accepted_headers() -> list[list[str]]:
    return [v.labels for v in VARIANTS]


def resolve_header(header_row: list[str]) -> ColumnMap:
    norm = [normalize_header_cell(c) for c in header_row]

    for variant in VARIANTS:
        if not _matches(variant, norm):
            continue

        positions = {target: i for i, target in enumerate(variant.targets)}
        extra_columns: list[tuple[str, int]] = []
        for i in range(len(variant.columns), len(header_row)):
            key = (header_row[i] or "").strip()
            if not key:
                continue
            extra_columns.append((key, i))
        return ColumnMap(variant=variant, positions=positions, extra_columns=extra_columns)

    lines = ["CSV header does not match any accepted layout. Accepted first rows:"]
    for v in VARIANTS:
        lines.append(f"- {v.name}: {', '.join(v.labels)}")
    raise MalformedHeader("\n".join(lines), accepted=accepted_headers())
