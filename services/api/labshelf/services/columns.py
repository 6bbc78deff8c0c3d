from __future__ import annotations

import logging

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from labshelf.core.config import settings
from labshelf.crud.storage import get_payload, put_payload
from labshelf.domain.book import Book

logger = logging.getLogger(__name__)

EXTRA_COLUMN_PREFIX = "extra:"


class ColumnConfig(BaseModel):
    key: str
    label: str
    visible: bool = True


_columns_adapter: TypeAdapter[list[ColumnConfig]] = TypeAdapter(list[ColumnConfig])

DEFAULT_COLUMNS: tuple[ColumnConfig, ...] = (
    ColumnConfig(key="isbn", label="ISBN"),
    ColumnConfig(key="title", label="タイトル"),
    ColumnConfig(key="author", label="著者"),
    ColumnConfig(key="publisher", label="出版社"),
    ColumnConfig(key="year", label="発行年"),
    ColumnConfig(key="location", label="場所"),
    ColumnConfig(key="status", label="状態"),
    ColumnConfig(key="tags", label="タグ"),
    ColumnConfig(key="note", label="メモ"),
    ColumnConfig(key="extra:cover", label="表紙", visible=False),
    ColumnConfig(key="extra:magazine_code", label="雑誌コード", visible=False),
    ColumnConfig(key="extra:timestamp", label="タイムスタンプ", visible=False),
)


def default_columns() -> list[ColumnConfig]:
    return [c.model_copy() for c in DEFAULT_COLUMNS]


def discover_columns(columns: list[ColumnConfig], books: list[Book]) -> list[ColumnConfig]:
    """Append a hidden column for every extras key not configured yet."""
    known = {c.key for c in columns}
    out = list(columns)
    for b in books:
        for k in b.extras:
            key = EXTRA_COLUMN_PREFIX + k
            if key in known:
                continue
            known.add(key)
            out.append(ColumnConfig(key=key, label=k, visible=False))
    return out


class ColumnSettings:
    """Column visibility, stored apart from the catalog under its own key."""

    def __init__(self, db: Session, *, key: str | None = None):
        self.db = db
        self.key = key or settings.columns_storage_key

    def load(self) -> list[ColumnConfig]:
        payload = get_payload(self.db, key=self.key)
        if not payload:
            return default_columns()
        try:
            return _columns_adapter.validate_json(payload)
        except ValidationError as exc:
            logger.warning("Stored column settings are unreadable; using defaults: %s", exc)
            return default_columns()

    def save(self, columns: list[ColumnConfig]) -> list[ColumnConfig]:
        put_payload(
            self.db, key=self.key, payload=_columns_adapter.dump_json(columns).decode("utf-8")
        )
        return columns

    def for_catalog(self, books: list[Book]) -> list[ColumnConfig]:
        """Stored columns extended with any newly seen extras keys."""
        current = self.load()
        extended = discover_columns(current, books)
        if len(extended) != len(current):
            self.save(extended)
        return extended

    def set_visible(self, key: str, visible: bool, books: list[Book]) -> list[ColumnConfig]:
        columns = self.for_catalog(books)
        for c in columns:
            if c.key == key:
                c.visible = visible
                return self.save(columns)
        raise KeyError(key)

    def reset(self) -> list[ColumnConfig]:
        return self.save(default_columns())
