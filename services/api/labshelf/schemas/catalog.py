from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from labshelf.core.config import settings
from labshelf.domain.book import Book, BookStatus
from labshelf.domain.normalize import normalize_isbn, parse_tags
from labshelf.ingestion.headers import VARIANTS
from labshelf.services.merge import MergePolicy


class BookIn(BaseModel):
    """The edit form. ISBNs typed or scanned go through the same normalization."""

    title: str = ""
    author: str = ""
    isbn: str = ""
    year: str = ""
    publisher: str = ""
    tags: list[str] = Field(default_factory=list)
    location: str = ""
    status: BookStatus = BookStatus.held
    note: str = ""
    extras: dict[str, str] = Field(default_factory=dict)

    @field_validator("title", "author", "year", "publisher", "location", "note", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return str(v or "").strip()

    @field_validator("isbn", mode="before")
    @classmethod
    def clean_isbn(cls, v: Any) -> str:
        return normalize_isbn(str(v or ""), settings.isbn_fallback)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> list[str]:
        return parse_tags(v)

    @field_validator("status", mode="before")
    @classmethod
    def accept_status_labels(cls, v: Any) -> Any:
        # Either the enum value or a label from any known CSV layout.
        if isinstance(v, str):
            for variant in VARIANTS:
                if v == variant.checked_out_label:
                    return BookStatus.checked_out
                if v == variant.held_label:
                    return BookStatus.held
        return v

    @field_validator("extras", mode="before")
    @classmethod
    def strip_extras(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        return {str(k).strip(): str(val or "").strip() for k, val in v.items()}

    def to_book(self, book_id: str = "") -> Book:
        return Book(id=book_id, **self.model_dump())


class BookOut(BaseModel):
    id: str
    title: str
    author: str
    isbn: str
    year: str
    publisher: str
    tags: list[str]
    location: str
    status: BookStatus
    note: str
    extras: dict[str, str]

    class Config:
        from_attributes = True


class BookListOut(BaseModel):
    total: int
    items: list[BookOut]


class BulkDeleteIn(BaseModel):
    ids: list[str]
    confirm: bool = False


class DeleteOut(BaseModel):
    deleted: int


class ImportSummaryOut(BaseModel):
    variant: str
    policy: MergePolicy
    added: int
    updated: int
    skipped: int
    id_conflicts: int
    rejected_rows: int
    message: str


class ColumnOut(BaseModel):
    key: str
    label: str
    visible: bool

    class Config:
        from_attributes = True


class ColumnPatchIn(BaseModel):
    visible: bool


class LookupOut(BaseModel):
    isbn: str
    title: str
    author: str
    publisher: str
    year: str
    cover: str
    sources: list[str]
