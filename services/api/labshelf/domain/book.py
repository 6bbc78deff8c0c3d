from __future__ import annotations

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from labshelf.domain.normalize import dedupe, parse_tags


class BookStatus(str, Enum):
    held = "held"
    checked_out = "checked-out"


# Scalar text fields, in the order the edit form shows them.
TEXT_FIELDS: tuple[str, ...] = (
    "title",
    "author",
    "isbn",
    "year",
    "publisher",
    "location",
    "note",
)


def new_book_id() -> str:
    return uuid4().hex


class Book(BaseModel):
    # "" means "no id yet"; the merge engine and the store assign one on insert.
    id: str = ""

    title: str = ""
    author: str = ""
    isbn: str = ""
    year: str = ""
    publisher: str = ""
    tags: list[str] = Field(default_factory=list)
    location: str = ""
    status: BookStatus = BookStatus.held
    note: str = ""

    # Layout-specific columns (magazine code, timestamp, cover URL, ...)
    extras: dict[str, str] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        if v is None:
            return []
        return dedupe(parse_tags(v))

    @field_validator("extras", mode="before")
    @classmethod
    def drop_blank_extras(cls, v):
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        return {
            str(k): str(val)
            for k, val in v.items()
            if str(k).strip() and val is not None and str(val) != ""
        }


Catalog = list[Book]

catalog_adapter: TypeAdapter[list[Book]] = TypeAdapter(list[Book])
