from __future__ import annotations

from pydantic import BaseModel, Field

# Fields a lookup can contribute, in the order they are merged.
LOOKUP_FIELDS: tuple[str, ...] = ("title", "author", "publisher", "year", "cover")


class BibliographicRecord(BaseModel):
    isbn: str
    title: str = ""
    author: str = ""
    publisher: str = ""
    year: str = ""
    cover: str = ""

    # providers that contributed at least one field
    sources: list[str] = Field(default_factory=list)

    @property
    def usable(self) -> bool:
        return any((self.title, self.author, self.publisher, self.year))


class ProviderUnavailable(Exception):
    """Transport-level failure talking to a lookup service."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
