from __future__ import annotations

import httpx

from labshelf.services.lookup._http import get_json, year_from
from labshelf.services.lookup.types import BibliographicRecord


class GoogleBooksProvider:
    name = "google_books"

    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str | None = None):
        self.client = client
        self.base_url = base_url
        self.api_key = api_key

    async def fetch(self, isbn: str) -> BibliographicRecord | None:
        params = {"q": f"isbn:{isbn}"}
        if self.api_key:
            params["key"] = self.api_key

        data = await get_json(self.client, self.name, self.base_url, params)
        items = data.get("items") if isinstance(data, dict) else None
        if not items:
            return None

        info = items[0].get("volumeInfo") or {}
        image_links = info.get("imageLinks") or {}

        return BibliographicRecord(
            isbn=isbn,
            title=(info.get("title") or "").strip(),
            author=", ".join(a.strip() for a in info.get("authors") or [] if a and a.strip()),
            publisher=(info.get("publisher") or "").strip(),
            year=year_from(info.get("publishedDate")),
            cover=(image_links.get("thumbnail") or image_links.get("smallThumbnail") or "").strip(),
            sources=[self.name],
        )
