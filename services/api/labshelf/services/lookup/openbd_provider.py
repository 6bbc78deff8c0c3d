from __future__ import annotations

import httpx

from labshelf.services.lookup._http import get_json, year_from
from labshelf.services.lookup.types import BibliographicRecord


class OpenBDProvider:
    """openBD: Japanese publishers' data, keyed by ISBN."""

    name = "openbd"

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url

    async def fetch(self, isbn: str) -> BibliographicRecord | None:
        data = await get_json(self.client, self.name, self.base_url, {"isbn": isbn})

        # The API answers with a list holding one entry (or null) per ISBN.
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        summary = data[0].get("summary") or {}

        return BibliographicRecord(
            isbn=isbn,
            title=(summary.get("title") or "").strip(),
            author=(summary.get("author") or "").strip(),
            publisher=(summary.get("publisher") or "").strip(),
            year=year_from(summary.get("pubdate")),
            cover=(summary.get("cover") or "").strip(),
            sources=[self.name],
        )
