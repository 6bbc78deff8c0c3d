from __future__ import annotations

import httpx

from labshelf.core.config import settings
from labshelf.services.lookup.google_books_provider import GoogleBooksProvider
from labshelf.services.lookup.openbd_provider import OpenBDProvider
from labshelf.services.lookup.provider import LookupProvider


def build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.lookup_timeout_secs,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    )


def get_providers(client: httpx.AsyncClient) -> list[LookupProvider]:
    # Priority order: earlier providers win per field.
    return [
        OpenBDProvider(client, settings.openbd_base_url),
        GoogleBooksProvider(
            client, settings.google_books_base_url, api_key=settings.google_books_api_key
        ),
    ]
