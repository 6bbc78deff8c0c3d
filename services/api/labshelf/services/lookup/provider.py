from __future__ import annotations

from typing import Protocol

from labshelf.services.lookup.types import BibliographicRecord


class LookupProvider(Protocol):
    name: str

    async def fetch(self, isbn: str) -> BibliographicRecord | None:
        """Return what the service knows about ``isbn``, or None.

        Raises ProviderUnavailable on transport errors and non-2xx replies.
        """
        ...
