from __future__ import annotations

from typing import Any

import httpx

from labshelf.services.lookup.types import ProviderUnavailable


async def get_json(
    client: httpx.AsyncClient, provider: str, url: str, params: dict[str, str]
) -> Any:
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPError as e:
        raise ProviderUnavailable(provider, str(e)) from e
    except ValueError as e:
        # body was not JSON
        raise ProviderUnavailable(provider, f"invalid response: {e}") from e


def year_from(value: str | None) -> str:
    digits = "".join(ch for ch in (value or "") if ch.isdigit())
    return digits[:4] if len(digits) >= 4 else ""
