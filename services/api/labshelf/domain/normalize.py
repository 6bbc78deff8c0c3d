from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import Iterable

_non_digit = re.compile(r"\D")
_ws = re.compile(r"\s+")
# 「;」推奨 but commas, the Japanese comma and whitespace are accepted too.
_tag_separators = re.compile(r"[;,、\s]+")


class IsbnFallback(str, Enum):
    """What `normalize_isbn` returns when the digit count is neither 10 nor 13."""

    KEEP = "keep"
    DISCARD = "discard"


def digits_only(raw: str | None) -> str:
    return _non_digit.sub("", raw or "")


def ean13_check_digit(core12: str) -> str:
    """Check digit for a 12-digit EAN-13 body (weights 1,3,1,3,...)."""
    total = 0
    for i, ch in enumerate(core12):
        n = int(ch)
        total += n if i % 2 == 0 else n * 3
    r = total % 10
    return "0" if r == 0 else str(10 - r)


def normalize_isbn(raw: str | None, fallback: IsbnFallback = IsbnFallback.KEEP) -> str:
    """Return the canonical 13-digit form of an ISBN.

    - Strips everything that is not a digit (hyphens, spaces, an ISBN-10 "X").
    - 13 digits are returned as-is.
    - 10 digits are converted: "978" + first nine digits + EAN-13 check digit.
    - Any other length returns the stripped digits (KEEP) or "" (DISCARD).
    """
    d = digits_only(raw)
    if len(d) == 13:
        return d
    if len(d) == 10:
        core12 = "978" + d[:9]
        return core12 + ean13_check_digit(core12)
    if fallback is IsbnFallback.DISCARD:
        return ""
    return d


def is_canonical_isbn(value: str | None) -> bool:
    return bool(value) and len(value) == 13 and value.isdigit()  # type: ignore[arg-type]


def parse_tags(value: str | Iterable[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    parts: list[str] = []
    for item in value:
        parts.extend(_tag_separators.split(item or ""))
    return [t.strip() for t in parts if t.strip()]


def dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


def normalize_text(s: str | None) -> str:
    """Width-folded, lower-cased text for searching and sorting."""
    return unicodedata.normalize("NFKC", s or "").lower().strip()


def normalize_header_cell(s: str | None) -> str:
    # Whitespace (half- and full-width) is removed before width folding.
    return unicodedata.normalize("NFKC", _ws.sub("", s or ""))
