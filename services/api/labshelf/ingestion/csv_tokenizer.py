from __future__ import annotations

import csv
import io

from labshelf.ingestion.errors import MalformedCsv

BOM = "\ufeff"


def decode_csv_bytes(content: bytes) -> str:
    """Decode an uploaded file. UTF-8 is required; a BOM is tolerated."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise MalformedCsv("CSV must be UTF-8 encoded.")


def tokenize(text: str) -> list[list[str]]:
    """Split CSV text into rows of cells.

    - Comma separates fields, newline separates records. CRLF is folded to
      LF first; a lone CR ends a record outside quotes and is kept as-is
      inside them.
    - A field wrapped in double quotes may contain commas and newlines; a
      doubled quote inside it is one literal quote.
    - An unterminated quote swallows the rest of the text as literal content
      instead of failing.
    - A last row without a terminating newline is still returned.

    No arity checks happen here; rows may have any number of cells.
    """
    src = (text or "").replace("\r\n", "\n")
    if src.startswith(BOM):
        src = src[len(BOM) :]

    reader = csv.reader(io.StringIO(src, newline=""), strict=False)
    rows: list[list[str]] = []
    try:
        for row in reader:
            rows.append(row)
    except csv.Error as e:
        raise MalformedCsv(f"CSV could not be parsed near line {reader.line_num}: {e}")
    return rows
