"""Structural CSV extraction for uploaded bank statements.

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module (comma
delimiter, double-quoted fields with embedded commas and newlines, doubled
quotes). Every header and field is passed through
:func:`statement_ingest.sanitizer.sanitize` before it is stored.

No field-count or type validation happens here: ragged rows are reported as
warnings and kept with best-effort values, and interpreting the cells is left
to the column detector and transaction builder.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from dataclasses import dataclass
from io import StringIO

from .errors import ParseFailure
from .logging_setup import get_logger
from .models import RawRecord
from .sanitizer import sanitize

_logger = get_logger("statement_ingest.tabular")


@dataclass(frozen=True, slots=True)
class ParsedTable:
    """Header-keyed rows extracted from one file, in file order."""

    headers: tuple[str, ...]
    rows: tuple[RawRecord, ...]
    warnings: tuple[str, ...] = ()


def _decode(data: bytes | str) -> tuple[str, str | None]:
    """Return the text plus a warning when a non-UTF-8 fallback was needed."""

    if isinstance(data, str):
        return data, None
    try:
        # utf-8-sig tolerates the BOM that spreadsheet exports often prepend.
        return data.decode("utf-8-sig"), None
    except UnicodeDecodeError:
        pass
    # Exports that are not UTF-8 are almost always Windows-1252.
    try:
        return data.decode("cp1252"), "File is not valid UTF-8; decoded as cp1252"
    except UnicodeDecodeError:
        return (
            data.decode("utf-8", errors="replace"),
            "File is not valid UTF-8 or cp1252; undecodable bytes were replaced",
        )


def _is_blank(fields: Sequence[str]) -> bool:
    return all(not f.strip() for f in fields)


def parse_statement(data: bytes | str) -> ParsedTable:
    """Parse delimited text with a header row into sanitized records.

    Bytes that are not UTF-8 are decoded as cp1252 (or with replacement
    characters) and reported in ``warnings``. Raises
    :class:`~statement_ingest.errors.ParseFailure` when the input is
    structurally malformed (e.g., an unterminated quote) or yields no data
    rows after the header.
    """

    text, decode_warning = _decode(data)
    reader = csv.reader(StringIO(text, newline=""), strict=True)

    headers: list[str] | None = None
    rows: list[RawRecord] = []
    warnings: list[str] = [decode_warning] if decode_warning else []
    try:
        for fields in reader:
            if _is_blank(fields):
                continue
            if headers is None:
                headers = [sanitize(h) for h in fields]
                seen: set[str] = set()
                for h in headers:
                    if h in seen:
                        warnings.append(f"Duplicate header {h!r}: later column wins")
                    seen.add(h)
                continue

            if len(fields) != len(headers):
                warnings.append(
                    f"Row {len(rows) + 1}: expected {len(headers)} fields, found {len(fields)}"
                )
            # Pad short rows with empty strings; extra trailing fields are dropped.
            padded = list(fields[: len(headers)]) + [""] * (len(headers) - len(fields))
            rows.append({h: sanitize(v) for h, v in zip(headers, padded, strict=True)})
    except csv.Error as exc:
        raise ParseFailure(f"CSV parsing failed near line {reader.line_num}: {exc}") from exc

    if headers is None:
        raise ParseFailure("CSV file is empty")
    if not rows:
        raise ParseFailure("CSV file has a header row but no data rows")

    _logger.info(
        "parsed %d row(s) across %d column(s) with %d warning(s)",
        len(rows),
        len(headers),
        len(warnings),
    )
    return ParsedTable(headers=tuple(headers), rows=tuple(rows), warnings=tuple(warnings))


def preview_rows(rows: Sequence[RawRecord], count: int = 5) -> list[RawRecord]:
    """Return the first ``count`` rows for display before committing."""

    return list(rows[: max(count, 0)])


__all__ = ["ParsedTable", "parse_statement", "preview_rows"]
