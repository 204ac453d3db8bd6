"""Spreadsheet formula-injection sanitization for imported CSV fields.

Cells starting with ``=``, ``+``, ``-``, ``@`` or a tab/CR/LF can be evaluated
as formulas when an export is opened in spreadsheet software. Such values are
prefixed with a single apostrophe, which keeps the literal text but disables
evaluation. Signed numbers (``-42.50``, ``+$1,000``) are legitimate amounts and
are left untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

_DANGEROUS_PREFIXES: tuple[str, ...] = ("=", "+", "-", "@", "\t", "\r", "\n")
_CURRENCY_AND_SEPARATORS = str.maketrans("", "", "$€£¥,")


def _is_signed_number(value: str) -> bool:
    if value[:1] not in ("-", "+"):
        return False
    rest = value[1:].translate(_CURRENCY_AND_SEPARATORS).strip()
    if not rest:
        return False
    try:
        return Decimal(rest).is_finite()
    except InvalidOperation:
        return False


def has_dangerous_prefix(value: str | None) -> bool:
    """Return True when ``value`` would be evaluated as a spreadsheet formula."""

    if not value:
        return False
    s = value.strip()
    return s.startswith(_DANGEROUS_PREFIXES) and not _is_signed_number(s)


def sanitize(value: str | None) -> str:
    """Trim ``value`` and neutralize it if it could trigger formula evaluation.

    >>> sanitize("=SUM(A1:A9)")
    "'=SUM(A1:A9)"
    >>> sanitize("-42.50")
    '-42.50'
    """

    if value is None:
        return ""
    s = str(value).strip()
    return f"'{s}" if has_dangerous_prefix(s) else s


def sanitize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize every key and every string value of ``row``."""

    return {
        sanitize(k): (sanitize(v) if isinstance(v, str) else v) for k, v in row.items()
    }


__all__ = ["has_dangerous_prefix", "sanitize", "sanitize_row"]
