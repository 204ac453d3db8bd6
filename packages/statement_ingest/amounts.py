"""Amount parsing and sign normalization.

Amounts are parsed with :class:`decimal.Decimal` end to end and converted to
signed integer cents, so standard two-decimal inputs never pick up binary
floating-point drift. The canonical convention is "negative = money out,
positive = money in"; profiles whose exports report debits as positive
numbers are negated on the way in.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import InvalidAmount
from .profiles import InstitutionProfile, SignConvention

_CURRENCY_SYMBOLS: str = "$€£¥"
_CENTS = Decimal(100)


def parse_amount(raw: str | None) -> Decimal:
    """Parse a raw amount token such as ``$1,234.56`` or ``(500.00)``.

    Leading signs, currency symbols and wrapping parentheses (accounting
    notation for negatives) are stripped in any order, e.g. ``-($1,234.56)``
    and ``$(1,234.56)`` are both negative. Raises
    :class:`~statement_ingest.errors.InvalidAmount` for empty, non-numeric or
    non-finite input.
    """

    if raw is None:
        raise InvalidAmount(raw)
    s = raw.strip()
    if not s:
        raise InvalidAmount(raw)

    negative = False
    signed = False
    # Iteratively strip leading sign, currency symbol, and surrounding
    # parentheses until stable. At most one explicit sign is allowed.
    while True:
        changed = False
        if s[:1] in ("+", "-"):
            if signed:
                raise InvalidAmount(raw)
            signed = True
            negative = negative or s[0] == "-"
            s = s[1:].lstrip()
            changed = True
        if s[:1] and s[0] in _CURRENCY_SYMBOLS:
            s = s[1:].lstrip()
            changed = True
        if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    # Strip thousands separators; keep decimal point. Decimal would also
    # accept "_" digit grouping, which no export uses.
    s = s.replace(",", "").strip()
    if not s or "_" in s or s[:1] in ("+", "-"):
        raise InvalidAmount(raw)

    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise InvalidAmount(raw) from exc
    if not d.is_finite():
        raise InvalidAmount(raw)
    return -abs(d) if negative else d


def to_cents(value: Decimal) -> int:
    """Scale to integer cents, rounding half away from zero."""

    return int((value * _CENTS).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def normalize_amount(raw: str | None, profile: InstitutionProfile) -> int:
    """Parse ``raw`` and return canonical signed cents for ``profile``.

    >>> from statement_ingest.profiles import lookup_profile
    >>> normalize_amount("$1,234.56", lookup_profile("amex"))
    -123456
    """

    value = parse_amount(raw)
    if profile.sign_convention is SignConvention.DEBITS_POSITIVE:
        value = -value
    try:
        return to_cents(value)
    except InvalidOperation as exc:
        # Magnitude exceeds the decimal context precision.
        raise InvalidAmount(raw) from exc


def format_cents(cents: int) -> str:
    """Render cents as a USD display string, e.g. ``-$1,234.56``."""

    sign = "-" if cents < 0 else ""
    dollars, rem = divmod(abs(cents), 100)
    return f"{sign}${dollars:,}.{rem:02d}"


def amount_direction(cents: int) -> str:
    return "expense" if cents < 0 else "income"


__all__ = [
    "amount_direction",
    "format_cents",
    "normalize_amount",
    "parse_amount",
    "to_cents",
]
