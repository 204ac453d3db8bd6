"""Heuristic column detection for statement CSVs.

Headers are matched against the institution profile's patterns (or the
generic synonyms when no institution was chosen). Date and amount candidates
are then checked against the first data row: when the first matching header
holds something that does not look like a date/amount, a later matching
header whose sample value does validate is preferred. Detection never fails;
it produces a best-effort :class:`ColumnMapping` that must pass
:func:`ensure_mapping` before any row is built.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .dates import parse_date_strict
from .errors import MissingRequiredMapping, RowError
from .logging_setup import get_logger
from .models import RawRecord
from .profiles import GENERIC_PATTERNS, InstitutionProfile

_logger = get_logger("statement_ingest.columns")

_AMOUNT_NOISE = str.maketrans("", "", "$€£¥,()")


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Logical field -> header name carrying that data in a given file."""

    date: str | None = None
    description: str | None = None
    amount: str | None = None
    memo: str | None = None


# (attribute, label shown to users offering a manual remap)
_REQUIRED: tuple[tuple[str, str], ...] = (
    ("date", "Date"),
    ("description", "Description"),
    ("amount", "Amount"),
)


def looks_like_date(value: str | None, profile: InstitutionProfile | None = None) -> bool:
    try:
        parse_date_strict(value, profile)
    except RowError:
        return False
    return True


def looks_like_amount(value: str | None) -> bool:
    if not value or not value.strip():
        return False
    cleaned = value.translate(_AMOUNT_NOISE).strip()
    try:
        return Decimal(cleaned).is_finite()
    except InvalidOperation:
        return False


def _pick(
    headers: Sequence[str],
    pattern: re.Pattern[str] | None,
    sample: RawRecord,
    validate: Callable[[str | None], bool] | None = None,
) -> str | None:
    if pattern is None:
        return None
    matches = [h for h in headers if pattern.search(h)]
    if not matches:
        return None
    first = matches[0]
    if validate is None or validate(sample.get(first)):
        return first
    for h in matches[1:]:
        if validate(sample.get(h)):
            return h
    # Keep the first pattern match; the builder will reject rows it cannot parse.
    return first


def detect_columns(
    headers: Sequence[str],
    sample: RawRecord,
    profile: InstitutionProfile | None = None,
) -> ColumnMapping:
    """Infer which header maps to date/description/amount/memo."""

    patterns = profile.patterns if profile is not None else GENERIC_PATTERNS
    mapping = ColumnMapping(
        date=_pick(headers, patterns.date, sample, lambda v: looks_like_date(v, profile)),
        description=_pick(headers, patterns.description, sample),
        amount=_pick(headers, patterns.amount, sample, looks_like_amount),
        memo=_pick(headers, patterns.memo, sample),
    )
    _logger.debug(
        "detected columns (%s): %s",
        profile.key if profile is not None else "generic",
        mapping,
    )
    return mapping


def has_required_mappings(mapping: ColumnMapping) -> bool:
    return all(getattr(mapping, attr) for attr, _label in _REQUIRED)


def missing_required_fields(
    mapping: ColumnMapping, headers: Sequence[str] | None = None
) -> list[str]:
    """Labels of fields that are unmapped or point at a header not in ``headers``.

    The optional memo slot is reported only when it references an absent
    header.
    """

    present = set(headers) if headers is not None else None
    missing: list[str] = []
    for attr, label in _REQUIRED:
        header = getattr(mapping, attr)
        if not header or (present is not None and header not in present):
            missing.append(label)
    if present is not None and mapping.memo and mapping.memo not in present:
        missing.append("Memo")
    return missing


def ensure_mapping(mapping: ColumnMapping, headers: Sequence[str]) -> ColumnMapping:
    """Return ``mapping`` unchanged when fully valid for ``headers``.

    Raises :class:`~statement_ingest.errors.MissingRequiredMapping` listing
    the offending fields otherwise.
    """

    missing = missing_required_fields(mapping, headers)
    if missing:
        raise MissingRequiredMapping(missing)
    return mapping


__all__ = [
    "ColumnMapping",
    "detect_columns",
    "ensure_mapping",
    "has_required_mappings",
    "looks_like_amount",
    "looks_like_date",
    "missing_required_fields",
]
