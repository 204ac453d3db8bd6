"""Date normalization for statement rows.

Parsing is an ordered chain of fallible attempts evaluated in priority order,
short-circuiting on the first success:

1. the institution profile's declared formats (strict, full-string match),
2. a fixed list of common fallback formats (same strict rule),
3. a lenient ``dateutil`` interpretation of the raw value.

Strictness comes from :func:`datetime.strptime`, which rejects trailing or
missing components. The lenient step is the least predictable, so it only
runs once every declared format has failed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime

from dateutil import parser as date_parser

from .errors import EmptyDate, UnparseableDate
from .profiles import InstitutionProfile

FALLBACK_DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%m-%d-%Y",
    "%Y/%m/%d",
)


def _try_formats(value: str, formats: Iterable[str]) -> date | None:
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _try_lenient(value: str) -> date | None:
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        return None


def _attempts(profile: InstitutionProfile | None) -> list[Callable[[str], date | None]]:
    chain: list[Callable[[str], date | None]] = []
    if profile is not None and profile.date_formats:
        chain.append(lambda s: _try_formats(s, profile.date_formats))
    chain.append(lambda s: _try_formats(s, FALLBACK_DATE_FORMATS))
    return chain


def _run_chain(raw: str | None, chain: list[Callable[[str], date | None]]) -> date:
    s = (raw or "").strip()
    if not s:
        raise EmptyDate(raw)
    for attempt in chain:
        parsed = attempt(s)
        if parsed is not None:
            return parsed
    raise UnparseableDate(raw or "")


def parse_date(raw: str | None, profile: InstitutionProfile | None = None) -> date:
    """Parse ``raw`` into a calendar date, trying strict formats before guessing.

    Raises :class:`~statement_ingest.errors.EmptyDate` for blank input and
    :class:`~statement_ingest.errors.UnparseableDate` when every attempt fails.
    """

    return _run_chain(raw, [*_attempts(profile), _try_lenient])


def parse_date_strict(raw: str | None, profile: InstitutionProfile | None = None) -> date:
    """Like :func:`parse_date` but without the lenient last resort.

    Used for content validation during column detection, where a lenient
    parser would happily accept values from non-date columns.
    """

    return _run_chain(raw, _attempts(profile))


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_within_range(value: date | datetime, start: date | datetime, end: date | datetime) -> bool:
    """Inclusive range check at day granularity; time-of-day is ignored."""

    return _as_date(start) <= _as_date(value) <= _as_date(end)


def format_date(value: date | datetime) -> str:
    """Render ``value`` as ``MM/DD/YYYY`` for display."""

    return _as_date(value).strftime("%m/%d/%Y")


__all__ = [
    "FALLBACK_DATE_FORMATS",
    "format_date",
    "is_within_range",
    "parse_date",
    "parse_date_strict",
]
