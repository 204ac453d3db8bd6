"""Transform raw CSV records into canonical transaction candidates.

Each row is handled independently: a row whose date or amount cannot be
parsed is skipped and counted, never aborting the batch, and no value is ever
guessed for a field that failed to parse. Rows that parse but fall outside the
reporting period are skipped silently and counted separately.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .amounts import normalize_amount
from .columns import ColumnMapping, missing_required_fields
from .dates import is_within_range, parse_date
from .errors import MissingRequiredMapping, RowError
from .logging_setup import get_logger
from .models import RawRecord, ReportingPeriod, TransactionCandidate
from .profiles import InstitutionProfile
from .sanitizer import sanitize

_logger = get_logger("statement_ingest.builder")


@dataclass(frozen=True, slots=True)
class BuildResult:
    accepted: tuple[TransactionCandidate, ...]
    unparseable: int = 0
    out_of_range: int = 0

    @property
    def rejected(self) -> int:
        return self.unparseable + self.out_of_range

    @property
    def is_empty(self) -> bool:
        """True for the "zero qualifying transactions" outcome."""

        return not self.accepted


def _build_one(
    row: RawRecord, mapping: ColumnMapping, profile: InstitutionProfile
) -> TransactionCandidate:
    tx_date = parse_date(row.get(mapping.date), profile)
    cents = normalize_amount(row.get(mapping.amount), profile)
    description = sanitize(row.get(mapping.description))
    memo = sanitize(row.get(mapping.memo)) if mapping.memo else ""
    return TransactionCandidate(
        date=tx_date,
        description=description,
        amount_cents=cents,
        memo=memo or None,
    )


def build_transactions(
    rows: Iterable[RawRecord],
    mapping: ColumnMapping,
    profile: InstitutionProfile,
    period: ReportingPeriod,
) -> BuildResult:
    """Build candidates for every row that parses and lies within ``period``."""

    missing = missing_required_fields(mapping)
    if missing:
        raise MissingRequiredMapping(missing)

    accepted: list[TransactionCandidate] = []
    unparseable = 0
    out_of_range = 0
    for idx, row in enumerate(rows):
        try:
            candidate = _build_one(row, mapping, profile)
        except RowError as exc:
            unparseable += 1
            _logger.debug("row %d skipped: %s", idx, exc)
            continue
        if not is_within_range(candidate.date, period.start, period.end):
            out_of_range += 1
            continue
        accepted.append(candidate)

    _logger.info(
        "built %d candidate(s); %d unparseable, %d outside %s..%s",
        len(accepted),
        unparseable,
        out_of_range,
        period.start.isoformat(),
        period.end.isoformat(),
    )
    return BuildResult(
        accepted=tuple(accepted), unparseable=unparseable, out_of_range=out_of_range
    )


__all__ = ["BuildResult", "build_transactions"]
