"""Data models and type aliases for ``statement_ingest``.

Records flow strictly forward: raw CSV rows (:data:`RawRecord`) become
:class:`TransactionCandidate` values, which are grouped into an
:class:`ImportBatch` for commit. Amounts are always signed integer cents with
the canonical convention "negative = money out".
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

# ---------------------------------------------------------------------------
# Raw input
# ---------------------------------------------------------------------------

type RawRecord = Mapping[str, str]
"""One parsed CSV row: sanitized header name -> sanitized raw field value."""


class AccountKind(StrEnum):
    """Opaque account metadata recorded alongside an upload."""

    CHECKING = "checking"
    CREDIT = "credit"


@dataclass(frozen=True, slots=True)
class ReportingPeriod:
    """Inclusive closed interval of calendar dates supplied by the owning record."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"period start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )


# ---------------------------------------------------------------------------
# Canonical output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionCandidate:
    """A single canonicalized transaction ready for commit.

    ``amount_cents`` is an exact ``int``; floats never reach storage.
    ``description`` and ``memo`` are formula-injection sanitized.
    """

    date: date
    description: str
    amount_cents: int
    memo: str | None = None


MAX_BATCH_SIZE: int = 5000


@dataclass(frozen=True, slots=True)
class ImportBatch:
    """Candidates from one uploaded file plus the metadata recorded with them.

    The 1..``MAX_BATCH_SIZE`` bound and the period invariant are enforced by
    :func:`statement_ingest.persistence.validate_batch` and the server-side
    re-filter rather than at construction, since batches may arrive from
    untrusted callers.
    """

    institution: str
    account_kind: AccountKind
    filename: str
    transactions: tuple[TransactionCandidate, ...]


@dataclass(frozen=True, slots=True)
class CommitResult:
    upload_id: int
    accepted_count: int
    # Candidates dropped by the authoritative server-side period filter.
    dropped_count: int


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome reported to the caller after a successful import.

    ``filtered_count`` counts source rows that were not imported, whether they
    failed to parse or fell outside the reporting period.
    """

    upload_id: int
    accepted_count: int
    filtered_count: int


__all__ = [
    "MAX_BATCH_SIZE",
    "AccountKind",
    "CommitResult",
    "ImportBatch",
    "ImportResult",
    "RawRecord",
    "ReportingPeriod",
    "TransactionCandidate",
]
