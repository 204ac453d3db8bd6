"""Typed failures raised by the statement ingestion pipeline.

Row-level errors (:class:`RowError` and subclasses) are caught by the
transaction builder and aggregated into counts; every other error propagates
to the caller with enough context to render an actionable message.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date


class StatementIngestError(Exception):
    """Base class for all pipeline failures."""


class ParseFailure(StatementIngestError, ValueError):
    """The file as a whole could not be read as a delimited table."""


class UnknownInstitution(StatementIngestError, LookupError):
    def __init__(self, key: str) -> None:
        super().__init__(f"unknown institution: {key!r}")
        self.key = key


# ---- Row-level --------------------------------------------------------------


class RowError(StatementIngestError, ValueError):
    """A single field could not be parsed; only that row is skipped."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class EmptyDate(RowError):
    def __init__(self, raw: str | None = None) -> None:
        super().__init__("empty date value", raw)


class UnparseableDate(RowError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"unable to parse date: {raw!r}", raw)


class InvalidAmount(RowError):
    def __init__(self, raw: str | None) -> None:
        super().__init__(f"invalid amount: {raw!r}", raw)


# ---- Mapping / filtering ----------------------------------------------------


class MissingRequiredMapping(StatementIngestError, ValueError):
    """Column detection (or a manual mapping) left required fields unmapped."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__("missing required column mapping: " + ", ".join(self.missing))


class EmptyAfterFiltering(StatementIngestError, ValueError):
    """The file was readable but no row qualified for the reporting period."""

    def __init__(self, *, total_rows: int, period_start: date, period_end: date) -> None:
        self.total_rows = total_rows
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"no transactions found within {period_start.isoformat()}.."
            f"{period_end.isoformat()} ({total_rows} row(s) examined)"
        )


# ---- Storage ----------------------------------------------------------------


class InvalidBatch(StatementIngestError, ValueError):
    """The batch was rejected by server-side validation before any write."""


class UnknownProject(StatementIngestError, LookupError):
    def __init__(self, project_id: int) -> None:
        super().__init__(f"project not found: {project_id}")
        self.project_id = project_id


class UnknownUpload(StatementIngestError, LookupError):
    def __init__(self, project_id: int, upload_id: int) -> None:
        super().__init__(f"upload {upload_id} not found in project {project_id}")
        self.project_id = project_id
        self.upload_id = upload_id


class CommitFailure(StatementIngestError, RuntimeError):
    """A storage write failed after validation; the batch was rolled back."""


__all__ = [
    "CommitFailure",
    "EmptyAfterFiltering",
    "EmptyDate",
    "InvalidAmount",
    "InvalidBatch",
    "MissingRequiredMapping",
    "ParseFailure",
    "RowError",
    "StatementIngestError",
    "UnknownInstitution",
    "UnknownProject",
    "UnknownUpload",
    "UnparseableDate",
]
