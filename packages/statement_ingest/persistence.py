# ruff: noqa: I001
"""Persistence integration for statement_ingest.

Functions here write uploads and transactions to the shared database owned by
``libs/db``. They rely on SQLAlchemy ORM models defined in
``db.models.statements`` and a session provided by the caller (usually via
``db.client.session_scope``).

Scope:
- Server-side re-validation of an :class:`~statement_ingest.models.ImportBatch`
  against the project's stored reporting period.
- All-or-nothing commit of the batch in parameter-bounded insert groups.
  ``commit_batch`` commits (or rolls back) the caller's session itself; the
  other writers only flush and leave the commit to the caller.
- Listing and soft-deleting uploads; reads only ever see ``active`` uploads.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models.statements import SiProject, SiTransaction, SiUpload
from .dates import is_within_range
from .errors import (
    CommitFailure,
    EmptyAfterFiltering,
    InvalidBatch,
    UnknownProject,
    UnknownUpload,
)
from .logging_setup import get_logger
from .models import MAX_BATCH_SIZE, AccountKind, CommitResult, ImportBatch
from .profiles import lookup_profile
from .sanitizer import has_dangerous_prefix

_DEFAULT_MAX_PARAMETERS: int = 100
_MAX_TEXT_LENGTH: int = 500
_MAX_FILENAME_LENGTH: int = 255

_logger = get_logger("statement_ingest.persistence")


# ---- Small helpers ------------------------------------------------------------


def _resolve_max_parameters(override: int | None) -> int:
    """Per-statement bind-parameter ceiling of the storage engine.

    Honors an explicit ``override``, then the ``SI_MAX_SQL_PARAMETERS`` env
    var, then a conservative default of 100.
    """

    if override is not None:
        return override
    env_val = os.getenv("SI_MAX_SQL_PARAMETERS")
    if env_val and env_val.strip().isdigit():
        return int(env_val.strip())
    return _DEFAULT_MAX_PARAMETERS


def insert_group_size(max_parameters: int, columns_per_row: int) -> int:
    """Rows per multi-row ``INSERT`` without exceeding ``max_parameters``."""

    if columns_per_row <= 0:
        raise ValueError("columns_per_row must be positive")
    size = max_parameters // columns_per_row
    if size < 1:
        raise ValueError(
            f"max_parameters={max_parameters} cannot fit a single row of "
            f"{columns_per_row} column(s)"
        )
    return size


def _groups(items: Sequence[dict[str, Any]], size: int) -> Iterator[Sequence[dict[str, Any]]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _check_text(label: str, idx: int, value: str | None) -> None:
    if value is None:
        return
    if len(value) > _MAX_TEXT_LENGTH:
        raise InvalidBatch(f"transaction {idx}: {label} exceeds {_MAX_TEXT_LENGTH} characters")
    if has_dangerous_prefix(value):
        raise InvalidBatch(f"transaction {idx}: {label} contains potentially dangerous characters")


# ---- Validation -----------------------------------------------------------------


def validate_batch(batch: ImportBatch) -> None:
    """Reject a batch that cannot be committed, before anything is written.

    Batches may come from untrusted callers, so the invariants established by
    the builder are checked again here: size bounds, integer cents, and
    sanitized text fields.
    """

    n = len(batch.transactions)
    if n == 0:
        raise InvalidBatch("batch contains no transactions")
    if n > MAX_BATCH_SIZE:
        raise InvalidBatch(f"batch of {n} transactions exceeds the limit of {MAX_BATCH_SIZE}")

    lookup_profile(batch.institution)
    try:
        AccountKind(batch.account_kind)
    except ValueError:
        raise InvalidBatch(f"unknown account kind: {batch.account_kind!r}") from None
    filename = (batch.filename or "").strip()
    if not filename or len(filename) > _MAX_FILENAME_LENGTH:
        raise InvalidBatch("filename must be 1-255 characters")

    for idx, tx in enumerate(batch.transactions):
        # bool is an int subclass; reject it along with floats/Decimals.
        if type(tx.amount_cents) is not int:
            raise InvalidBatch(f"transaction {idx}: amount must be integer cents")
        _check_text("description", idx, tx.description)
        _check_text("memo", idx, tx.memo)


def _load_project(session: Session, project_id: int) -> SiProject:
    project = session.get(SiProject, project_id)
    if project is None or project.status != "active":
        raise UnknownProject(project_id)
    return project


# ---- Commit -------------------------------------------------------------------

# Columns written per transaction row; bounds the rows per INSERT.
_INSERT_COLUMNS: tuple[str, ...] = (
    "project_id",
    "upload_id",
    "date",
    "description",
    "amount_cents",
    "memo",
    "created_at",
)


def _abandon(session: Session, upload_id: int | None) -> None:
    """Roll back and hide a partially written upload.

    The ``pending`` -> ``invalid`` flip only matters on engines where the
    rollback did not undo the flushed upload row.
    """

    session.rollback()
    if upload_id is None:
        return
    try:
        session.execute(
            update(SiUpload)
            .where((SiUpload.id == upload_id) & (SiUpload.status == "pending"))
            .values(status="invalid")
        )
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        _logger.warning(
            "could not mark upload %s invalid; it stays 'pending' and hidden from reads",
            upload_id,
        )


def commit_batch(
    session: Session,
    project_id: int,
    batch: ImportBatch,
    *,
    max_parameters: int | None = None,
) -> CommitResult:
    """Persist ``batch`` under ``project_id`` as a single all-or-nothing unit.

    Unlike :func:`delete_upload`, this function owns the transaction: it
    commits ``session`` on success and rolls it back on any failure, so the
    upload is durable (or absent) when it returns. Pass a session with no
    other pending work.

    Steps
    -----
    1. :func:`validate_batch` and the insert group size (no writes on failure).
    2. Re-filter candidates against the project's stored period; raise
       :class:`~statement_ingest.errors.EmptyAfterFiltering` if none remain.
    3. Insert the upload as ``pending``, insert transactions in groups of
       ``insert_group_size(max_parameters, columns_per_row)``, flip the upload
       to ``active`` and commit the session.

    A ``max_parameters`` too small for one row raises
    :class:`~statement_ingest.errors.CommitFailure` before anything is
    written. Any storage error rolls the session back and raises
    :class:`~statement_ingest.errors.CommitFailure`. Group boundaries are a
    performance detail only; they are never committed independently.
    """

    validate_batch(batch)
    try:
        group_size = insert_group_size(
            _resolve_max_parameters(max_parameters), len(_INSERT_COLUMNS)
        )
    except ValueError as exc:
        raise CommitFailure(f"cannot import {batch.filename!r}: {exc}") from exc
    project = _load_project(session, project_id)

    kept = [
        tx
        for tx in batch.transactions
        if is_within_range(tx.date, project.period_start, project.period_end)
    ]
    dropped = len(batch.transactions) - len(kept)
    if not kept:
        raise EmptyAfterFiltering(
            total_rows=len(batch.transactions),
            period_start=project.period_start,
            period_end=project.period_end,
        )
    if dropped:
        _logger.info("server-side period filter dropped %d candidate(s)", dropped)

    now = datetime.now(UTC)
    upload_id: int | None = None
    try:
        upload = SiUpload(
            project_id=project.id,
            institution=lookup_profile(batch.institution).key,
            account_kind=AccountKind(batch.account_kind).value,
            filename=batch.filename.strip(),
            transaction_count=len(kept),
            status="pending",
            created_at=now,
        )
        session.add(upload)
        session.flush()
        upload_id = upload.id

        payloads: list[dict[str, Any]] = [
            dict(
                zip(
                    _INSERT_COLUMNS,
                    (
                        project.id,
                        upload_id,
                        tx.date,
                        tx.description,
                        tx.amount_cents,
                        tx.memo,
                        now,
                    ),
                    strict=True,
                )
            )
            for tx in kept
        ]
        for n, group in enumerate(_groups(payloads, group_size)):
            session.execute(insert(SiTransaction).values(list(group)))
            _logger.debug("upload %s: inserted group %d (%d row(s))", upload_id, n, len(group))

        upload.status = "active"
        session.commit()
    except SQLAlchemyError as exc:
        _logger.exception("commit failed for %r; rolling back", batch.filename)
        _abandon(session, upload_id)
        raise CommitFailure(f"failed to import {batch.filename!r}: {exc}") from exc
    except Exception:
        _logger.exception("import of %r aborted; rolling back", batch.filename)
        _abandon(session, upload_id)
        raise

    _logger.info(
        "committed upload %s: %d transaction(s) into project %s",
        upload_id,
        len(kept),
        project.id,
    )
    return CommitResult(upload_id=upload_id, accepted_count=len(kept), dropped_count=dropped)


# ---- Reads / soft delete --------------------------------------------------------


def list_uploads(session: Session, project_id: int) -> list[SiUpload]:
    """Active uploads for ``project_id``, oldest first."""

    stmt = (
        select(SiUpload)
        .where((SiUpload.project_id == project_id) & (SiUpload.status == "active"))
        .order_by(SiUpload.created_at, SiUpload.id)
    )
    return list(session.scalars(stmt))


def list_transactions(session: Session, project_id: int) -> list[SiTransaction]:
    """Transactions belonging to active uploads only, ordered by date."""

    stmt = (
        select(SiTransaction)
        .join(SiUpload, SiUpload.id == SiTransaction.upload_id)
        .where((SiTransaction.project_id == project_id) & (SiUpload.status == "active"))
        .order_by(SiTransaction.date, SiTransaction.id)
    )
    return list(session.scalars(stmt))


def delete_upload(session: Session, project_id: int, upload_id: int) -> datetime:
    """Soft-delete an upload; its transactions disappear from reads with it.

    The change is flushed, not committed; the caller owns the transaction.
    """

    upload = session.scalars(
        select(SiUpload).where(
            (SiUpload.id == upload_id)
            & (SiUpload.project_id == project_id)
            & (SiUpload.status == "active")
        )
    ).first()
    if upload is None:
        raise UnknownUpload(project_id, upload_id)
    now = datetime.now(UTC)
    upload.status = "deleted"
    upload.deleted_at = now
    session.flush()
    return now


__all__ = [
    "commit_batch",
    "delete_upload",
    "insert_group_size",
    "list_transactions",
    "list_uploads",
    "validate_batch",
]
