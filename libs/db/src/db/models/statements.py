from __future__ import annotations

import datetime as dt  # module alias: ``date`` is also a column name below

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
_PK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass


# ---------------------------
# Owning record: si_projects
# ---------------------------


class SiProject(Base):
    __tablename__ = "si_projects"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Authoritative reporting period. Uploads are re-filtered against these
    # bounds at commit time, regardless of what the client already filtered.
    period_start: Mapped[dt.date] = mapped_column(Date, nullable=False)
    period_end: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, server_default="active")
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("period_start < period_end", name="ck_si_project_period"),
        CheckConstraint("status in ('active','deleted')", name="ck_si_project_status"),
    )


# ---------------------------
# Import record: si_uploads
# ---------------------------


class SiUpload(Base):
    __tablename__ = "si_uploads"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("si_projects.id", ondelete="CASCADE"), nullable=False
    )
    institution: Mapped[str] = mapped_column(String, nullable=False)
    account_kind: Mapped[str] = mapped_column(String, nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False)
    # Lifecycle: 'pending' while groups are being written, 'active' once the
    # whole batch landed. Readers only ever see 'active' uploads, so a
    # half-written 'pending' row is invisible even if rollback never ran.
    status: Mapped[str] = mapped_column(String, nullable=False, server_default="pending")
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    deleted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status in ('pending','active','deleted','invalid')",
            name="ck_si_upload_status",
        ),
        Index("ix_si_uploads_project_status", "project_id", "status"),
    )


# ---------------------------
# Core: si_transactions
# ---------------------------


class SiTransaction(Base):
    __tablename__ = "si_transactions"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("si_projects.id", ondelete="CASCADE"), nullable=False
    )
    upload_id: Mapped[int] = mapped_column(
        ForeignKey("si_uploads.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Signed integer cents; negative = money out.
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_si_transactions_project_date", "project_id", "date"),)


__all__ = [
    "Base",
    "SiProject",
    "SiTransaction",
    "SiUpload",
]
