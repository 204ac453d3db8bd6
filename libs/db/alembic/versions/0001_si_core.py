# ruff: noqa: I001
"""Statement import core tables.

Revision ID: 0001_si_core
Revises: None
Create Date: 2026-10-18
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_si_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _pk() -> sa.types.TypeEngine:
    return sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    # si_projects: owning record for the authoritative reporting period
    op.create_table(
        "si_projects",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("period_start < period_end", name="ck_si_project_period"),
        sa.CheckConstraint("status in ('active','deleted')", name="ck_si_project_status"),
    )

    # si_uploads: one row per imported file
    op.create_table(
        "si_uploads",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column(
            "project_id",
            _pk(),
            sa.ForeignKey("si_projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("institution", sa.String(), nullable=False),
        sa.Column("account_kind", sa.String(), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("transaction_count", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status in ('pending','active','deleted','invalid')",
            name="ck_si_upload_status",
        ),
    )
    op.create_index("ix_si_uploads_project_status", "si_uploads", ["project_id", "status"])

    # si_transactions: canonical rows, amounts in signed integer cents
    op.create_table(
        "si_transactions",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column(
            "project_id",
            _pk(),
            sa.ForeignKey("si_projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "upload_id",
            _pk(),
            sa.ForeignKey("si_uploads.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_si_transactions_project_date", "si_transactions", ["project_id", "date"]
    )


def downgrade() -> None:
    op.drop_index("ix_si_transactions_project_date", table_name="si_transactions")
    op.drop_table("si_transactions")
    op.drop_index("ix_si_uploads_project_status", table_name="si_uploads")
    op.drop_table("si_uploads")
    op.drop_table("si_projects")
