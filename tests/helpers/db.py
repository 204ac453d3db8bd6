"""DB helpers for tests: bootstrap a temporary SQLite DB and seed projects."""

from __future__ import annotations

import os
from datetime import UTC, date, datetime
from pathlib import Path

from sqlalchemy import func, select

from db import Base
from db.client import get_engine, reset_engine, session_scope
from db.models.statements import SiProject, SiTransaction, SiUpload


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    reset_engine()
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def create_project(
    *,
    database_url: str,
    period_start: date,
    period_end: date,
    name: str = "Acme Bookkeeping FY24",
    status: str = "active",
) -> int:
    """Insert an owning project row and return its id."""

    with session_scope(database_url=database_url) as session:
        project = SiProject(
            name=name,
            period_start=period_start,
            period_end=period_end,
            status=status,
            created_at=datetime.now(UTC),
        )
        session.add(project)
        session.flush()
        return project.id


def count_rows(database_url: str) -> tuple[int, int]:
    """Return ``(uploads, transactions)`` regardless of upload status."""

    with session_scope(database_url=database_url) as session:
        uploads = session.scalar(select(func.count()).select_from(SiUpload))
        txs = session.scalar(select(func.count()).select_from(SiTransaction))
    return int(uploads or 0), int(txs or 0)
