"""Engine and session helpers for the shared statement-import database.

One engine is cached per process and bound to ``DATABASE_URL`` (or an explicit
``database_url``). Callers normally go through :func:`session_scope`::

    from db.client import session_scope

    with session_scope() as s:
        import_statement(s, project_id=..., ...)

SQLite connections get ``PRAGMA foreign_keys = ON`` so the upload and
transaction foreign keys are enforced the same way they are on Postgres.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None
_DB_URL: str | None = None


def _database_url(override: str | None = None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot initialize database client")
    return url


def _enable_sqlite_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys = ON")
    finally:
        cursor.close()


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the process-wide engine, creating it on first use.

    Passing a ``database_url`` that differs from the one the engine was bound
    to raises ``RuntimeError``; call :func:`reset_engine` first.
    """

    global _ENGINE, _SESSION_MAKER, _DB_URL
    url = _database_url(database_url)
    if _ENGINE is None:
        engine = create_engine(url, pool_pre_ping=True)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        _SESSION_MAKER = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
        _ENGINE = engine
        _DB_URL = url
        return engine
    if database_url is not None and url != _DB_URL:
        raise RuntimeError(
            "get_engine() already initialized with a different DATABASE_URL; "
            "call reset_engine() first"
        )
    return _ENGINE


def reset_engine() -> None:
    """Dispose of the cached engine so the next call binds a fresh URL."""

    global _ENGINE, _SESSION_MAKER, _DB_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _SESSION_MAKER = None
    _DB_URL = None


def get_session(*, database_url: str | None = None) -> Session:
    get_engine(database_url=database_url)
    assert _SESSION_MAKER is not None  # bound by get_engine
    return _SESSION_MAKER()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Commit on success, roll back on error, always close.

    ``close()`` discards a transaction that was neither committed nor rolled
    back (e.g., on ``KeyboardInterrupt`` mid-import), so a half-written upload
    never becomes durable.
    """

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "get_engine",
    "get_session",
    "reset_engine",
    "session_scope",
]
