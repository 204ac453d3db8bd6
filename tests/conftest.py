"""Pytest configuration for test isolation.

The shared ``db.client`` module caches a process-wide engine keyed to the first
``DATABASE_URL`` it sees. Each test that needs storage bootstraps its own
file-backed SQLite database, so the cached engine is reset after every test
and any ambient ``DATABASE_URL``/tuning variables are removed for the duration
of the test.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from db.client import get_session, reset_engine
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_database(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SI_MAX_SQL_PARAMETERS", raising=False)
    yield
    reset_engine()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "si-test.db")


@pytest.fixture
def session(db_url: str) -> Iterator[Session]:
    s = get_session(database_url=db_url)
    try:
        yield s
    finally:
        s.close()
