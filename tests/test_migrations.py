"""Apply the Alembic migrations to an empty SQLite file and compare with the ORM."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from db import Base

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "libs" / "db" / "alembic"


@pytest.fixture
def alembic_cfg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Config, str]:
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    return cfg, url


def test_upgrade_creates_orm_tables_and_downgrade_drops_them(alembic_cfg):
    cfg, url = alembic_cfg
    command.upgrade(cfg, "head")

    engine = create_engine(url)
    try:
        insp = inspect(engine)
        tables = set(insp.get_table_names())
        assert set(Base.metadata.tables) <= tables
        for name, table in Base.metadata.tables.items():
            migrated = {c["name"] for c in insp.get_columns(name)}
            assert migrated == {c.name for c in table.columns}, name
        indexes = {ix["name"] for ix in insp.get_indexes("si_transactions")}
        assert "ix_si_transactions_project_date" in indexes

        command.downgrade(cfg, "base")
        remaining = set(inspect(engine).get_table_names())
        assert not remaining & set(Base.metadata.tables)
    finally:
        engine.dispose()
