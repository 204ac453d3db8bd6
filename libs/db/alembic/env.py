# ruff: noqa: I001
"""
Alembic configuration for the `db` library.

This file injects the database URL from the `DATABASE_URL` environment variable
at runtime and supports both offline and online migrations against the
statement-import tables declared in ``db.models.statements``.
"""

from __future__ import annotations

import os
import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from dotenv import load_dotenv, find_dotenv


# Alembic Config object, which provides access to the values within
# the .ini file in use (None when driven programmatically).
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Load environment from a workspace-level .env if present.
#
# `find_dotenv(usecwd=True)` discovers the repo-root `.env` whether Alembic is
# invoked from the repo root or from inside libs/db.
dotenv_path = find_dotenv(usecwd=True)
if dotenv_path:
    load_dotenv(dotenv_path=dotenv_path, override=False)

# Environment wins over the INI value.
db_url_maybe = os.getenv("DATABASE_URL") or config.get_main_option("sqlalchemy.url")
if not db_url_maybe:
    raise RuntimeError(
        "DATABASE_URL is not set. Provide it via environment or set "
        "'sqlalchemy.url' in alembic.ini."
    )
db_url: str = db_url_maybe

config.set_main_option("sqlalchemy.url", db_url)
config.set_section_option(config.config_ini_section, "sqlalchemy.url", db_url)

logger = logging.getLogger("alembic.env")

import db as _db_pkg  # noqa: E402

target_metadata = _db_pkg.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = db_url
    connectable = engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        # SQLite cannot ALTER constraints in place; batch mode rebuilds tables.
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
    logger.info("migrations applied to %s", connectable.url.render_as_string(hide_password=True))


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
