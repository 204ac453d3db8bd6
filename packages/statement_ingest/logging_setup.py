"""Logging setup shared by every ``statement_ingest`` module.

Library code only ever asks for a logger::

    _logger = get_logger("statement_ingest.tabular")

and never attaches handlers. Until an entrypoint (the CLI, a host service)
calls :func:`configure_logging`, the ``statement_ingest`` logger carries a
``NullHandler`` so importing the package stays silent.

The level comes from the explicit ``level`` argument, then the
``STATEMENT_INGEST_LOG_LEVEL`` environment variable, then ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_ingest"
_LEVEL_ENV = "STATEMENT_INGEST_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    # Unknown names fall back to INFO rather than failing startup.
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach one ``StreamHandler`` to the ``statement_ingest`` logger.

    Only the first call has an effect. Records go to ``stream`` (stderr by
    default) so stdout stays clean for command output such as the TSV printed
    by ``statement-ingest preview``.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
