"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the statement-import models used by ``statement_ingest``.
"""

from .statements import Base, SiProject, SiTransaction, SiUpload

__all__ = [
    "Base",
    "SiProject",
    "SiTransaction",
    "SiUpload",
]
