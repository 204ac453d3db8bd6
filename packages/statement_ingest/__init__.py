"""Public interface for the ``statement_ingest`` package.

This module exposes the package's pipeline functions and public models/types
as the stable import surface. There is no runtime logic here, only symbol
re-exports. Database-backed helpers live in ``statement_ingest.persistence``
and are not imported eagerly.
"""

from .amounts import format_cents, normalize_amount, parse_amount
from .api import PreparedStatement, import_statement, prepare_statement
from .builder import BuildResult, build_transactions
from .columns import (
    ColumnMapping,
    detect_columns,
    ensure_mapping,
    has_required_mappings,
    missing_required_fields,
)
from .dates import format_date, is_within_range, parse_date
from .models import (
    MAX_BATCH_SIZE,
    AccountKind,
    CommitResult,
    ImportBatch,
    ImportResult,
    RawRecord,
    ReportingPeriod,
    TransactionCandidate,
)
from .profiles import (
    GENERIC_PATTERNS,
    PROFILES,
    InstitutionProfile,
    SignConvention,
    lookup_profile,
)
from .sanitizer import sanitize
from .tabular import ParsedTable, parse_statement

__all__ = [
    # Pipeline
    "parse_statement",
    "detect_columns",
    "ensure_mapping",
    "has_required_mappings",
    "missing_required_fields",
    "build_transactions",
    "prepare_statement",
    "import_statement",
    # Normalizers
    "sanitize",
    "parse_date",
    "is_within_range",
    "format_date",
    "parse_amount",
    "normalize_amount",
    "format_cents",
    "lookup_profile",
    # Models / types
    "AccountKind",
    "BuildResult",
    "ColumnMapping",
    "CommitResult",
    "GENERIC_PATTERNS",
    "ImportBatch",
    "ImportResult",
    "InstitutionProfile",
    "MAX_BATCH_SIZE",
    "PROFILES",
    "ParsedTable",
    "PreparedStatement",
    "RawRecord",
    "ReportingPeriod",
    "SignConvention",
    "TransactionCandidate",
]
