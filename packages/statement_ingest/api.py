"""Public pipeline entry points for the ``statement_ingest`` package.

``prepare_statement`` runs the in-memory half of an upload (parse, detect,
build) and is what a client-side preview would call. ``import_statement``
runs the same steps against the project's stored period and then commits the
result through :func:`statement_ingest.persistence.commit_batch`.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from .builder import BuildResult, build_transactions
from .columns import ColumnMapping, detect_columns, ensure_mapping
from .errors import EmptyAfterFiltering, InvalidBatch, UnknownProject
from .models import AccountKind, ImportBatch, ImportResult, ReportingPeriod
from .profiles import InstitutionProfile, lookup_profile
from .tabular import ParsedTable, parse_statement

# DB model imports stay local to ``import_statement`` so the preview path has
# no dependency on the shared ``db`` library being configured.


@dataclass(frozen=True, slots=True)
class PreparedStatement:
    table: ParsedTable
    profile: InstitutionProfile
    mapping: ColumnMapping
    result: BuildResult

    @property
    def filtered_count(self) -> int:
        return len(self.table.rows) - len(self.result.accepted)


def prepare_statement(
    data: bytes | str,
    *,
    institution: str,
    period: ReportingPeriod,
    mapping: ColumnMapping | None = None,
) -> PreparedStatement:
    """Parse ``data`` and build canonical candidates within ``period``.

    When ``mapping`` is ``None`` the columns are auto-detected from the
    headers and the first record; an explicit mapping (e.g., a manual remap
    offered after :class:`~statement_ingest.errors.MissingRequiredMapping`)
    is validated against the headers instead.

    Raises
    ------
    ParseFailure, UnknownInstitution, MissingRequiredMapping
        Fatal problems with the file, the institution key or the mapping.
    EmptyAfterFiltering
        The file was readable but no row parsed within the period.
    """

    table = parse_statement(data)
    profile = lookup_profile(institution)
    if mapping is None:
        mapping = detect_columns(table.headers, table.rows[0], profile)
    ensure_mapping(mapping, table.headers)

    result = build_transactions(table.rows, mapping, profile, period)
    if result.is_empty:
        raise EmptyAfterFiltering(
            total_rows=len(table.rows), period_start=period.start, period_end=period.end
        )
    return PreparedStatement(table=table, profile=profile, mapping=mapping, result=result)


def import_statement(
    session: Session,
    *,
    project_id: int,
    data: bytes | str,
    filename: str,
    institution: str,
    account_kind: AccountKind | str,
    mapping: ColumnMapping | None = None,
    max_parameters: int | None = None,
) -> ImportResult:
    """Parse, filter and atomically commit one statement file into a project."""

    from db.models.statements import SiProject

    from .persistence import commit_batch

    project = session.get(SiProject, project_id)
    if project is None or project.status != "active":
        raise UnknownProject(project_id)
    period = ReportingPeriod(start=project.period_start, end=project.period_end)
    try:
        kind = AccountKind(account_kind)
    except ValueError:
        raise InvalidBatch(f"unknown account kind: {account_kind!r}") from None

    prepared = prepare_statement(data, institution=institution, period=period, mapping=mapping)
    batch = ImportBatch(
        institution=prepared.profile.key,
        account_kind=kind,
        filename=filename,
        transactions=prepared.result.accepted,
    )
    committed = commit_batch(session, project_id, batch, max_parameters=max_parameters)
    return ImportResult(
        upload_id=committed.upload_id,
        accepted_count=committed.accepted_count,
        filtered_count=len(prepared.table.rows) - committed.accepted_count,
    )


__all__ = ["PreparedStatement", "import_statement", "prepare_statement"]
