# ruff: noqa: I001
"""CLI for the ``statement_ingest`` package.

This module exposes callable command handlers (e.g., ``cmd_import``) and a
Typer-based console interface. Environment variables (notably
``DATABASE_URL``) are loaded from a local ``.env`` using ``python-dotenv``
before delegating to command logic. Business logic lives in
``statement_ingest.api`` and ``statement_ingest.persistence``.
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import typer
from dotenv import load_dotenv

from .amounts import format_cents
from .columns import ColumnMapping, detect_columns, missing_required_fields
from .errors import MissingRequiredMapping, StatementIngestError
from .logging_setup import configure_logging
from .models import ReportingPeriod


# ---- Small module‑level helpers used by CLI commands -------------------------


def _read_bytes(csv_path: str) -> bytes | None:
    try:
        return Path(csv_path).read_bytes()
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except IsADirectoryError:
        print(f"Error: Not a file: {csv_path}", file=sys.stderr)
    return None


def _report(err: StatementIngestError) -> int:
    print(f"Error: {err}", file=sys.stderr)
    if isinstance(err, MissingRequiredMapping):
        print(
            "Hint: map the columns manually with --date-column, "
            "--description-column and --amount-column.",
            file=sys.stderr,
        )
    return 1


def _manual_mapping(
    date_column: str | None,
    description_column: str | None,
    amount_column: str | None,
    memo_column: str | None,
) -> ColumnMapping | None:
    if not any((date_column, description_column, amount_column, memo_column)):
        return None
    return ColumnMapping(
        date=date_column,
        description=description_column,
        amount=amount_column,
        memo=memo_column,
    )


def _parse_day(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=option) from None


# ---- Command handlers ----------------------------------------------------------


def cmd_detect(csv_path: str, *, institution: str | None = None) -> int:
    """Print the detected column mapping for ``csv_path``.

    Output is one ``<field>\\t<header>`` line per logical field (empty header
    when unmapped). Returns ``1`` when a required field could not be mapped.
    """

    from .profiles import lookup_profile
    from .tabular import parse_statement

    data = _read_bytes(csv_path)
    if data is None:
        return 1
    try:
        table = parse_statement(data)
        profile = lookup_profile(institution) if institution else None
    except StatementIngestError as e:
        return _report(e)

    mapping = detect_columns(table.headers, table.rows[0], profile)
    for field in ("date", "description", "amount", "memo"):
        print(f"{field}\t{getattr(mapping, field) or ''}")
    for warning in table.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    missing = missing_required_fields(mapping, table.headers)
    if missing:
        print("Missing: " + ", ".join(missing), file=sys.stderr)
        return 1
    return 0


def cmd_preview(
    csv_path: str,
    *,
    institution: str,
    period: ReportingPeriod,
    mapping: ColumnMapping | None = None,
) -> int:
    """Build candidates without writing anything and print them as TSV.

    Each line is ``<YYYY-MM-DD>\\t<amount>\\t<description>\\t<memo>``, followed
    by a summary line on stderr with accepted/rejected counts.
    """

    from .api import prepare_statement

    data = _read_bytes(csv_path)
    if data is None:
        return 1
    try:
        prepared = prepare_statement(
            data, institution=institution, period=period, mapping=mapping
        )
    except StatementIngestError as e:
        return _report(e)

    for tx in prepared.result.accepted:
        print(
            f"{tx.date.isoformat()}\t{format_cents(tx.amount_cents)}\t"
            f"{tx.description}\t{tx.memo or ''}"
        )
    result = prepared.result
    print(
        f"accepted={len(result.accepted)} unparseable={result.unparseable} "
        f"out_of_range={result.out_of_range}",
        file=sys.stderr,
    )
    return 0


def cmd_import(
    csv_path: str,
    *,
    project_id: int,
    institution: str,
    account_kind: str,
    mapping: ColumnMapping | None = None,
    database_url: str | None = None,
) -> int:
    """Import ``csv_path`` into ``project_id`` and print the outcome."""

    from db.client import session_scope

    from .api import import_statement

    data = _read_bytes(csv_path)
    if data is None:
        return 1
    try:
        with session_scope(database_url=database_url) as session:
            result = import_statement(
                session,
                project_id=project_id,
                data=data,
                filename=Path(csv_path).name,
                institution=institution,
                account_kind=account_kind,
                mapping=mapping,
            )
    except StatementIngestError as e:
        return _report(e)

    print(
        f"Imported {result.accepted_count} transaction(s) as upload {result.upload_id} "
        f"({result.filtered_count} filtered)"
    )
    return 0


def cmd_list_uploads(*, project_id: int, database_url: str | None = None) -> int:
    """Print active uploads as ``<id>\\t<institution>\\t<kind>\\t<count>\\t<filename>``."""

    from db.client import session_scope

    from .persistence import list_uploads

    with session_scope(database_url=database_url) as session:
        for u in list_uploads(session, project_id):
            print(
                f"{u.id}\t{u.institution}\t{u.account_kind}\t{u.transaction_count}\t{u.filename}"
            )
    return 0


def cmd_delete_upload(
    *, project_id: int, upload_id: int, database_url: str | None = None
) -> int:
    from db.client import session_scope

    from .persistence import delete_upload

    try:
        with session_scope(database_url=database_url) as session:
            deleted_at = delete_upload(session, project_id, upload_id)
    except StatementIngestError as e:
        return _report(e)
    print(f"Deleted upload {upload_id} at {deleted_at.isoformat()}")
    return 0


# ---- Typer app ------------------------------------------------------------------

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Normalize bank-statement CSV exports and import them into a reporting project.",
)

_DB_HELP = "Override DATABASE_URL (falls back to env var)."
_INSTITUTION_HELP = "Institution key (chase, bankofamerica, wellsfargo, capitalone, amex)."


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("detect")
def _detect(
    csv_path: Path = typer.Argument(..., help="Statement CSV to inspect."),
    institution: str | None = typer.Option(None, help=_INSTITUTION_HELP),
) -> None:
    """Show which headers map to date/description/amount/memo."""

    _exit(cmd_detect(str(csv_path), institution=institution))


@app.command("preview")
def _preview(
    csv_path: Path = typer.Argument(..., help="Statement CSV to normalize."),
    institution: str = typer.Option(..., help=_INSTITUTION_HELP),
    period_start: str = typer.Option(..., help="First day of the period (YYYY-MM-DD)."),
    period_end: str = typer.Option(..., help="Last day of the period (YYYY-MM-DD)."),
    date_column: str | None = typer.Option(None, help="Header holding the date."),
    description_column: str | None = typer.Option(None, help="Header holding the description."),
    amount_column: str | None = typer.Option(None, help="Header holding the amount."),
    memo_column: str | None = typer.Option(None, help="Header holding the memo."),
) -> None:
    """Normalize a statement and print the qualifying rows without saving."""

    start = _parse_day(period_start, "--period-start")
    end = _parse_day(period_end, "--period-end")
    try:
        period = ReportingPeriod(start=start, end=end)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--period-start") from None
    mapping = _manual_mapping(date_column, description_column, amount_column, memo_column)
    _exit(cmd_preview(str(csv_path), institution=institution, period=period, mapping=mapping))


@app.command("import")
def _import(
    csv_path: Path = typer.Argument(..., help="Statement CSV to import."),
    project_id: int = typer.Option(..., help="Owning project id."),
    institution: str = typer.Option(..., help=_INSTITUTION_HELP),
    account_kind: str = typer.Option("checking", help="Account kind (checking or credit)."),
    date_column: str | None = typer.Option(None, help="Header holding the date."),
    description_column: str | None = typer.Option(None, help="Header holding the description."),
    amount_column: str | None = typer.Option(None, help="Header holding the amount."),
    memo_column: str | None = typer.Option(None, help="Header holding the memo."),
    database_url: str | None = typer.Option(None, help=_DB_HELP),
) -> None:
    """Import a statement into a project, all or nothing."""

    mapping = _manual_mapping(date_column, description_column, amount_column, memo_column)
    _exit(
        cmd_import(
            str(csv_path),
            project_id=project_id,
            institution=institution,
            account_kind=account_kind,
            mapping=mapping,
            database_url=database_url,
        )
    )


@app.command("uploads")
def _uploads(
    project_id: int = typer.Option(..., help="Owning project id."),
    database_url: str | None = typer.Option(None, help=_DB_HELP),
) -> None:
    """List active uploads for a project."""

    _exit(cmd_list_uploads(project_id=project_id, database_url=database_url))


@app.command("delete-upload")
def _delete_upload(
    project_id: int = typer.Option(..., help="Owning project id."),
    upload_id: int = typer.Option(..., help="Upload to remove."),
    database_url: str | None = typer.Option(None, help=_DB_HELP),
) -> None:
    """Soft-delete an upload and hide its transactions."""

    _exit(
        cmd_delete_upload(project_id=project_id, upload_id=upload_id, database_url=database_url)
    )


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (DEBUG, INFO, ...); defaults to STATEMENT_INGEST_LOG_LEVEL or INFO."
    ),
) -> None:
    """Load ``.env`` and configure logging before any subcommand runs."""

    # Existing environment wins over .env in CWD.
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m statement_ingest.cli`
    app()
