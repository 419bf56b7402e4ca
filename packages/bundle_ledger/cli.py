# ruff: noqa: I001
"""CLI for the ``bundle_ledger`` package.

This module exposes callable command handlers (``cmd_add``, ``cmd_list``, ...)
that return process exit codes, and a Typer-based console interface wrapping
them. Environment variables (notably ``DATABASE_URL``) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Business logic lives
in the filter, balance, validation and repository modules; handlers only wire
them to the record store and the terminal.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo, OptionInfo

from .autocomplete import AutocompleteHistory
from .balances import compute_balances, summarize_view
from .config import Settings, load_settings
from .export import (
    account_label,
    export_filename,
    format_amount,
    format_display_date,
    status_label,
    write_csv,
)
from .filters import filter_records, paginate, search_records
from .logging_setup import configure_logging, get_logger
from .models import EDITABLE_FIELDS, STATUS_UNSET, ArrivalRecord, FilterSpec
from .normalizers import norm_str, to_calendar_date
from .persistence import SqlRecordStore
from .repository import ArrivalRepository, RecordStoreError

_logger = get_logger("bundle_ledger.cli")

_LIST_COLUMNS: tuple[str, ...] = (
    "ID",
    "Date",
    "Lorry",
    "LR No",
    "City",
    "Party Name",
    "A/c",
    "Bundle",
    "Invoice No",
    "Invoice Date",
    "Amount",
    "PH NO",
    "STATUS",
    "Itemtype",
)


# ---- Small module-level helpers used by CLI commands -------------------------


def _open_repository(
    database_url: str | None, settings: Settings
) -> tuple[ArrivalRepository, AutocompleteHistory]:
    """Build a repository over the SQL store and load the current records."""

    history = AutocompleteHistory.in_dir(settings.data_dir)
    repo = ArrivalRepository(
        SqlRecordStore(database_url=database_url or settings.database_url),
        lorry_types=settings.lorry_types,
        history=history,
    )
    repo.refresh()
    return repo, history


def _print_errors(errors: Mapping[str, str]) -> None:
    print("Error: record was not saved:", file=sys.stderr)
    for field, message in errors.items():
        print(f"  {field}: {message}", file=sys.stderr)


def _row(r: ArrivalRecord) -> list[str]:
    return [
        str(r.get("id", "")),
        format_display_date(r.get("date")),
        norm_str(r.get("lorry_type")) or "",
        norm_str(r.get("lorry_no")) or "",
        norm_str(r.get("city")) or "",
        norm_str(r.get("party_name")) or "",
        account_label(r.get("account_type")),
        norm_str(r.get("bundle")) or "",
        norm_str(r.get("invoice_no")) or "",
        format_display_date(r.get("invoice_date")),
        format_amount(r.get("amount")),
        norm_str(r.get("phone_no")) or "",
        status_label(r.get("status")),
        norm_str(r.get("itemtype")) or "",
    ]


def _given_fields(fields: Mapping[str, str | None]) -> dict[str, str]:
    return {k: v for k, v in fields.items() if v is not None}


def _status_argument(value: str) -> str:
    v = value.strip().upper()
    return "" if v in (STATUS_UNSET, "NONE", "-") else v


# ---- Command handlers ---------------------------------------------------------


def cmd_add(
    fields: Mapping[str, str | None] | None = None,
    *,
    database_url: str | None = None,
    session: Any = None,
) -> int:
    """Create one arrival from ``fields`` or, when none are given, the form.

    Prints the new record id to stdout. Validation failures are listed on
    stderr, one field per line, and nothing is written.
    """

    settings = load_settings()
    try:
        repo, history = _open_repository(database_url, settings)
    except (RecordStoreError, RuntimeError) as e:
        print(f"Error: failed to load records: {e}", file=sys.stderr)
        return 1

    candidate = _given_fields(fields or {})
    if not candidate:
        from .term_ui import prompt_arrival_form

        try:
            candidate = prompt_arrival_form(
                session,
                lorry_types=settings.lorry_types,
                party_names=repo.party_names(),
                cities=repo.cities(),
                item_types=history.entries,
            )
        except (EOFError, KeyboardInterrupt):
            print("Error: entry cancelled", file=sys.stderr)
            return 1

    try:
        outcome = repo.create(candidate)
    except RecordStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not outcome.ok:
        _print_errors(outcome.errors)
        return 1

    assert outcome.record is not None
    print(f"Added arrival {outcome.record.get('id')}")
    return 0


def cmd_edit(
    record_id: int,
    fields: Mapping[str, str | None] | None = None,
    *,
    database_url: str | None = None,
    session: Any = None,
) -> int:
    """Update an arrival; unspecified fields keep their stored values."""

    settings = load_settings()
    try:
        repo, history = _open_repository(database_url, settings)
    except (RecordStoreError, RuntimeError) as e:
        print(f"Error: failed to load records: {e}", file=sys.stderr)
        return 1

    current = repo.get(record_id)
    if current is None:
        print(f"Error: no arrival with id {record_id}", file=sys.stderr)
        return 1

    given = _given_fields(fields or {})
    if given:
        candidate: dict[str, Any] = {k: current.get(k) for k in EDITABLE_FIELDS}
        candidate.update(given)
    else:
        from .term_ui import prompt_arrival_form

        try:
            candidate = dict(
                prompt_arrival_form(
                    session,
                    lorry_types=settings.lorry_types,
                    party_names=repo.party_names(),
                    cities=repo.cities(),
                    item_types=history.entries,
                    defaults=current,
                )
            )
        except (EOFError, KeyboardInterrupt):
            print("Error: edit cancelled", file=sys.stderr)
            return 1

    try:
        outcome = repo.update(record_id, candidate)
    except RecordStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not outcome.ok:
        _print_errors(outcome.errors)
        return 1

    print(f"Updated arrival {record_id}")
    return 0


def cmd_set_status(record_id: int, status: str, *, database_url: str | None = None) -> int:
    settings = load_settings()
    try:
        repo, _history = _open_repository(database_url, settings)
        outcome = repo.set_status(record_id, _status_argument(status))
    except (RecordStoreError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not outcome.ok:
        _print_errors(outcome.errors)
        return 1
    assert outcome.record is not None
    print(f"Arrival {record_id} status: {status_label(outcome.record.get('status'))}")
    return 0


def cmd_delete(record_id: int, *, database_url: str | None = None) -> int:
    settings = load_settings()
    try:
        repo, _history = _open_repository(database_url, settings)
        repo.delete(record_id)
    except (RecordStoreError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Deleted arrival {record_id}")
    return 0


def cmd_list(
    spec: FilterSpec,
    *,
    search: str | None = None,
    page: int = 1,
    per_page: int | None = None,
    database_url: str | None = None,
) -> int:
    """Print one page of the filtered, searched collection as tab-separated rows.

    A summary line (entries, amount, distinct lorries and parties) for the
    whole filtered view follows the page.
    """

    settings = load_settings()
    try:
        repo, _history = _open_repository(database_url, settings)
    except (RecordStoreError, RuntimeError) as e:
        print(f"Error: failed to load records: {e}", file=sys.stderr)
        return 1

    view = search_records(filter_records(repo.records(), spec), search)
    try:
        current = paginate(view, page, per_page or settings.page_size)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\t".join(_LIST_COLUMNS))
    for r in current.items:
        print("\t".join(_row(r)))

    summary = summarize_view(view)
    print(
        f"Page {current.page}/{max(current.total_pages, 1)}; "
        f"{summary.total_entries} entries; "
        f"total {format_amount(summary.total_amount)}; "
        f"{summary.unique_lorries} lorries; "
        f"{summary.unique_parties} parties"
    )
    return 0


def cmd_balances(*, as_of: str | None = None, database_url: str | None = None) -> int:
    """Print running balances for the reference day (default: today)."""

    now: date | None = None
    if as_of:
        now = to_calendar_date(as_of)
        if now is None:
            print(f"Error: invalid --as-of date: {as_of!r}", file=sys.stderr)
            return 1

    settings = load_settings()
    try:
        repo, _history = _open_repository(database_url, settings)
    except (RecordStoreError, RuntimeError) as e:
        print(f"Error: failed to load records: {e}", file=sys.stderr)
        return 1

    b = compute_balances(repo.records(), now)
    print(f"Opening balance:\t{format_amount(b.opening_balance)}")
    print(f"Current day:\t{format_amount(b.current_day_total)}")
    print(f"Total with opening:\t{format_amount(b.total_with_opening)}")
    print(f"Current month:\t{format_amount(b.current_month_total)}")
    print(f"All time:\t{format_amount(b.all_time_total)}")
    return 0


def cmd_export_csv(
    spec: FilterSpec,
    *,
    output: str | None = None,
    search: str | None = None,
    database_url: str | None = None,
    today: date | None = None,
) -> int:
    """Export the filtered view as CSV; ``output`` of ``-`` writes to stdout.

    The opening balance row is computed from the full collection, not the
    filtered view.
    """

    settings = load_settings()
    try:
        repo, _history = _open_repository(database_url, settings)
    except (RecordStoreError, RuntimeError) as e:
        print(f"Error: failed to load records: {e}", file=sys.stderr)
        return 1

    records = repo.records()
    opening = compute_balances(records, today).opening_balance
    view = search_records(filter_records(records, spec), search)

    if output == "-":
        write_csv(view, opening_balance=opening, stream=sys.stdout)
        return 0

    path = Path(output) if output else Path.cwd() / export_filename(today)
    try:
        with path.open("w", encoding="utf-8", newline="") as f:
            count = write_csv(view, opening_balance=opening, stream=f)
    except OSError as e:
        print(f"Error: failed to write '{path}': {e}", file=sys.stderr)
        return 1
    _logger.info("Exported %d record(s) to %s", count, path)
    print(f"Exported {count} record(s) to {path}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Record and review bundle arrivals. Loads DATABASE_URL and other "
        "settings from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer inspects these when used as default values below.
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
RECORD_ID_ARGUMENT: ArgumentInfo = typer.Argument(..., help="Arrival id.")

DATE_OPTION: OptionInfo = typer.Option(None, "--date", help="Arrival date, YYYY-MM-DD.")
LORRY_TYPE_OPTION: OptionInfo = typer.Option(None, "--lorry-type", help="Carrier.")
LORRY_NO_OPTION: OptionInfo = typer.Option(None, "--lorry-no", help="Consignment (LR) number.")
CITY_OPTION: OptionInfo = typer.Option(None, "--city", help="Origin city.")
PARTY_NAME_OPTION: OptionInfo = typer.Option(None, "--party-name", help="Supplier.")
ACCOUNT_TYPE_OPTION: OptionInfo = typer.Option(None, "--account-type", help="S, T or R.")
BUNDLE_OPTION: OptionInfo = typer.Option(None, "--bundle", help="Bundle identifier.")
INVOICE_NO_OPTION: OptionInfo = typer.Option(None, "--invoice-no", help="Invoice number.")
INVOICE_DATE_OPTION: OptionInfo = typer.Option(
    None, "--invoice-date", help="Invoice date, YYYY-MM-DD."
)
AMOUNT_OPTION: OptionInfo = typer.Option(None, "--amount", help="Invoice amount.")
PHONE_NO_OPTION: OptionInfo = typer.Option(None, "--phone-no", help="Contact phone.")
STATUS_OPTION: OptionInfo = typer.Option(None, "--status", help="OPEN or PENDING.")
ITEMTYPE_OPTION: OptionInfo = typer.Option(None, "--itemtype", help="Goods category.")

FILTER_DATE_OPTION: OptionInfo = typer.Option(None, "--date", help="Exact arrival date.")
FILTER_MONTH_OPTION: OptionInfo = typer.Option(None, "--month", help="Arrival month, YYYY-MM.")
FILTER_FROM_OPTION: OptionInfo = typer.Option(None, "--from", help="Range start (inclusive).")
FILTER_TO_OPTION: OptionInfo = typer.Option(None, "--to", help="Range end (inclusive).")
FILTER_RANGE_FIELD_OPTION: OptionInfo = typer.Option(
    "arrival", "--range-field", help="Date the range applies to: arrival or invoice."
)
FILTER_LORRY_OPTION: OptionInfo = typer.Option(None, "--lorry", help="Carrier substring.")
FILTER_PARTY_OPTION: OptionInfo = typer.Option(None, "--party", help="Party name substring.")
FILTER_ACCOUNT_OPTION: OptionInfo = typer.Option(
    None, "--account", help="Account type to include; repeat for several."
)
FILTER_STATUS_OPTION: OptionInfo = typer.Option(
    None, "--status", help="OPEN, PENDING or UNSET (no status)."
)
SEARCH_OPTION: OptionInfo = typer.Option(None, "--search", help="Free-text search.")


def _filter_spec(
    *,
    date_: str | None,
    month: str | None,
    range_from: str | None,
    range_to: str | None,
    range_field: str,
    lorry: str | None,
    party: str | None,
    accounts: Sequence[str] | None,
    status: str | None,
) -> FilterSpec:
    return FilterSpec(
        date=date_ or "",
        month=month or "",
        range_from=range_from or "",
        range_to=range_to or "",
        range_field="invoice" if range_field.strip().lower() == "invoice" else "arrival",
        lorry_type=lorry or "",
        party_name=party or "",
        account_types=frozenset(a.strip().upper() for a in accounts or () if a.strip()),
        status=status or "",
    )


@app.command("add")
def add_cmd(
    *,
    date_: str | None = DATE_OPTION,
    lorry_type: str | None = LORRY_TYPE_OPTION,
    lorry_no: str | None = LORRY_NO_OPTION,
    city: str | None = CITY_OPTION,
    party_name: str | None = PARTY_NAME_OPTION,
    account_type: str | None = ACCOUNT_TYPE_OPTION,
    bundle: str | None = BUNDLE_OPTION,
    invoice_no: str | None = INVOICE_NO_OPTION,
    invoice_date: str | None = INVOICE_DATE_OPTION,
    amount: str | None = AMOUNT_OPTION,
    phone_no: str | None = PHONE_NO_OPTION,
    status: str | None = STATUS_OPTION,
    itemtype: str | None = ITEMTYPE_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Record an arrival. Without field options an interactive form opens."""

    fields = {
        "date": date_,
        "lorry_type": lorry_type,
        "lorry_no": lorry_no,
        "city": city,
        "party_name": party_name,
        "account_type": account_type,
        "bundle": bundle,
        "invoice_no": invoice_no,
        "invoice_date": invoice_date,
        "amount": amount,
        "phone_no": phone_no,
        "status": status,
        "itemtype": itemtype,
    }
    raise typer.Exit(cmd_add(fields, database_url=database_url))


@app.command("edit")
def edit_cmd(
    record_id: int = RECORD_ID_ARGUMENT,
    *,
    date_: str | None = DATE_OPTION,
    lorry_type: str | None = LORRY_TYPE_OPTION,
    lorry_no: str | None = LORRY_NO_OPTION,
    city: str | None = CITY_OPTION,
    party_name: str | None = PARTY_NAME_OPTION,
    account_type: str | None = ACCOUNT_TYPE_OPTION,
    bundle: str | None = BUNDLE_OPTION,
    invoice_no: str | None = INVOICE_NO_OPTION,
    invoice_date: str | None = INVOICE_DATE_OPTION,
    amount: str | None = AMOUNT_OPTION,
    phone_no: str | None = PHONE_NO_OPTION,
    status: str | None = STATUS_OPTION,
    itemtype: str | None = ITEMTYPE_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Edit an arrival. Without field options the form opens pre-filled."""

    fields = {
        "date": date_,
        "lorry_type": lorry_type,
        "lorry_no": lorry_no,
        "city": city,
        "party_name": party_name,
        "account_type": account_type,
        "bundle": bundle,
        "invoice_no": invoice_no,
        "invoice_date": invoice_date,
        "amount": amount,
        "phone_no": phone_no,
        "status": status,
        "itemtype": itemtype,
    }
    raise typer.Exit(cmd_edit(record_id, fields, database_url=database_url))


@app.command("set-status")
def set_status_cmd(
    record_id: int = RECORD_ID_ARGUMENT,
    status: str = typer.Argument(..., help="OPEN, PENDING or UNSET to clear."),  # noqa: B008
    *,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Set or clear the status of an arrival."""

    raise typer.Exit(cmd_set_status(record_id, status, database_url=database_url))


@app.command("delete")
def delete_cmd(
    record_id: int = RECORD_ID_ARGUMENT,
    *,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),  # noqa: B008
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Delete an arrival after confirmation."""

    if not yes and not typer.confirm(f"Delete arrival {record_id}?"):
        typer.echo("Aborted.")
        raise typer.Exit(1)
    raise typer.Exit(cmd_delete(record_id, database_url=database_url))


@app.command("list")
def list_cmd(
    *,
    date_: str | None = FILTER_DATE_OPTION,
    month: str | None = FILTER_MONTH_OPTION,
    range_from: str | None = FILTER_FROM_OPTION,
    range_to: str | None = FILTER_TO_OPTION,
    range_field: str = FILTER_RANGE_FIELD_OPTION,
    lorry: str | None = FILTER_LORRY_OPTION,
    party: str | None = FILTER_PARTY_OPTION,
    account: list[str] | None = FILTER_ACCOUNT_OPTION,
    status: str | None = FILTER_STATUS_OPTION,
    search: str | None = SEARCH_OPTION,
    page: int = typer.Option(1, "--page", min=1, help="Page number."),  # noqa: B008
    per_page: int | None = typer.Option(  # noqa: B008
        None, "--per-page", min=1, help="Rows per page (default from settings)."
    ),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """List arrivals, newest first."""

    spec = _filter_spec(
        date_=date_,
        month=month,
        range_from=range_from,
        range_to=range_to,
        range_field=range_field,
        lorry=lorry,
        party=party,
        accounts=account,
        status=status,
    )
    raise typer.Exit(
        cmd_list(spec, search=search, page=page, per_page=per_page, database_url=database_url)
    )


@app.command("balances")
def balances_cmd(
    *,
    as_of: str | None = typer.Option(  # noqa: B008
        None, "--as-of", help="Reference day, YYYY-MM-DD (default: today)."
    ),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Show opening, current-day and month balances."""

    raise typer.Exit(cmd_balances(as_of=as_of, database_url=database_url))


@app.command("export-csv")
def export_csv_cmd(
    *,
    date_: str | None = FILTER_DATE_OPTION,
    month: str | None = FILTER_MONTH_OPTION,
    range_from: str | None = FILTER_FROM_OPTION,
    range_to: str | None = FILTER_TO_OPTION,
    range_field: str = FILTER_RANGE_FIELD_OPTION,
    lorry: str | None = FILTER_LORRY_OPTION,
    party: str | None = FILTER_PARTY_OPTION,
    account: list[str] | None = FILTER_ACCOUNT_OPTION,
    status: str | None = FILTER_STATUS_OPTION,
    search: str | None = SEARCH_OPTION,
    output: str | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Target file; '-' for stdout (default: dated file name)."
    ),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Export the filtered view as CSV with an opening balance row."""

    spec = _filter_spec(
        date_=date_,
        month=month,
        range_from=range_from,
        range_to=range_to,
        range_field=range_field,
        lorry=lorry,
        party=party,
        accounts=account,
        status=status,
    )
    raise typer.Exit(
        cmd_export_csv(spec, output=output, search=search, database_url=database_url)
    )


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    app()
