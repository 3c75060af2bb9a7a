"""Typer-based console interface for ``spendlite``.

Every command reads a CSV export (and optionally a rules file), runs the
ingest → categorize → aggregate pipeline through a :class:`SpendSession` and
prints the result. Environment variables are loaded from a local ``.env``
with ``python-dotenv`` before any command runs.

File errors are reported as ``Error: ...`` on stderr with exit status 1.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .dates import format_month_label, month_key_of
from .logging_setup import configure_logging, get_logger
from .report import DEFAULT_REPORT_TITLE, format_money, report_filename, to_title_case
from .rules import DEFAULT_RULES_TEXT
from .session import PAGE_SIZE, SpendSession, page_window
from .storage import JsonFileStorage, get_state_root
from .term_ui import prompt_keyword, select_category

_logger = get_logger("spendlite.cli")

console = Console()

app = typer.Typer(
    name="spendlite",
    no_args_is_help=True,
    add_completion=False,
    help="Categorize bank CSV exports with keyword rules and report totals.",
)


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(1)


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise _fail(f"{what} not found: {path}") from None
    except PermissionError:
        raise _fail(f"Permission denied: {path}") from None
    except UnicodeDecodeError as e:
        raise _fail(f"{what} is not valid UTF-8 text: {path} ({e})") from None
    except OSError as e:
        raise _fail(f"Failed to read {what.lower()} '{path}': {e}") from None


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise _fail(f"Failed to write '{path}': {e}") from None


def _resolve_page_size() -> int:
    """Transactions per page, from ``SPENDLITE_PAGE_SIZE`` when valid."""

    raw = os.getenv("SPENDLITE_PAGE_SIZE")
    try:
        size = int(raw) if raw else PAGE_SIZE
    except ValueError:
        return PAGE_SIZE
    return size if size > 0 else PAGE_SIZE


def _open_session(
    csv_path: Path,
    rules_path: Path | None,
    *,
    month: str | None = None,
    category: str | None = None,
    save_state: bool = False,
) -> SpendSession:
    rule_text = DEFAULT_RULES_TEXT
    if rules_path is not None:
        rule_text = _read_text(rules_path, "Rules file")
    csv_text = _read_text(csv_path, "CSV file")

    session = SpendSession(storage=JsonFileStorage() if save_state else None)
    session.rule_text = rule_text
    session.month_filter = month or ""
    session.load_csv(csv_text)
    if save_state:
        session.set_rule_text(rule_text)
    if month and month not in session.months():
        _logger.info("month %s has no transactions; showing all months", month)
    if category:
        session.set_category_filter(category)
    return session


# Module-level option objects keep calls out of parameter defaults (ruff B008).
CSV_PATH_OPTION = typer.Option(
    ...,
    "--csv-path",
    help="Path to a bank CSV export.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # missing files are reported by the handler
)
RULES_PATH_OPTION = typer.Option(
    "--rules-path",
    help="Path to a rules file (KEYWORD => CATEGORY per line).",
    dir_okay=False,
    file_okay=True,
    exists=False,
)
MONTH_OPTION = typer.Option("--month", help="Only include this month (YYYY-MM).")
CATEGORY_OPTION = typer.Option("--category", help="Only include this category.")
SAVE_STATE_OPTION = typer.Option(
    "--save-state/--no-save-state",
    help="Persist rules, filters and transactions under SPENDLITE_STATE_DIR.",
)


# ---- Commands ----------------------------------------------------------------


@app.command("totals")
def totals_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    rules_path: Annotated[Path | None, RULES_PATH_OPTION] = None,
    month: Annotated[str | None, MONTH_OPTION] = None,
    title: Annotated[str, typer.Option(help="Report title.")] = DEFAULT_REPORT_TITLE,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            help="Write the report here; pass a directory to use the default file name.",
        ),
    ] = None,
    save_state: Annotated[bool, SAVE_STATE_OPTION] = False,
) -> None:
    """Print the category totals report for the selected month."""

    session = _open_session(csv_path, rules_path, month=month, save_state=save_state)
    report = session.totals_report(title=title)

    if output is None:
        typer.echo(report)
        return
    target = output / report_filename(session.export_label()) if output.is_dir() else output
    _write_text(target, report + "\n")
    typer.echo(f"Wrote {target}")


@app.command("transactions")
def transactions_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    rules_path: Annotated[Path | None, RULES_PATH_OPTION] = None,
    month: Annotated[str | None, MONTH_OPTION] = None,
    category: Annotated[str | None, CATEGORY_OPTION] = None,
    page: Annotated[int, typer.Option(help="Page number (1-based).")] = 1,
    save_state: Annotated[bool, SAVE_STATE_OPTION] = False,
) -> None:
    """List categorized transactions one page at a time."""

    session = _open_session(
        csv_path, rules_path, month=month, category=category, save_state=save_state
    )
    result = session.go_to_page(page, _resolve_page_size())
    positions = {id(t): i for i, t in enumerate(session.transactions)}

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Description")
    for tx in result.items:
        table.add_row(
            str(positions[id(tx)]),
            tx.date,
            format_money(tx.amount),
            to_title_case(tx.category or "UNCATEGORISED"),
            tx.description,
        )
    console.print(table)

    window = " ".join(
        f"[{p}]" if p == result.page else str(p)
        for p in page_window(result.page, result.total_pages)
    )
    console.print(
        f"Page {result.page} / {result.total_pages}   {window}",
        highlight=False,
        markup=False,
        soft_wrap=True,
    )
    console.print(session.summary(), highlight=False, markup=False, soft_wrap=True)


@app.command("months")
def months_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """List the months present in a CSV export."""

    session = _open_session(csv_path, None)
    counts: dict[str, int] = {}
    for tx in session.transactions:
        key = month_key_of(tx.date)
        if key is not None:
            counts[key] = counts.get(key, 0) + 1

    months = session.months()
    if not months:
        typer.echo("No dated transactions found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Month")
    table.add_column("Label")
    table.add_column("Transactions", justify="right")
    for key in months:
        table.add_row(key, format_month_label(key), str(counts[key]))
    console.print(table)


@app.command("assign")
def assign_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    rules_path: Annotated[
        Path,
        typer.Option(
            ...,
            "--rules-path",
            help="Rules file to update (created when missing).",
            dir_okay=False,
        ),
    ],
    index: Annotated[int, typer.Option(help="Transaction number as shown by 'transactions'.")],
    keyword: Annotated[
        str | None, typer.Option(help="Keyword to match; prompts when omitted.")
    ] = None,
    category: Annotated[
        str | None, typer.Option(help="Category to assign; prompts when omitted.")
    ] = None,
    save_state: Annotated[bool, SAVE_STATE_OPTION] = False,
) -> None:
    """Add or update the rule that categorizes one transaction."""

    existing = rules_path if rules_path.exists() else None
    session = _open_session(csv_path, existing, save_state=save_state)

    try:
        suggested, current = session.suggestion_for(index)
    except IndexError:
        raise _fail(
            f"No transaction #{index}; the file has {len(session.transactions)} transactions"
        ) from None

    tx = session.transactions[index]
    console.print(
        f"{tx.date}  {format_money(tx.amount)}  {tx.description}", highlight=False, markup=False
    )

    if keyword is None:
        keyword = prompt_keyword(suggested)
    if keyword is None or not keyword.strip():
        typer.echo("Canceled.")
        return
    if category is None:
        category = select_category(session.categories(), default=current)
    if category is None or not category.strip():
        typer.echo("Canceled.")
        return

    rule_text = session.assign_category(keyword, category)
    _write_text(rules_path, rule_text + "\n")
    typer.echo(
        f"{keyword.strip().upper()} => {category.strip().upper()}"
        f" (transaction #{index} is now {session.transactions[index].category})"
    )


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    log_level: Annotated[
        str | None,
        typer.Option(help="Logging level (defaults to SPENDLITE_LOG_LEVEL or INFO)."),
    ] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        configure_logging(log_level)
    except ValueError as e:
        raise _fail(str(e)) from None
    _logger.debug(
        "settings: state_dir=%s page_size=%d", get_state_root(), _resolve_page_size()
    )

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
