"""Header-aware CSV ingestion into canonical :class:`Transaction` records.

Exports vary by bank: some carry a header row (``Effective date``,
``Debit amount``, ``Long description``...), others are bare rows with the
interesting values at fixed positions. The first row decides which layout is
used. Each non-blank line is tokenized on its own with the stdlib :mod:`csv`
module (double-quote quoting, ``""`` as an escaped quote). Lines break on
``\n`` or ``\r\n`` only, so form feeds and other control characters stay
inside a cell; a line with a bare ``\r`` in it cannot be tokenized and is
skipped.

Rows are never rejected with an error. A row whose net amount is zero (which
includes amounts that fail to parse) or that has neither a date nor a
description is simply skipped.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

from .logging_setup import get_logger
from .models import ColumnMap, Transaction

_logger = get_logger("spendlite.csv_ingest")

_HEADER_HINT_RE = re.compile(r"date|debit|credit|description|long", re.IGNORECASE)
_NON_AMOUNT_RE = re.compile(r"[^\d\-,.]")
_LINE_BREAK_RE = re.compile(r"\r?\n")

# Alias order is precedence: the first alias present in the header wins.
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "effective_date": ("effective date", "eff date", "date", "value date", "posted date"),
    "debit": ("debit amount", "debit"),
    "credit": ("credit amount", "credit"),
    "long_description": ("long description", "long desc", "description", "details", "narrative"),
}

# Positions used when the file has no header row.
FALLBACK_COLUMNS = ColumnMap(effective_date=2, debit=5, credit=-1, long_description=9)


def parse_csv_rows(text: str | None) -> list[list[str]]:
    """Split ``text`` into rows of cells, skipping whitespace-only lines.

    Quotes only open a quoted section at the start of a cell; a quote in the
    middle of a cell is kept as a literal character.
    """

    rows: list[list[str]] = []
    for line in _LINE_BREAK_RE.split(str(text or "")):
        if not line.strip():
            continue
        try:
            rows.append(next(csv.reader([line])))
        except csv.Error:
            # A bare carriage return inside the line.
            _logger.debug("parse_csv_rows: skipped untokenizable line %r", line)
    return rows


def parse_amount(raw: str | None) -> Decimal:
    """Parse a money cell leniently; anything unusable becomes ``0``.

    Currency symbols, letters and spaces are dropped and commas are treated
    as thousands separators, so ``"$1,234.50"`` parses as ``1234.50`` and
    ``"n/a"`` as ``0``.
    """

    if raw is None:
        return Decimal(0)
    s = _NON_AMOUNT_RE.sub("", str(raw)).replace(",", "")
    if not s:
        return Decimal(0)
    try:
        return Decimal(s)
    except InvalidOperation:
        return Decimal(0)


def looks_like_header(row: Sequence[str]) -> bool:
    return any(_HEADER_HINT_RE.search(str(cell or "")) for cell in row)


def map_headers(header_row: Sequence[str]) -> ColumnMap:
    """Resolve logical fields to column indices from a header row.

    Header names are matched case-insensitively after trimming. When a name
    repeats, its last occurrence is used.
    """

    positions: dict[str, int] = {}
    for i, cell in enumerate(header_row):
        key = str(cell or "").strip().lower()
        if key:
            positions[key] = i

    def pick(aliases: tuple[str, ...]) -> int:
        for alias in aliases:
            if alias in positions:
                return positions[alias]
        return -1

    return ColumnMap(
        effective_date=pick(HEADER_ALIASES["effective_date"]),
        debit=pick(HEADER_ALIASES["debit"]),
        credit=pick(HEADER_ALIASES["credit"]),
        long_description=pick(HEADER_ALIASES["long_description"]),
        has_header=True,
    )


def _cell(row: Sequence[str], idx: int) -> str:
    if 0 <= idx < len(row):
        return row[idx] or ""
    return ""


def _description_cell(row: Sequence[str], columns: ColumnMap) -> str:
    idx = columns.long_description
    if columns.has_header and idx >= 0:
        return _cell(row, idx)
    # Headerless layout, or a header without a description column: use the
    # fixed position and fall back to the last column for short rows.
    idx = FALLBACK_COLUMNS.long_description
    if idx < len(row):
        return row[idx] or ""
    return row[-1] if row else ""


def row_to_transaction(row: Sequence[str], columns: ColumnMap) -> Transaction | None:
    """Build a transaction from one data row, or ``None`` when it is skipped.

    Unresolved date/debit columns fall back to the fixed headerless
    positions; an unresolved credit column means "no credit".
    """

    date_idx = (
        columns.effective_date if columns.effective_date >= 0 else FALLBACK_COLUMNS.effective_date
    )
    debit_idx = columns.debit if columns.debit >= 0 else FALLBACK_COLUMNS.debit

    date_raw = _cell(row, date_idx)
    debit = parse_amount(_cell(row, debit_idx))
    credit = parse_amount(_cell(row, columns.credit)) if columns.credit >= 0 else Decimal(0)
    amount = debit - credit
    description = _description_cell(row, columns).strip()

    if amount == 0 or not (date_raw or description):
        return None
    return Transaction(date=date_raw, amount=amount, description=description)


def ingest(raw_text: str | None) -> list[Transaction]:
    """Parse exported CSV text into transactions.

    The returned list is a complete replacement for any previously loaded
    set; callers swap it in as a whole.
    """

    rows = parse_csv_rows(raw_text)
    if not rows:
        return []

    if looks_like_header(rows[0]):
        columns = map_headers(rows[0])
        data_rows = rows[1:]
    else:
        columns = FALLBACK_COLUMNS
        data_rows = rows

    txns: list[Transaction] = []
    for row in data_rows:
        tx = row_to_transaction(row, columns)
        if tx is not None:
            txns.append(tx)

    _logger.debug(
        "ingest: header=%s columns=%s rows=%d kept=%d dropped=%d",
        columns.has_header,
        columns,
        len(data_rows),
        len(txns),
        len(data_rows) - len(txns),
    )
    return txns


__all__ = [
    "HEADER_ALIASES",
    "FALLBACK_COLUMNS",
    "parse_csv_rows",
    "parse_amount",
    "looks_like_header",
    "map_headers",
    "row_to_transaction",
    "ingest",
]
