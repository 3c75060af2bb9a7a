"""Plain-text rendering of category totals and period summaries.

The totals report is a fixed-width table that other tools diff against, so
its layout is kept stable::

    SpendLite Category Totals (December 2024)
    =========================================
    Category       Amount      %
    Groceries      120.00  60.0%
    ...

    TOTAL          200.00   100%
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from .dates import friendly_month_or_all
from .models import CategoryTotals, PeriodTotals

DEFAULT_REPORT_TITLE = "SpendLite Category Totals"

AMOUNT_WIDTH = 12
PCT_WIDTH = 6
_MIN_CATEGORY_WIDTH = 8

_SEPARATORS_RE = re.compile(r"[_-]+")
_WHITESPACE_RE = re.compile(r"\s+")
_WORD_START_RE = re.compile(r"\b([a-z])")

_CENTS = Decimal("0.01")
_TENTHS = Decimal("0.1")


def format_money(value: Decimal) -> str:
    """Two decimals, ties rounded away from zero (``0.125`` -> ``0.13``)."""

    return str(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


def _percent(value: Decimal) -> str:
    return f"{Decimal(value).quantize(_TENTHS, rounding=ROUND_HALF_UP)}%"


def to_title_case(value: str | None) -> str:
    """``"EATING_OUT"`` -> ``"Eating Out"``."""

    if not value:
        return ""
    s = _SEPARATORS_RE.sub(" ", str(value).lower())
    s = _WHITESPACE_RE.sub(" ", s).strip()
    return _WORD_START_RE.sub(lambda m: m[1].upper(), s)


def format_category_totals(
    totals: CategoryTotals,
    period_label: str | None,
    *,
    title: str = DEFAULT_REPORT_TITLE,
) -> str:
    """Render ``totals`` as the fixed-width text report (no trailing newline)."""

    header = f"{title} ({friendly_month_or_all(period_label)})"
    names = [to_title_case(row.category) for row in totals.rows]
    cat_width = max(_MIN_CATEGORY_WIDTH, len("Category"), *(len(n) for n in names))

    lines = [
        header,
        "=" * len(header),
        f"{'Category':<{cat_width}} {'Amount':>{AMOUNT_WIDTH}} {'%':>{PCT_WIDTH}}",
    ]
    for name, row in zip(names, totals.rows, strict=True):
        amount = format_money(row.total)
        pct = _percent(row.pct)
        lines.append(f"{name:<{cat_width}} {amount:>{AMOUNT_WIDTH}} {pct:>{PCT_WIDTH}}")
    lines.append("")
    grand = format_money(totals.grand_total)
    lines.append(f"{'TOTAL':<{cat_width}} {grand:>{AMOUNT_WIDTH}} {'100%':>{PCT_WIDTH}}")
    return "\n".join(lines)


def report_filename(period_label: str | None) -> str:
    label = friendly_month_or_all(period_label)
    return f"category_totals_{_WHITESPACE_RE.sub('_', label)}.txt"


def format_period_summary(
    totals: PeriodTotals,
    period_label: str | None,
    *,
    category: str | None = None,
) -> str:
    """One-line summary of a filtered view (count, debit, credit, net)."""

    label = friendly_month_or_all(period_label)
    cat = f' + category "{category}"' if category else ""
    return (
        f"Showing {totals.count} transactions for {label}{cat}"
        f" · Debit: ${format_money(totals.debit_sum)}"
        f" · Credit: ${format_money(totals.credit_sum)}"
        f" · Net: ${format_money(totals.net)}"
    )


__all__ = [
    "DEFAULT_REPORT_TITLE",
    "AMOUNT_WIDTH",
    "PCT_WIDTH",
    "to_title_case",
    "format_money",
    "format_category_totals",
    "report_filename",
    "format_period_summary",
]
