"""Category and period totals over a caller-supplied transaction subset.

Filtering by month or category happens before these are called; the
functions here only sum what they are given.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .models import UNCATEGORISED, CategoryRow, CategoryTotals, PeriodTotals, Transaction

_HUNDRED = Decimal(100)


def _category_key(tx: Transaction) -> str:
    cat = (tx.category or "").strip()
    return cat.upper() if cat else UNCATEGORISED


def category_totals(transactions: Iterable[Transaction]) -> CategoryTotals:
    """Sum signed amounts per uppercase category, largest first.

    Rows with equal sums keep the order in which their category was first
    seen. Percentages are of the grand total, or ``0`` when it is zero.
    """

    by_cat: dict[str, Decimal] = {}
    for tx in transactions:
        key = _category_key(tx)
        by_cat[key] = by_cat.get(key, Decimal(0)) + tx.amount

    ordered = sorted(by_cat.items(), key=lambda kv: kv[1], reverse=True)
    grand = sum((total for _, total in ordered), Decimal(0))

    rows = tuple(
        CategoryRow(
            category=cat,
            total=total,
            pct=(total / grand * _HUNDRED) if grand else Decimal(0),
        )
        for cat, total in ordered
    )
    return CategoryTotals(rows=rows, grand_total=grand)


def period_totals(transactions: Iterable[Transaction]) -> PeriodTotals:
    """Debit, credit and net sums plus the number of transactions."""

    debit = Decimal(0)
    credit = Decimal(0)
    count = 0
    for tx in transactions:
        if tx.amount > 0:
            debit += tx.amount
        else:
            credit += abs(tx.amount)
        count += 1
    return PeriodTotals(debit_sum=debit, credit_sum=credit, net=debit - credit, count=count)


__all__ = ["category_totals", "period_totals"]
