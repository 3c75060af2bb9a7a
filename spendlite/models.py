"""Data models for ``spendlite``.

Plain dataclasses carry the in-memory pipeline state (transactions, rules,
column maps and derived totals). Pydantic models describe the JSON shape used
when transactions are written to a storage port, so that anything read back
is validated before it re-enters the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

UNCATEGORISED = "UNCATEGORISED"

# ---------------------------------------------------------------------------
# Core records
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Transaction:
    """A single canonical transaction.

    ``date`` is kept exactly as it appeared in the CSV; interpretation is
    deferred to :func:`spendlite.dates.resolve_date`. ``amount`` is signed:
    debits (expenses) are positive, credits are negative. ``category`` is
    rewritten in place on every categorization pass.
    """

    date: str
    amount: Decimal
    description: str
    category: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            # str() first so floats like 1.1 keep their short repr.
            self.amount = Decimal(str(self.amount))


@dataclass(frozen=True, slots=True)
class Rule:
    """A keyword-to-category rule.

    ``keyword`` is lowercase and ``category`` uppercase; both are non-empty
    when produced by :func:`spendlite.rules.parse_rules`.
    """

    keyword: str
    category: str


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Column positions for one ingestion; ``-1`` marks an unresolved field."""

    effective_date: int
    debit: int
    credit: int
    long_description: int
    has_header: bool = False


# ---------------------------------------------------------------------------
# Derived totals
# ---------------------------------------------------------------------------


class CategoryRow(NamedTuple):
    """One line of the category totals table."""

    category: str
    total: Decimal
    pct: Decimal


@dataclass(frozen=True, slots=True)
class CategoryTotals:
    rows: tuple[CategoryRow, ...]
    grand_total: Decimal


@dataclass(frozen=True, slots=True)
class PeriodTotals:
    debit_sum: Decimal
    credit_sum: Decimal
    net: Decimal
    count: int


@dataclass(frozen=True, slots=True)
class Page:
    """A slice of transactions plus the clamped paging position."""

    items: tuple[Transaction, ...]
    page: int
    total_pages: int


# ---------------------------------------------------------------------------
# Storage DTOs
# ---------------------------------------------------------------------------


class StoredTransaction(BaseModel):
    """JSON shape of a persisted transaction.

    Amounts are stored as strings so decimals survive the round trip.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    date: str
    amount: str
    description: str
    category: str | None = None

    @field_validator("amount")
    @classmethod
    def _amount_is_decimal(cls, v: str) -> str:
        try:
            Decimal(v)
        except ArithmeticError as exc:
            raise ValueError(f"amount is not a decimal: {v!r}") from exc
        return v

    @classmethod
    def from_transaction(cls, tx: Transaction) -> StoredTransaction:
        return cls(
            date=tx.date,
            amount=str(tx.amount),
            description=tx.description,
            category=tx.category,
        )

    def to_transaction(self) -> Transaction:
        return Transaction(
            date=self.date,
            amount=Decimal(self.amount),
            description=self.description,
            category=self.category,
        )


class StoredTransactions(BaseModel):
    """Top-level schema for the persisted transaction list."""

    model_config = ConfigDict(strict=True, extra="forbid")

    schema_version: int
    transactions: list[StoredTransaction]


__all__ = [
    "UNCATEGORISED",
    "Transaction",
    "Rule",
    "ColumnMap",
    "CategoryRow",
    "CategoryTotals",
    "PeriodTotals",
    "Page",
    "StoredTransaction",
    "StoredTransactions",
]
