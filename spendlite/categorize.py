"""Rule-based categorization of transactions.

Every pass recomputes each category from the description and amount alone,
so running it repeatedly with the same rules always gives the same result.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from .logging_setup import get_logger
from .models import UNCATEGORISED, Rule, Transaction
from .rules import first_matching_rule

_logger = get_logger("spendlite.categorize")

PETROL = "PETROL"
COFFEE = "COFFEE"
# PETROL matches at or below this absolute amount are treated as COFFEE.
SMALL_PETROL_LIMIT = Decimal(2)


def category_for(tx: Transaction, rules: Sequence[Rule]) -> str:
    rule = first_matching_rule(tx.description, rules)
    if rule is None:
        return UNCATEGORISED
    if rule.category.upper() == PETROL and abs(tx.amount) <= SMALL_PETROL_LIMIT:
        return COFFEE
    return rule.category


def categorize(transactions: Iterable[Transaction], rules: Sequence[Rule]) -> None:
    """Assign ``category`` on every transaction in place."""

    count = 0
    uncategorised = 0
    for tx in transactions:
        tx.category = category_for(tx, rules)
        count += 1
        if tx.category == UNCATEGORISED:
            uncategorised += 1
    _logger.debug(
        "categorize: transactions=%d rules=%d uncategorised=%d", count, len(rules), uncategorised
    )


def filter_by_category(
    transactions: Iterable[Transaction], category: str | None
) -> list[Transaction]:
    """Keep transactions in ``category``; ``None``/empty keeps everything."""

    txns = list(transactions)
    if not category:
        return txns
    wanted = category.strip().upper()
    return [t for t in txns if (t.category or UNCATEGORISED).upper() == wanted]


__all__ = [
    "PETROL",
    "COFFEE",
    "SMALL_PETROL_LIMIT",
    "category_for",
    "categorize",
    "filter_by_category",
]
