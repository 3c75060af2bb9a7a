from decimal import Decimal

import pytest

from spendlite.categorize import categorize, category_for, filter_by_category
from spendlite.models import Rule, Transaction
from spendlite.rules import parse_rules

RULES = parse_rules(
    """
    shell => petrol
    woolworths => groceries
    visa coffee => coffee
    """
)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("1.50"), "COFFEE"),
        (Decimal("2.00"), "COFFEE"),
        (Decimal("2.01"), "PETROL"),
        (Decimal("-1.00"), "COFFEE"),
        (Decimal("-2.50"), "PETROL"),
    ],
)
def test_small_petrol_amounts_become_coffee(amount, expected):
    tx = Transaction("01/12/2024", amount, "SHELL COLES EXPRESS")
    categorize([tx], RULES)
    assert tx.category == expected


def test_petrol_override_is_case_insensitive_on_category():
    rules = [Rule("bp", "petrol")]
    assert category_for(Transaction("", Decimal("1"), "BP CONNECT"), rules) == "COFFEE"
    assert category_for(Transaction("", Decimal("9"), "BP CONNECT"), rules) == "petrol"


def test_unmatched_is_uncategorised():
    tx = Transaction("01/12/2024", Decimal("10"), "Mystery merchant")
    categorize([tx], RULES)
    assert tx.category == "UNCATEGORISED"


def test_first_rule_in_order_wins():
    rules = parse_rules("metro => transport\nwoolworths metro => groceries")
    tx = Transaction("", Decimal("30"), "WOOLWORTHS METRO 123")
    categorize([tx], rules)
    assert tx.category == "TRANSPORT"


def test_categorize_is_idempotent_and_ignores_previous_category():
    txns = [
        Transaction("", Decimal("50"), "WOOLWORTHS 1", category="SOMETHING ELSE"),
        Transaction("", Decimal("1"), "SHELL 2"),
        Transaction("", Decimal("40"), "SHELL 3"),
        Transaction("", Decimal("5"), "nothing"),
    ]
    categorize(txns, RULES)
    first = [t.category for t in txns]
    categorize(txns, RULES)
    assert [t.category for t in txns] == first == ["GROCERIES", "COFFEE", "PETROL", "UNCATEGORISED"]


def test_filter_by_category():
    txns = [
        Transaction("", Decimal("1"), "a", category="GROCERIES"),
        Transaction("", Decimal("1"), "b", category=None),
        Transaction("", Decimal("1"), "c", category="petrol"),
    ]
    assert [t.description for t in filter_by_category(txns, "uncategorised")] == ["b"]
    assert [t.description for t in filter_by_category(txns, "PETROL")] == ["c"]
    assert [t.description for t in filter_by_category(txns, None)] == ["a", "b", "c"]
