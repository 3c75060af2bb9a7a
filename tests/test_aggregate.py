import random
from decimal import Decimal

from spendlite.aggregate import category_totals, period_totals
from spendlite.models import CategoryRow, Transaction


def _tx(amount: str, category: str | None) -> Transaction:
    return Transaction("01/12/2024", Decimal(amount), "desc", category=category)


def test_category_totals_groups_and_sorts_descending():
    txns = [
        _tx("10.00", "groceries"),
        _tx("5.00", "PETROL"),
        _tx("20.00", "GROCERIES"),
        _tx("-15.00", "SALARY"),
        _tx("7.50", None),
        _tx("2.50", "  "),
    ]
    totals = category_totals(txns)
    assert [(r.category, r.total) for r in totals.rows] == [
        ("GROCERIES", Decimal("30.00")),
        ("UNCATEGORISED", Decimal("10.00")),
        ("PETROL", Decimal("5.00")),
        ("SALARY", Decimal("-15.00")),
    ]
    assert totals.grand_total == Decimal("30.00")
    assert totals.rows[0].pct == Decimal(100)


def test_equal_totals_keep_first_seen_order():
    txns = [_tx("5", "B"), _tx("5", "A"), _tx("9", "C"), _tx("5", "D")]
    assert [r.category for r in category_totals(txns).rows] == ["C", "B", "A", "D"]


def test_zero_grand_total_gives_zero_percentages():
    totals = category_totals([_tx("10", "A"), _tx("-10", "B")])
    assert totals.grand_total == 0
    assert all(r.pct == 0 for r in totals.rows)


def test_empty_input():
    totals = category_totals([])
    assert totals.rows == ()
    assert totals.grand_total == 0
    assert period_totals([]).count == 0


def test_sums_and_percentages_are_consistent():
    rng = random.Random(1234)
    cats = ["A", "B", "C", "D", None]
    txns = [
        _tx(f"{rng.randint(1, 50000) / 100:.2f}", rng.choice(cats)) for _ in range(200)
    ]
    totals = category_totals(txns)
    assert sum(r.total for r in totals.rows) == totals.grand_total == sum(t.amount for t in txns)
    assert abs(sum(r.pct for r in totals.rows) - 100) < Decimal("0.0001")


def test_category_row_is_a_named_tuple():
    row = category_totals([_tx("3", "X")]).rows[0]
    assert row == CategoryRow("X", Decimal("3"), Decimal(100))


def test_period_totals():
    totals = period_totals([_tx("10.00", None), _tx("-4.25", None), _tx("2.50", None)])
    assert totals.debit_sum == Decimal("12.50")
    assert totals.credit_sum == Decimal("4.25")
    assert totals.net == Decimal("8.25")
    assert totals.count == 3
