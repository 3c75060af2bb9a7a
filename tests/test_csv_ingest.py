import textwrap
from decimal import Decimal

import pytest

from spendlite.csv_ingest import (
    FALLBACK_COLUMNS,
    ingest,
    looks_like_header,
    map_headers,
    parse_amount,
    parse_csv_rows,
)
from spendlite.models import ColumnMap, Transaction


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


def _headerless_row(date="", debit="", description="", width=10) -> str:
    cells = [""] * width
    cells[2] = date
    cells[5] = debit
    if width > 9:
        cells[9] = description
    else:
        cells[-1] = description
    return ",".join(f'"{c}"' if "," in c else c for c in cells)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12.50", Decimal("12.50")),
        ("$1,234.56", Decimal("1234.56")),
        ("-45.10", Decimal("-45.10")),
        ("AUD 7", Decimal("7")),
        ("", Decimal(0)),
        (None, Decimal(0)),
        ("n/a", Decimal(0)),
        ("-", Decimal(0)),
        ("1.2.3", Decimal(0)),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_tokenizer_handles_quotes_and_blank_lines():
    text = 'a,"b, c","say ""hi"""\n   \n\nd,e,f\r\n'
    assert parse_csv_rows(text) == [["a", "b, c", 'say "hi"'], ["d", "e", "f"]]


def test_tokenizer_keeps_mid_cell_quotes_literal():
    assert parse_csv_rows('a,b"x,y"c,d') == [["a", 'b"x', 'y"c', "d"]]


def test_only_newlines_break_lines():
    text = _headerless_row(date="01/12/2024", debit="5.00", description="A\x0cB")
    txns = ingest(text + "\r\n" + text)
    assert [t.description for t in txns] == ["A\x0cB", "A\x0cB"]


def test_line_with_bare_carriage_return_is_skipped():
    assert parse_csv_rows("a\rb,c\nd,e") == [["d", "e"]]


def test_header_detection():
    assert looks_like_header(["Account", "Effective Date", "Amount"])
    assert looks_like_header(["x", "LONG DESC"])
    assert not looks_like_header(["123", "01/12/2024", "12.50"])


def test_map_headers_uses_alias_precedence():
    header = ["Posted Date", "Date", "Details", "Long Description", "Debit", "Credit Amount"]
    assert map_headers(header) == ColumnMap(
        effective_date=1, debit=4, credit=5, long_description=3, has_header=True
    )


def test_map_headers_marks_missing_fields():
    cols = map_headers(["Date", "Narrative", "Amount"])
    assert cols.effective_date == 0
    assert cols.long_description == 1
    assert cols.debit == -1
    assert cols.credit == -1


def test_headerless_row_yields_transaction():
    text = _headerless_row(date="01/12/2024", debit="12.50", description="COFFEE SHOP")
    txns = ingest(text)
    assert txns == [
        Transaction(date="01/12/2024", amount=Decimal("12.5"), description="COFFEE SHOP")
    ]
    assert txns[0].amount == 12.5


def test_headerless_zero_amount_row_is_dropped():
    text = "\n".join(
        [
            _headerless_row(date="01/12/2024", debit="", description="NOTHING"),
            _headerless_row(date="02/12/2024", debit="abc", description="BAD AMOUNT"),
            _headerless_row(date="03/12/2024", debit="3.00", description="KEPT"),
        ]
    )
    assert [t.description for t in ingest(text)] == ["KEPT"]


def test_headerless_short_row_uses_last_column_for_description():
    text = _headerless_row(date="01/12/2024", debit="4.00", description="SHORT ROW", width=7)
    (tx,) = ingest(text)
    assert tx.description == "SHORT ROW"
    assert FALLBACK_COLUMNS.long_description == 9


def test_header_file_amount_is_debit_minus_credit():
    text = _dedent(
        """
        Effective Date,Debit Amount,Credit Amount,Long Description
        01/12/2024,"1,200.00",,RENT PAYMENT
        02/12/2024,,350.25,SALARY ACME
        03/12/2024,0.00,0.00,ZERO ROW
        """
    )
    txns = ingest(text)
    assert [(t.date, t.amount, t.description) for t in txns] == [
        ("01/12/2024", Decimal("1200.00"), "RENT PAYMENT"),
        ("02/12/2024", Decimal("-350.25"), "SALARY ACME"),
    ]


def test_rows_without_date_or_description_are_dropped():
    text = _dedent(
        """
        Date,Debit,Description
        ,10.00,
        ,11.00,  NO DATE  
        05/12/2024,12.00,
        """
    )
    txns = ingest(text)
    assert [(t.date, t.description) for t in txns] == [("", "NO DATE"), ("05/12/2024", "")]


def test_header_without_credit_column_treats_credit_as_zero():
    text = _dedent(
        """
        Value Date,Debit,Details
        2024-01-05,-20.00,REFUND SHOP
        """
    )
    (tx,) = ingest(text)
    assert tx.amount == Decimal("-20.00")
    assert tx.description == "REFUND SHOP"


def test_empty_input():
    assert ingest("") == []
    assert ingest("   \n  ") == []
    assert ingest(None) == []
