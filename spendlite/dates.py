"""Locale-independent date resolution for raw CSV date cells.

Bank exports mix ISO dates, day-first slash/dash dates and long-form dates
such as ``"Mon 1 December 2024"``. Resolution walks a fixed list of patterns
and never hands the string to a generic parser, because those default to
month-first for ambiguous values like ``01/12/2024``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date

from .models import Transaction

_ISO_RE = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})$")
_DAY_FIRST_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_LEADING_TIME_RE = re.compile(r"^\d{1,2}:\d{2}\s*(am|pm)\s*", re.IGNORECASE)
_LONG_FORM_RE = re.compile(
    r"^(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)?\s*(\d{1,2})\s+"
    r"(January|February|March|April|May|June|July|August|September|October|November|December)"
    r",?\s+(\d{4})",
    re.IGNORECASE,
)
_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")

_MONTHS = {
    name: i
    for i, name in enumerate(
        (
            "january",
            "february",
            "march",
            "april",
            "may",
            "june",
            "july",
            "august",
            "september",
            "october",
            "november",
            "december",
        ),
        start=1,
    )
}

ALL_MONTHS_LABEL = "All months"


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        # Out-of-range day/month such as 31/02/2024.
        return None


def resolve_date(raw: str | None) -> date | None:
    """Resolve a raw date cell to a calendar date, or ``None``.

    Precedence (first match wins):

    1. ``YYYY-MM-DD`` / ``YYYY/MM/DD``
    2. ``D/M/YYYY`` / ``D-M-YYYY``, always day-first
    3. a leading ``H:MM am|pm`` token is dropped
    4. ``[Weekday] D MonthName[,] YYYY``; the weekday is not checked
    """

    if not raw:
        return None
    s = str(raw).strip()

    m = _ISO_RE.match(s)
    if m:
        return _safe_date(int(m[1]), int(m[2]), int(m[3]))

    m = _DAY_FIRST_RE.match(s)
    if m:
        return _safe_date(int(m[3]), int(m[2]), int(m[1]))

    s = _LEADING_TIME_RE.sub("", s, count=1)

    m = _LONG_FORM_RE.match(s)
    if m:
        return _safe_date(int(m[3]), _MONTHS[m[2].lower()], int(m[1]))

    return None


def month_key(d: date) -> str:
    """Return the zero-padded ``"YYYY-MM"`` key of ``d``."""

    return f"{d.year:04d}-{d.month:02d}"


def month_key_of(raw: str | None) -> str | None:
    d = resolve_date(raw)
    return month_key(d) if d is not None else None


def filter_by_month(transactions: Iterable[Transaction], key: str | None) -> list[Transaction]:
    """Keep transactions whose resolved month equals ``key``.

    An empty ``key`` means "all months" and keeps everything, including rows
    whose date does not resolve.
    """

    txns = list(transactions)
    if not key:
        return txns
    return [t for t in txns if month_key_of(t.date) == key]


def available_months(transactions: Iterable[Transaction]) -> list[str]:
    """Sorted unique month keys across all resolvable transaction dates."""

    return sorted({k for t in transactions if (k := month_key_of(t.date)) is not None})


def first_transaction_month(transactions: Iterable[Transaction]) -> str | None:
    for t in transactions:
        return month_key_of(t.date)
    return None


def format_month_label(key: str | None) -> str:
    """Render ``"2024-12"`` as ``"December 2024"``; empty renders as all months."""

    if not key:
        return ALL_MONTHS_LABEL
    try:
        year, month = (int(p) for p in key.split("-"))
        return date(year, month, 1).strftime("%B %Y")
    except ValueError:
        return key


def friendly_month_or_all(label: str | None) -> str:
    """Like :func:`format_month_label`, passing through non-key labels."""

    if not label:
        return ALL_MONTHS_LABEL
    if _MONTH_KEY_RE.match(label):
        return format_month_label(label)
    return str(label)


__all__ = [
    "ALL_MONTHS_LABEL",
    "resolve_date",
    "month_key",
    "month_key_of",
    "filter_by_month",
    "available_months",
    "first_transaction_month",
    "format_month_label",
    "friendly_month_or_all",
]
