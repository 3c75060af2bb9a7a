"""Public interface for the ``spendlite`` package.

Re-exports the pipeline functions and models as the stable import surface.
There is no runtime logic here, only symbol re-exports.
"""

from .aggregate import category_totals, period_totals
from .categorize import categorize, filter_by_category
from .csv_ingest import ingest, parse_amount
from .dates import filter_by_month, format_month_label, month_key, resolve_date
from .models import (
    UNCATEGORISED,
    CategoryRow,
    CategoryTotals,
    ColumnMap,
    Page,
    PeriodTotals,
    Rule,
    Transaction,
)
from .report import format_category_totals, to_title_case
from .rules import matches_keyword, parse_rules, suggest_keyword, upsert_rule
from .session import SpendSession
from .storage import JsonFileStorage, MemoryStorage, StoragePort

__all__ = [
    # Pipeline
    "ingest",
    "parse_amount",
    "resolve_date",
    "month_key",
    "filter_by_month",
    "format_month_label",
    "parse_rules",
    "matches_keyword",
    "upsert_rule",
    "suggest_keyword",
    "categorize",
    "filter_by_category",
    "category_totals",
    "period_totals",
    "format_category_totals",
    "to_title_case",
    # State / storage
    "SpendSession",
    "StoragePort",
    "MemoryStorage",
    "JsonFileStorage",
    # Models
    "UNCATEGORISED",
    "Transaction",
    "Rule",
    "ColumnMap",
    "CategoryRow",
    "CategoryTotals",
    "PeriodTotals",
    "Page",
]
