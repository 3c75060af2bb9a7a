"""Caller-owned session state tying the pipeline together.

A :class:`SpendSession` holds the loaded transactions, the rule text, the
active month/category filters and the current page. Every change of rules or
filters triggers a full recategorization of the month-filtered subset; there
are no incremental updates.

Persistence goes through an injected :class:`~spendlite.storage.StoragePort`
and is best-effort: a failing store is logged and otherwise ignored, so it
never interrupts ingestion or categorization.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .aggregate import category_totals, period_totals
from .categorize import categorize, filter_by_category
from .csv_ingest import ingest
from .dates import available_months, filter_by_month, first_transaction_month
from .logging_setup import get_logger
from .models import UNCATEGORISED, CategoryTotals, Page, PeriodTotals, Rule, Transaction
from .report import DEFAULT_REPORT_TITLE, format_category_totals, format_period_summary
from .rules import DEFAULT_RULES_TEXT, collect_categories, parse_rules, suggest_keyword, upsert_rule
from .storage import (
    FILTER_KEY,
    MONTH_KEY,
    RULES_KEY,
    TXNS_KEY,
    StoragePort,
    dump_transactions,
    parse_transactions,
)

PAGE_SIZE = 10
PAGE_WINDOW = 5

_logger = get_logger("spendlite.session")


# ----------------------------------------------------------------------------
# Paging helpers
# ----------------------------------------------------------------------------


def paginate(items: Sequence[Transaction], page: int, page_size: int = PAGE_SIZE) -> Page:
    """Return the requested page, clamping ``page`` into ``[1, total_pages]``."""

    if page_size <= 0:
        raise ValueError("page_size must be a positive integer")
    total_pages = max(1, math.ceil(len(items) / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return Page(items=tuple(items[start : start + page_size]), page=page, total_pages=total_pages)


def page_window(current: int, total_pages: int, width: int = PAGE_WINDOW) -> list[int]:
    """Page numbers to offer around ``current`` (at most ``width`` of them)."""

    pages = max(1, total_pages)
    start = max(1, current - width // 2)
    end = min(pages, start + width - 1)
    start = max(1, min(start, end - width + 1))
    return list(range(start, end + 1))


# ----------------------------------------------------------------------------
# Session
# ----------------------------------------------------------------------------


class SpendSession:
    """Explicit state for one user's view of their transactions."""

    def __init__(self, storage: StoragePort | None = None) -> None:
        self.storage = storage
        self.transactions: list[Transaction] = []
        self.rule_text: str = ""
        self.rules: list[Rule] = []
        self.category_filter: str | None = None
        self.month_filter: str = ""
        self.page: int = 1

    # ---- persistence -----------------------------------------------------

    def _save(self, key: str, value: str) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(key, value)
        except Exception:
            _logger.debug("session:save_failed key=%s", key, exc_info=True)

    def _remove(self, key: str) -> None:
        if self.storage is None:
            return
        try:
            self.storage.remove(key)
        except Exception:
            _logger.debug("session:remove_failed key=%s", key, exc_info=True)

    def _load(self, key: str) -> str | None:
        if self.storage is None:
            return None
        try:
            return self.storage.load(key)
        except Exception:
            _logger.debug("session:load_failed key=%s", key, exc_info=True)
            return None

    def _save_transactions(self) -> None:
        self._save(TXNS_KEY, dump_transactions(self.transactions))

    def restore(self, default_rules: str | None = None) -> None:
        """Reload rules, filters and transactions from storage.

        Rule text falls back to ``default_rules`` and then to a bare format
        comment when storage holds nothing usable.
        """

        saved_rules = self._load(RULES_KEY)
        if saved_rules and saved_rules.strip():
            self.rule_text = saved_rules
        elif default_rules is not None:
            self.rule_text = default_rules
        else:
            self.rule_text = DEFAULT_RULES_TEXT
        self.rules = parse_rules(self.rule_text)

        saved_filter = self._load(FILTER_KEY)
        if saved_filter and saved_filter.strip():
            self.category_filter = saved_filter.strip().upper()
        else:
            self.category_filter = None
        self.month_filter = self._load(MONTH_KEY) or ""

        stored = parse_transactions(self._load(TXNS_KEY))
        if stored is not None:
            self.transactions = stored
        self.page = 1

    # ---- ingestion and rules --------------------------------------------

    def load_csv(self, raw_text: str) -> list[Transaction]:
        """Replace all transactions with the contents of ``raw_text``."""

        self.transactions = ingest(raw_text)
        self._save_transactions()
        if self.month_filter and self.month_filter not in self.months():
            self.month_filter = ""
        self.apply_rules()
        return self.transactions

    def set_rule_text(self, text: str, *, keep_page: bool = False) -> None:
        self.rule_text = text
        self._save(RULES_KEY, text)
        self.apply_rules(keep_page=keep_page)

    def apply_rules(self, *, keep_page: bool = False) -> None:
        """Reparse the rule text and recategorize the month-filtered subset."""

        if not keep_page:
            self.page = 1
        self.rules = parse_rules(self.rule_text)
        categorize(self.month_filtered(), self.rules)
        self._save_transactions()

    def assign_category(self, keyword: str, category: str) -> str:
        """Add or replace the rule for ``keyword`` and recategorize.

        Returns the updated rule text.
        """

        self.set_rule_text(upsert_rule(self.rule_text, keyword, category), keep_page=True)
        return self.rule_text

    def suggestion_for(self, index: int) -> tuple[str, str]:
        """Return ``(suggested keyword, current category)`` for a transaction.

        ``index`` is the 0-based position in the loaded file; negative values
        raise :class:`IndexError` like any other out-of-range position.
        """

        if index < 0:
            raise IndexError(f"transaction index out of range: {index}")
        tx = self.transactions[index]
        return suggest_keyword(tx.description), (tx.category or UNCATEGORISED).upper()

    def categories(self) -> list[str]:
        return collect_categories(self.rules, self.transactions, self.rule_text)

    # ---- filters ---------------------------------------------------------

    def set_month_filter(self, key: str | None) -> None:
        self.month_filter = key or ""
        if self.month_filter:
            self._save(MONTH_KEY, self.month_filter)
        else:
            self._remove(MONTH_KEY)
        self.apply_rules()

    def set_category_filter(self, category: str | None) -> None:
        self.category_filter = category.strip().upper() if category and category.strip() else None
        if self.category_filter:
            self._save(FILTER_KEY, self.category_filter)
        else:
            self._remove(FILTER_KEY)
        self.page = 1

    def months(self) -> list[str]:
        return available_months(self.transactions)

    def month_filtered(self) -> list[Transaction]:
        return filter_by_month(self.transactions, self.month_filter)

    def visible(self) -> list[Transaction]:
        """Month-filtered transactions narrowed by the category filter."""

        return filter_by_category(self.month_filtered(), self.category_filter)

    # ---- views -----------------------------------------------------------

    def current_page(self, page_size: int = PAGE_SIZE) -> Page:
        result = paginate(self.visible(), self.page, page_size)
        self.page = result.page
        return result

    def go_to_page(self, page: int, page_size: int = PAGE_SIZE) -> Page:
        self.page = page
        return self.current_page(page_size)

    def category_totals(self) -> CategoryTotals:
        return category_totals(self.month_filtered())

    def period_totals(self) -> PeriodTotals:
        return period_totals(self.visible())

    def export_label(self) -> str:
        return self.month_filter or first_transaction_month(self.month_filtered()) or ""

    def totals_report(self, *, title: str = DEFAULT_REPORT_TITLE) -> str:
        return format_category_totals(self.category_totals(), self.export_label(), title=title)

    def summary(self) -> str:
        return format_period_summary(
            self.period_totals(), self.month_filter, category=self.category_filter
        )


__all__ = ["PAGE_SIZE", "PAGE_WINDOW", "paginate", "page_window", "SpendSession"]
