"""Keyword rules: parsing, ordered-token matching and rule-text edits.

Rule text is one rule per line::

    # comments and blank lines are ignored
    woolworths => groceries
    visa shell => petrol

Keywords are lowercased and categories uppercased. Line order is the only
priority mechanism; the first rule that matches a description wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .logging_setup import get_logger
from .models import UNCATEGORISED, Rule, Transaction
from .report import to_title_case

_logger = get_logger("spendlite.rules")

_ARROW_RE = re.compile(r"=>", re.IGNORECASE)
_PAYPAL_RE = re.compile(r"\bPAYPAL\b")
_LEADING_SEPARATORS_RE = re.compile(r"^[\s\-:/*]+")
_WORD_RE = re.compile(r"^([A-Za-z0-9&._]+)")

DEFAULT_RULES_TEXT = "# Rules format: KEYWORD => CATEGORY\n"


def _split_rule_line(line: str) -> tuple[str, str] | None:
    """Return the raw ``(keyword, category)`` parts of a rule line.

    Comment and blank lines, and lines without ``=>``, give ``None``. Only
    the segment between the first and second ``=>`` is the category.
    """

    trimmed = line.strip()
    if not trimmed or trimmed.startswith("#"):
        return None
    parts = _ARROW_RE.split(trimmed)
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


def parse_rules(text: str | None) -> list[Rule]:
    """Parse rule text into an ordered list of :class:`Rule`."""

    rules: list[Rule] = []
    skipped = 0
    for line in str(text or "").splitlines():
        parts = _split_rule_line(line)
        if parts is None:
            continue
        keyword = parts[0].strip().lower()
        category = parts[1].strip().upper()
        if not keyword or not category:
            skipped += 1
            continue
        rules.append(Rule(keyword=keyword, category=category))
    if skipped:
        _logger.debug("parse_rules: dropped %d line(s) with an empty keyword or category", skipped)
    return rules


def matches_keyword(description_lower: str, keyword_lower: str) -> bool:
    """Return whether every keyword token occurs in order in the description.

    Tokens may have arbitrary text between them but may not overlap:
    ``"visa store"`` matches ``"visa purchase at store"`` and not
    ``"store visa purchase"``.
    """

    tokens = str(keyword_lower or "").split()
    if not tokens:
        return False
    pos = 0
    for token in tokens:
        i = description_lower.find(token, pos)
        if i == -1:
            return False
        pos = i + len(token)
    return True


def first_matching_rule(description: str, rules: Iterable[Rule]) -> Rule | None:
    desc_lower = str(description or "").lower()
    for rule in rules:
        if matches_keyword(desc_lower, rule.keyword):
            return rule
    return None


def upsert_rule(rule_text: str | None, keyword: str, category: str) -> str:
    """Add or replace the rule for ``keyword`` and return the new rule text.

    The first rule line whose keyword equals ``keyword`` (case-insensitive)
    is rewritten in place; otherwise a new line is appended. Comments, blank
    lines and all other rules are preserved as-is.
    """

    kw = keyword.strip().upper()
    cat = category.strip().upper()
    if not kw or not cat:
        raise ValueError("keyword and category must be non-empty")

    new_line = f"{kw} => {cat}"
    lines = str(rule_text or "").splitlines()
    for i, line in enumerate(lines):
        parts = _split_rule_line(line)
        if parts is not None and parts[0].strip().upper() == kw:
            lines[i] = new_line
            break
    else:
        lines.append(new_line)
    return "\n".join(lines)


def collect_categories(
    rules: Iterable[Rule] = (),
    transactions: Iterable[Transaction] = (),
    rule_text: str | None = None,
) -> list[str]:
    """Return every known category, uppercased and sorted by display name.

    Sources are parsed rules, categories already assigned to transactions
    and any category written in ``rule_text`` (including lines that the
    parser drops). ``UNCATEGORISED`` is always present.
    """

    found: set[str] = set()
    for rule in rules:
        if rule.category.strip():
            found.add(rule.category.strip().upper())
    for tx in transactions:
        if tx.category and tx.category.strip():
            found.add(tx.category.strip().upper())
    for line in str(rule_text or "").splitlines():
        parts = _split_rule_line(line)
        if parts is not None and parts[1].strip():
            found.add(parts[1].strip().upper())
    found.add(UNCATEGORISED)
    return sorted(found, key=to_title_case)


def _next_word_after(marker: str, description: str) -> str:
    i = description.lower().find(marker.lower())
    if i == -1:
        return ""
    after = _LEADING_SEPARATORS_RE.sub("", description[i + len(marker) :])
    m = _WORD_RE.match(after)
    return m[1] if m else ""


def suggest_keyword(description: str | None) -> str:
    """Guess a rule keyword for a description.

    PayPal payments suggest ``PAYPAL <merchant>``, card purchases use the
    word after ``VISA-``, everything else the first word.
    """

    desc = description or ""
    upper = desc.upper()
    if _PAYPAL_RE.search(upper):
        nxt = _next_word_after("paypal", desc)
        suggestion = "PAYPAL" + (f" {nxt}" if nxt else "")
    else:
        visa_pos = upper.find("VISA-")
        if visa_pos != -1:
            after = desc[visa_pos + len("VISA-") :].split()
            suggestion = after[0] if after else ""
        else:
            words = desc.split()
            suggestion = words[0] if words else ""
    return suggestion.upper()


__all__ = [
    "DEFAULT_RULES_TEXT",
    "parse_rules",
    "matches_keyword",
    "first_matching_rule",
    "upsert_rule",
    "collect_categories",
    "suggest_keyword",
]
