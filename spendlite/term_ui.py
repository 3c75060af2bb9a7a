"""Terminal prompts for the category assignment flow (prompt_toolkit-based).

These helpers are the interactive side of the rule-assignment flow and are
kept apart from the session logic: each returns a plain string, or ``None``
when the user cancels with Esc or Ctrl+C.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings

from .models import UNCATEGORISED


def _cancel_bindings() -> KeyBindings:
    kb = KeyBindings()

    @kb.add("escape")
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    return kb


def _make_session(session: PromptSession | None, kb: KeyBindings) -> PromptSession:
    if session is None:
        return PromptSession(key_bindings=kb)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        key_bindings=kb,
    )


def prompt_keyword(
    suggested: str = "",
    *,
    session: PromptSession | None = None,
    message: str = "Enter keyword to match: ",
) -> str | None:
    """Ask for the rule keyword, pre-filled with ``suggested``.

    Returns the uppercased keyword, or ``None`` when canceled or left empty.
    """

    kb = _cancel_bindings()
    sess = _make_session(session, kb)
    result = sess.prompt(message, default=suggested.upper(), key_bindings=kb)
    if result is None or not result.strip():
        return None
    return result.strip().upper()


def select_category(
    categories: Sequence[str] | Iterable[str],
    *,
    default: str = UNCATEGORISED,
    session: PromptSession | None = None,
    message: str = "Choose category (Enter to accept): ",
) -> str | None:
    """Pick a known category or type a new one.

    Known categories complete case-insensitively, including on text in the
    middle of a name. The default is pre-filled, so Enter accepts it; an
    emptied buffer also falls back to the default. Any typed name is
    accepted and returned uppercased.
    """

    words = list(categories)
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)
    kb = _cancel_bindings()
    sess = _make_session(session, kb)

    result = sess.prompt(
        message,
        default=default or "",
        completer=completer,
        key_bindings=kb,
    )
    if result is None:
        return None
    chosen = result.strip() or default or UNCATEGORISED
    return chosen.strip().upper() or UNCATEGORISED


__all__ = ["prompt_keyword", "select_category"]
