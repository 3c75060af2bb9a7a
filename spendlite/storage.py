"""Key-value storage port and its adapters.

The session talks to storage through :class:`StoragePort` only. Two adapters
are provided:

- :class:`MemoryStorage`: a dict, used by tests and embedded callers.
- :class:`JsonFileStorage`: one UTF-8 file per key under a state directory.

Layout (relative to the state root, default: ``./.spendlite``)::

    <state_root>/<key>.json

Atomicity: writes target ``.tmp`` first and then ``os.replace`` into place.
"""

from __future__ import annotations

import contextlib
import json
import os
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import StoredTransaction, StoredTransactions, Transaction

# Bump only when the on-disk transaction JSON shape changes.
SCHEMA_VERSION: int = 1

# Storage keys used by the session.
RULES_KEY = "spendlite_rules"
FILTER_KEY = "spendlite_filter"
MONTH_KEY = "spendlite_month"
TXNS_KEY = "spendlite_txns_json"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")

_logger = get_logger("spendlite.storage")


class StoragePort(Protocol):
    """Minimal key-value interface consumed by :class:`~spendlite.session.SpendSession`."""

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


def _validate_key(key: str) -> str:
    """Reject keys that could escape the state directory."""

    if not _KEY_RE.fullmatch(key):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


def get_state_root() -> Path:
    """Return the state directory.

    Default: ``./.spendlite`` under the current working directory.
    Override: ``SPENDLITE_STATE_DIR`` environment variable.
    """

    root = os.getenv("SPENDLITE_STATE_DIR")
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".spendlite").resolve()


class JsonFileStorage:
    """File-per-key storage under a state directory."""

    def __init__(self, root: str | os.PathLike[str] | None = None) -> None:
        self.root = Path(root).expanduser().resolve() if root is not None else get_state_root()

    def _path(self, key: str) -> Path:
        return self.root / f"{_validate_key(key)}.json"

    def load(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            _logger.debug("storage:read_failed key=%s path=%s", key, os.fspath(path), exc_info=True)
            return None

    def save(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise

    def remove(self, key: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path(key).unlink()


# ----------------------------------------------------------------------------
# Transaction (de)serialization
# ----------------------------------------------------------------------------


def dump_transactions(transactions: Iterable[Transaction]) -> str:
    payload = StoredTransactions(
        schema_version=SCHEMA_VERSION,
        transactions=[StoredTransaction.from_transaction(t) for t in transactions],
    )
    return json.dumps(payload.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":"))


def parse_transactions(text: str | None) -> list[Transaction] | None:
    """Parse stored transaction JSON; ``None`` when absent or invalid."""

    if not text:
        return None
    try:
        parsed = StoredTransactions.model_validate_json(text)
    except ValidationError:
        _logger.debug("storage:transactions_invalid; ignoring stored copy", exc_info=True)
        return None
    if parsed.schema_version != SCHEMA_VERSION:
        return None
    return [item.to_transaction() for item in parsed.transactions]


__all__ = [
    "SCHEMA_VERSION",
    "RULES_KEY",
    "FILTER_KEY",
    "MONTH_KEY",
    "TXNS_KEY",
    "StoragePort",
    "MemoryStorage",
    "JsonFileStorage",
    "get_state_root",
    "dump_transactions",
    "parse_transactions",
]
