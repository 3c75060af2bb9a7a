"""Pytest configuration for test isolation.

``JsonFileStorage`` defaults to ``./.spendlite`` under the working directory.
Tests that touch storage would otherwise share (and leave behind) state in
the repository, so every test gets its own state directory via an autouse
fixture. The package logger is reset after each test.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from spendlite.logging_setup import LOGGER_NAME


@pytest.fixture(autouse=True)
def _isolate_state_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point ``SPENDLITE_STATE_DIR`` at the test's own temporary directory."""

    state_root = tmp_path / "state"
    state_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("SPENDLITE_STATE_DIR", os.fspath(state_root))
    monkeypatch.delenv("SPENDLITE_PAGE_SIZE", raising=False)
    monkeypatch.delenv("SPENDLITE_LOG_LEVEL", raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers the CLI attached so streams don't outlive their test."""

    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
