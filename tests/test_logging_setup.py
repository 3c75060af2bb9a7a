import io
import logging

import pytest

from spendlite.logging_setup import LOGGER_NAME, configure_logging, get_logger, resolve_level


def test_resolve_level_prefers_argument_then_env(monkeypatch):
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" 30 ") == 30
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level() == logging.INFO
    monkeypatch.setenv("SPENDLITE_LOG_LEVEL", "warning")
    assert resolve_level() == logging.WARNING
    assert resolve_level("error") == logging.ERROR


def test_resolve_level_rejects_unknown_name():
    with pytest.raises(ValueError, match="unknown log level 'LOUD'"):
        resolve_level("loud")


def test_library_loggers_are_silent_until_configured():
    get_logger("spendlite.rules")
    handlers = logging.getLogger(LOGGER_NAME).handlers
    assert handlers and all(isinstance(h, logging.NullHandler) for h in handlers)


def test_configure_replaces_handler_and_writes_to_stream():
    first, second = io.StringIO(), io.StringIO()
    configure_logging("info", stream=first)
    assert configure_logging("debug", stream=second) == logging.DEBUG

    logger = logging.getLogger(LOGGER_NAME)
    assert len(logger.handlers) == 1
    get_logger("spendlite.session").debug("loaded %d rows", 3)
    assert first.getvalue() == ""
    assert second.getvalue() == "DEBUG spendlite.session: loaded 3 rows\n"
