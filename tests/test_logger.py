# File: tests/test_logger.py
import logging

import pytest

from threepwood.logger import LOGGER_NAME, init_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    init_logging()


def test_default_is_stderr_only_at_warning():
    lg = init_logging()
    assert lg.name == LOGGER_NAME
    assert lg.level == logging.WARNING
    assert len(lg.handlers) == 1
    assert lg.propagate is False


def test_log_file_receives_records(tmp_path):
    log_path = tmp_path / "threepwood.log"
    lg = init_logging("DEBUG", log_path)
    assert len(lg.handlers) == 2
    lg.debug("VISITING: %s", "http://example.com/")
    for handler in lg.handlers:
        handler.flush()
    text = log_path.read_text(encoding="utf-8")
    assert "DEBUG" in text
    assert "VISITING: http://example.com/" in text


def test_reinit_replaces_handlers(tmp_path):
    init_logging("INFO", tmp_path / "a.log")
    lg = init_logging("ERROR")
    assert len(lg.handlers) == 1
    assert lg.level == logging.ERROR
