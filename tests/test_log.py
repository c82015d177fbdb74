"""Tests for the shared logging setup."""

import logging
from contextlib import contextmanager

from easyapply import log


@contextmanager
def bare_root(tmp_path, monkeypatch):
    """Run ``get_logger`` against a root logger with no handlers, then put pytest's back."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    monkeypatch.setattr(log, "_configured", False)
    monkeypatch.setattr(log, "_LOG_DIR", tmp_path / "logs")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    root.handlers.clear()
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_debug_reaches_file_but_not_console(tmp_path, monkeypatch):
    with bare_root(tmp_path, monkeypatch) as root:
        logger = log.get_logger("easyapply.test")

        console, file_handler = root.handlers
        assert console.level == logging.INFO
        assert file_handler.level == logging.DEBUG
        assert root.level == logging.DEBUG

        logger.debug("matcher trace")
        file_handler.flush()

    [log_file] = (tmp_path / "logs").glob("agent_*.log")
    assert "matcher trace" in log_file.read_text(encoding="utf-8")


def test_configures_handlers_once(tmp_path, monkeypatch):
    with bare_root(tmp_path, monkeypatch) as root:
        log.get_logger("easyapply.a")
        log.get_logger("easyapply.b")

        assert len(root.handlers) == 2
