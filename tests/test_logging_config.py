"""Tests for logging_config."""

import logging

import pytest
from rich.logging import RichHandler

from logging_config import parse_level, setup_logging


def _our_handlers():
    return [h for h in logging.getLogger().handlers
            if getattr(h, "name", "") in ("skirmish_file", "skirmish_console")]


@pytest.fixture
def clean_root():
    yield
    root = logging.getLogger()
    for handler in _our_handlers():
        root.removeHandler(handler)
        handler.close()


class TestParseLevel:
    def test_names(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level(" WARNING ") == logging.WARNING

    def test_numbers_pass_through(self):
        assert parse_level(logging.ERROR) == logging.ERROR

    def test_unknown_means_info(self):
        assert parse_level("chatty") == logging.INFO
        assert parse_level("") == logging.INFO


class TestSetupLogging:
    def test_file_handler_is_not_duplicated(self, tmp_path, monkeypatch, clean_root):
        monkeypatch.delenv("SKIRMISH_LOG_LEVEL", raising=False)
        monkeypatch.delenv("SKIRMISH_LOG_FILE", raising=False)
        log_file = tmp_path / "run.log"
        setup_logging(log_file=str(log_file))
        setup_logging(log_file=str(log_file), level="DEBUG")

        (handler,) = _our_handlers()
        assert handler.level == logging.DEBUG
        logging.getLogger("skirmish.test").info("hello")
        handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_env_overrides(self, tmp_path, monkeypatch, clean_root):
        log_file = tmp_path / "env.log"
        monkeypatch.setenv("SKIRMISH_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("SKIRMISH_LOG_FILE", str(log_file))
        setup_logging(level="DEBUG")
        (handler,) = _our_handlers()
        assert handler.level == logging.ERROR
        assert log_file.exists()

    def test_console_uses_rich(self, tmp_path, monkeypatch, clean_root):
        monkeypatch.delenv("SKIRMISH_LOG_FILE", raising=False)
        setup_logging(enable_file=False, enable_console=True, console_level="INFO")
        (handler,) = _our_handlers()
        assert isinstance(handler, RichHandler)
        assert handler.level == logging.INFO
