"""Tests for logging configuration."""

import logging

import pytest
import structlog

from core.logging import _serialize_enums, resolve_json_mode, resolve_log_level, setup_logging
from core.roles import RoleType
from core.room import GameState


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestLoggingConfig:
    """Tests for environment-driven logging settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert resolve_json_mode() is False
        assert resolve_log_level() == logging.INFO

    def test_json_and_debug(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert resolve_json_mode() is True
        assert resolve_log_level() == logging.DEBUG

    def test_invalid_values(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")
        monkeypatch.setenv("LOG_LEVEL", "loud")
        with pytest.raises(ValueError):
            resolve_json_mode()
        with pytest.raises(ValueError):
            resolve_log_level()

    def test_enums_logged_by_value(self):
        event = _serialize_enums(None, "info", {"state": GameState.PLAYING, "counts": {RoleType.LEADER: 1}})
        assert event == {"state": "playing", "counts": {"Leader": 1}}

    def test_setup_installs_one_stdout_handler(self, monkeypatch, restore_logging):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        setup_logging(logging.WARNING)

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
