"""Tests for signalfeed.core.logging_setup."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest import mock

from signalfeed.core.logging_setup import (
    _configured,
    resolve_level,
    resolve_log_dir,
    setup_logger,
)

_NAMES = (
    "test_logger",
    "test_console_only",
    "test_idempotent",
    "test_env_level",
    "test_unwritable",
)


class TestSetupLogger:
    def setup_method(self) -> None:
        """Reset state between tests."""
        for name in _NAMES:
            _configured.discard(name)
            logging.getLogger(name).handlers.clear()

    def test_creates_logger(self, tmp_path: Path) -> None:
        lg = setup_logger("test_logger", log_dir=tmp_path)
        assert isinstance(lg, logging.Logger)
        assert lg.name == "test_logger"

    def test_creates_log_file(self, tmp_path: Path) -> None:
        lg = setup_logger("test_logger", log_dir=tmp_path)
        lg.info("feed loaded")
        content = (tmp_path / "test_logger.log").read_text(encoding="utf-8")
        assert "feed loaded" in content

    def test_console_handler_present(self, tmp_path: Path) -> None:
        lg = setup_logger("test_console_only", log_dir=tmp_path)
        handler_types = [type(h).__name__ for h in lg.handlers]
        assert "StreamHandler" in handler_types
        assert "RotatingFileHandler" in handler_types

    def test_idempotent(self, tmp_path: Path) -> None:
        lg1 = setup_logger("test_idempotent", log_dir=tmp_path)
        n = len(lg1.handlers)
        lg2 = setup_logger("test_idempotent", log_dir=tmp_path)
        assert lg1 is lg2
        assert len(lg2.handlers) == n

    def test_level_by_name(self, tmp_path: Path) -> None:
        lg = setup_logger("test_logger", log_dir=tmp_path, level="debug")
        assert lg.level == logging.DEBUG

    def test_level_from_env(self, tmp_path: Path) -> None:
        with mock.patch.dict(os.environ, {"SIGNALFEED_LOG_LEVEL": "WARNING"}):
            lg = setup_logger("test_env_level", log_dir=tmp_path)
        assert lg.level == logging.WARNING

    def test_records_carry_thread_name(self, tmp_path: Path) -> None:
        lg = setup_logger("test_logger", log_dir=tmp_path)
        lg.info("page loaded")
        content = (tmp_path / "test_logger.log").read_text(encoding="utf-8")
        assert "[MainThread]" in content

    def test_unwritable_dir_falls_back_to_console(self, tmp_path: Path) -> None:
        with mock.patch.object(Path, "mkdir", side_effect=PermissionError("denied")):
            lg = setup_logger("test_unwritable", log_dir=tmp_path / "ro")
        handler_types = [type(h).__name__ for h in lg.handlers]
        assert handler_types == ["StreamHandler"]

    def test_http_loggers_capped_at_warning(self, tmp_path: Path) -> None:
        setup_logger("test_logger", log_dir=tmp_path, level="debug")
        assert logging.getLogger("urllib3").level == logging.WARNING


class TestResolveLevel:
    def test_int_passthrough(self) -> None:
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_unknown_name_defaults_to_info(self) -> None:
        assert resolve_level("chatty") == logging.INFO

    def test_none_without_env(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            assert resolve_level(None) == logging.INFO


class TestResolveLogDir:
    def test_explicit_dir_wins(self, tmp_path: Path) -> None:
        with mock.patch.dict(os.environ, {"SIGNALFEED_LOG_DIR": "/elsewhere"}):
            assert resolve_log_dir(tmp_path) == tmp_path

    def test_env_dir(self) -> None:
        with mock.patch.dict(os.environ, {"SIGNALFEED_LOG_DIR": "/var/log/feed"}):
            assert resolve_log_dir(None) == Path("/var/log/feed")

    def test_default_dir(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            assert resolve_log_dir(None) == Path("logs")
