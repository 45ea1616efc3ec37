"""Tests for the two-handler logging system (terminal + log file)."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ninevectors.config import load_settings
from ninevectors.logging import _parse_log_level, log_file_path, setup_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    """Reset root logger handlers after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    # Restore basicConfig-like defaults so other tests aren't affected
    logging.basicConfig(level=logging.WARNING, force=True)


def _file_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if hasattr(h, "baseFilename")]


class TestSetupLogging:
    """Tests for setup_logging configuration."""

    def test_terminal_only_without_state_dir(self) -> None:
        setup_logging(state_dir=None, verbose=False)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.WARNING

    def test_terminal_verbose_sets_debug(self) -> None:
        setup_logging(state_dir=None, verbose=True)

        assert logging.getLogger().handlers[0].level == logging.DEBUG

    def test_file_handler_created_with_state_dir(self, tmp_path: Path) -> None:
        setup_logging(state_dir=tmp_path, verbose=False)

        assert len(logging.getLogger().handlers) == 2
        assert (tmp_path / "logs").is_dir()

    def test_file_handler_default_level_is_info(self, tmp_path: Path) -> None:
        setup_logging(state_dir=tmp_path, verbose=False)

        file_handler = _file_handlers()
        assert len(file_handler) == 1
        assert file_handler[0].level == logging.INFO

    def test_file_level_argument(self, tmp_path: Path) -> None:
        setup_logging(state_dir=tmp_path, verbose=False, file_level="debug")

        assert _file_handlers()[0].level == logging.DEBUG

    def test_file_level_from_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("NINEVECTORS_LOG_LEVEL", "ERROR")
        settings = load_settings(state_dir=tmp_path)
        setup_logging(state_dir=settings.state_dir, file_level=settings.log_level)

        assert _file_handlers()[0].level == logging.ERROR

    def test_returns_log_path(self, tmp_path: Path) -> None:
        assert setup_logging(state_dir=tmp_path) == log_file_path(tmp_path)
        assert setup_logging(state_dir=None) is None

    def test_messages_written_to_log_file(self, tmp_path: Path) -> None:
        setup_logging(state_dir=tmp_path, verbose=False)

        logging.getLogger("ninevectors.tour.engine").info("Started tour dashboard (4 steps)")
        for handler in _file_handlers():
            handler.flush()

        content = (tmp_path / "logs" / "ninevectors.log").read_text()
        assert "Started tour dashboard" in content

    def test_idempotent_setup(self, tmp_path: Path) -> None:
        setup_logging(state_dir=tmp_path, verbose=False)
        setup_logging(state_dir=tmp_path, verbose=False)

        assert len(logging.getLogger().handlers) == 2  # terminal + file, not 4

    def test_noisy_loggers_suppressed(self, tmp_path: Path) -> None:
        setup_logging(state_dir=tmp_path, verbose=True)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING


class TestParseLogLevel:
    def test_standard_levels(self) -> None:
        assert _parse_log_level("DEBUG") == logging.DEBUG
        assert _parse_log_level("WARNING") == logging.WARNING
        assert _parse_log_level("ERROR") == logging.ERROR

    def test_case_insensitive(self) -> None:
        assert _parse_log_level("debug") == logging.DEBUG
        assert _parse_log_level("Info") == logging.INFO

    def test_unknown_falls_back_to_info(self) -> None:
        assert _parse_log_level("banana") == logging.INFO
