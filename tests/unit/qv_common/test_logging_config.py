"""Tests for structlog-backed logging configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog

from qv_common.logging import configure_logging


pytestmark = pytest.mark.unit_common


def _ours(root: logging.Logger) -> list[logging.Handler]:
    return [
        handler
        for handler in root.handlers
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
    ]


@pytest.fixture
def root_logger(monkeypatch: pytest.MonkeyPatch):
    for name in ("QV_LOG_LEVEL", "QV_LOG_JSON", "QV_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    saved_level = root.level
    yield root
    for handler in _ours(root):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(saved_level)
    structlog.reset_defaults()


def test_configures_stream_and_file_handlers(root_logger, tmp_path: Path) -> None:
    log_file = tmp_path / "qv.log"
    configure_logging(level="WARNING", log_file=str(log_file), json=True, force=True)

    assert root_logger.level == logging.WARNING
    assert len(_ours(root_logger)) == 2

    logging.getLogger("qv_state.test").warning("dropped event %s", "x")
    for handler in _ours(root_logger):
        handler.flush()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "dropped event x"
    assert payload["level"] == "warning"
    assert "timestamp" in payload


def test_debug_flag_wins(root_logger) -> None:
    configure_logging(level="ERROR", debug=True, force=True)
    assert root_logger.level == logging.DEBUG


def test_env_level_is_used(root_logger, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QV_LOG_LEVEL", "error")
    configure_logging(force=True)
    assert root_logger.level == logging.ERROR


def test_existing_handlers_are_kept_without_force(root_logger) -> None:
    existing = logging.NullHandler()
    root_logger.addHandler(existing)
    try:
        before = list(root_logger.handlers)
        configure_logging(level="DEBUG")
        assert root_logger.handlers == before
    finally:
        root_logger.removeHandler(existing)


def test_force_replaces_handlers(root_logger) -> None:
    existing = logging.NullHandler()
    root_logger.addHandler(existing)
    configure_logging(force=True)
    assert existing not in root_logger.handlers
    assert len(root_logger.handlers) == 1
