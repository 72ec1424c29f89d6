from __future__ import annotations

import logging
from pathlib import Path

import pytest

from log_setup import setup_logging, shutdown_logging


@pytest.fixture(autouse=True)
def _restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    shutdown_logging()
    root.setLevel(level)


def test_setup_installs_handlers_once(tmp_path: Path) -> None:
    root = logging.getLogger()
    before = len(root.handlers)

    setup_logging("DEBUG", tmp_path / "logs" / "app.log")
    setup_logging("WARNING", tmp_path / "logs" / "app.log")

    assert len(root.handlers) == before + 2
    assert root.level == logging.WARNING


def test_messages_reach_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "app.log"
    setup_logging("INFO", log_file)

    logging.getLogger("session_controller").info("Model ready")
    shutdown_logging()

    assert " - session_controller - INFO - Model ready" in log_file.read_text(encoding="utf-8")


def test_unknown_level_defaults_to_info() -> None:
    setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO
