from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from overlay_positions.logging_utils import EDITOR_LOGGER_NAME, LOG_FILENAME, configure_editor_logger
from overlay_positions.settings import (
    DEFAULT_POSITIONS_PATH,
    EditorSettings,
    apply_env_overrides,
    env_flag,
    load_settings,
)


@pytest.fixture
def editor_logger():
    logger = logging.getLogger(EDITOR_LOGGER_NAME)
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved[2]:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved[0])
    logger.propagate = saved[1]


def test_missing_settings_file_yields_defaults(tmp_path: Path):
    settings = load_settings(tmp_path / "editor_settings.json")

    assert settings == EditorSettings()
    assert settings.positions_path == DEFAULT_POSITIONS_PATH


def test_settings_file_values_are_coerced(tmp_path: Path):
    path = tmp_path / "editor_settings.json"
    path.write_text(
        json.dumps(
            {
                "positions_path": "layouts/positions.json",
                "export_filename": "layout.json",
                "downloads_dir": str(tmp_path / "dl"),
                "native_dialog": False,
                "mode_notice_ms": "5",
                "save_notice_ms": 3000,
                "log_retention": 99,
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.positions_path == tmp_path / "layouts" / "positions.json"
    assert settings.export_filename == "layout.json"
    assert settings.downloads_dir == tmp_path / "dl"
    assert settings.native_dialog is False
    assert settings.mode_notice_ms == 100
    assert settings.save_notice_ms == 3000
    assert settings.log_retention == 20


def test_broken_settings_file_yields_defaults(tmp_path: Path):
    path = tmp_path / "editor_settings.json"
    path.write_text("[1, 2", encoding="utf-8")

    assert load_settings(path) == EditorSettings()


def test_env_overrides_take_precedence(tmp_path: Path):
    env = {"OVERLAY_POSITIONS_FILE": str(tmp_path / "p.json"), "OVERLAY_POSITIONS_DEBUG": "yes"}

    settings = apply_env_overrides(EditorSettings(), env)

    assert settings.positions_path == tmp_path / "p.json"
    assert settings.debug is True
    assert apply_env_overrides(EditorSettings(), {"OVERLAY_POSITIONS_DEBUG": "maybe"}).debug is False


@pytest.mark.parametrize("value, expected", [("1", True), ("Off", False), ("", None), (None, None)])
def test_env_flag(value, expected):
    assert env_flag(value) is expected


def test_logger_stays_private_by_default(tmp_path: Path, monkeypatch, editor_logger):
    monkeypatch.delenv("OVERLAY_POSITIONS_PROPAGATE_LOGS", raising=False)

    logger = configure_editor_logger(debug=True, retention=3, log_dir=tmp_path)
    logger.getChild("Store").info("hello")

    assert logger.propagate is False
    assert logger.level == logging.DEBUG
    handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(handlers) == 1
    assert handlers[0].backupCount == 2
    handlers[0].flush()
    assert "hello" in (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")


def test_logger_propagation_env_and_handler_replacement(tmp_path: Path, monkeypatch, editor_logger):
    monkeypatch.setenv("OVERLAY_POSITIONS_PROPAGATE_LOGS", "1")

    configure_editor_logger(debug=False, retention=5, log_dir=tmp_path / "a")
    logger = configure_editor_logger(debug=False, retention=5, log_dir=tmp_path / "b")

    assert logger.propagate is True
    assert logger.level == logging.INFO
    assert len([h for h in logger.handlers if isinstance(h, RotatingFileHandler)]) == 1
