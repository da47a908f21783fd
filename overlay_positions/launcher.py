from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import QApplication

from overlay_positions.editor_session import EditorSession, save_notifier
from overlay_positions.input_bindings import SAVE_POSITIONS, TOGGLE_DRAG_MODE, BindingConfig, BindingManager
from overlay_positions.logging_utils import EDITOR_LOGGER_NAME, configure_editor_logger
from overlay_positions.notifications import NotificationCenter
from overlay_positions.persistence import PersistencePipeline
from overlay_positions.position_store import load_positions
from overlay_positions.qt_notifications import ToastHost, qt_after, qt_after_cancel
from overlay_positions.qt_persistence import build_save_tiers
from overlay_positions.sample_panels import LayoutWindow
from overlay_positions.settings import (
    PACKAGE_DIR,
    SETTINGS_FILENAME,
    EditorSettings,
    apply_env_overrides,
    load_settings,
)

_LOGGER = logging.getLogger(EDITOR_LOGGER_NAME)


def resolve_settings(args: argparse.Namespace) -> EditorSettings:
    settings_path = Path(args.settings).expanduser() if args.settings else PACKAGE_DIR / SETTINGS_FILENAME
    settings = apply_env_overrides(load_settings(settings_path))
    if args.positions:
        settings = replace(settings, positions_path=Path(args.positions).expanduser())
    if args.debug:
        settings = replace(settings, debug=True)
    return settings


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Drag overlay labels and notes into place and export their positions")
    parser.add_argument("--positions", help="Path to the positions.json document to load")
    parser.add_argument("--settings", help=f"Path to {SETTINGS_FILENAME}")
    parser.add_argument("--keybindings", help="Path to keybindings.json")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    settings = resolve_settings(args)
    configure_editor_logger(debug=settings.debug, retention=settings.log_retention)
    _LOGGER.info("Starting positions editor (pid=%s)", os.getpid())
    _LOGGER.debug("Resolved settings: %s", settings)

    store = load_positions(settings.positions_path)

    app = QApplication(sys.argv)
    window_ref: list = []

    def _parent():
        return window_ref[0] if window_ref else None

    toast_host: list = []
    notifications = NotificationCenter(
        show=lambda notice: toast_host[0].show(notice),
        hide=lambda handle: toast_host[0].hide(handle),
        after=qt_after,
        after_cancel=qt_after_cancel,
        mode_duration_ms=settings.mode_notice_ms,
        save_duration_ms=settings.save_notice_ms,
    )
    pipeline = PersistencePipeline(build_save_tiers(settings, _parent), notify=save_notifier(notifications))
    session = EditorSession(store, pipeline=pipeline, notifications=notifications)

    window = LayoutWindow(session)
    window_ref.append(window)
    toast_host.append(ToastHost(window))

    bindings = BindingManager(
        window,
        BindingConfig.load(Path(args.keybindings).expanduser() if args.keybindings else None),
    )
    bindings.register_action(TOGGLE_DRAG_MODE, session.toggle_drag_mode)
    bindings.register_action(SAVE_POSITIONS, session.save)
    bindings.activate()
    _LOGGER.info("Key bindings active: %s", ", ".join(bindings.bound_sequences) or "none")

    window.show()
    exit_code = app.exec()
    _LOGGER.info("Positions editor exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
