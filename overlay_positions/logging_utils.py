from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from overlay_positions.settings import LOG_DIR_ENV_VAR, PROPAGATE_LOGS_ENV_VAR, env_flag

EDITOR_LOGGER_NAME = "OverlayPositions"
LOG_FILENAME = "overlay-positions.log"


def resolve_logs_dir(log_dir_name: str = "OverlayPositions") -> Path:
    """
    Resolve the directory to store editor logs.

    Strategy:
    - Use OVERLAY_POSITIONS_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "logs")
    candidates.append(cache_home / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = LOG_FILENAME,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_editor_logger(
    *,
    debug: bool,
    retention: int,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach a rotating file handler to the editor logger tree.

    Logs stay out of the root logger unless OVERLAY_POSITIONS_PROPAGATE_LOGS
    is truthy.
    """
    logger = logging.getLogger(EDITOR_LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug))
    logger.propagate = bool(env_flag(os.environ.get(PROPAGATE_LOGS_ENV_VAR)))
    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    handler = build_rotating_file_handler(
        log_dir or resolve_logs_dir(),
        retention=retention,
        formatter=formatter,
    )
    for existing in list(logger.handlers):
        if isinstance(existing, RotatingFileHandler):
            logger.removeHandler(existing)
            existing.close()
    logger.addHandler(handler)
    return logger
