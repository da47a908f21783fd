"""Configuration helpers for the positions editor."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_POSITIONS_PATH = PACKAGE_DIR / "data" / "positions.json"
SETTINGS_FILENAME = "editor_settings.json"

POSITIONS_FILE_ENV_VAR = "OVERLAY_POSITIONS_FILE"
DEBUG_ENV_VAR = "OVERLAY_POSITIONS_DEBUG"
LOG_DIR_ENV_VAR = "OVERLAY_POSITIONS_LOG_DIR"
PROPAGATE_LOGS_ENV_VAR = "OVERLAY_POSITIONS_PROPAGATE_LOGS"

LOG_RETENTION_MIN = 1
LOG_RETENTION_MAX = 20


@dataclass(frozen=True)
class EditorSettings:
    """Values used to bootstrap the editor session."""

    positions_path: Path = DEFAULT_POSITIONS_PATH
    export_filename: str = "positions.json"
    downloads_dir: Optional[Path] = None
    native_dialog: bool = True
    mode_notice_ms: int = 1500
    save_notice_ms: int = 2000
    log_retention: int = 5
    debug: bool = False


def env_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    token = value.strip().lower()
    if token in {"1", "true", "yes", "on"}:
        return True
    if token in {"0", "false", "no", "off"}:
        return False
    return None


def _coerce_int(raw: Any, fallback: int, *, minimum: int, maximum: Optional[int] = None) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return fallback
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _coerce_path(raw: Any, base_dir: Path) -> Optional[Path]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    path = Path(raw.strip()).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def settings_from_mapping(data: Mapping[str, Any], *, base_dir: Path) -> EditorSettings:
    defaults = EditorSettings()
    export_filename = data.get("export_filename", defaults.export_filename)
    if not isinstance(export_filename, str) or not export_filename.strip():
        export_filename = defaults.export_filename
    return EditorSettings(
        positions_path=_coerce_path(data.get("positions_path"), base_dir) or defaults.positions_path,
        export_filename=export_filename.strip(),
        downloads_dir=_coerce_path(data.get("downloads_dir"), base_dir),
        native_dialog=bool(data.get("native_dialog", defaults.native_dialog)),
        mode_notice_ms=_coerce_int(data.get("mode_notice_ms"), defaults.mode_notice_ms, minimum=100),
        save_notice_ms=_coerce_int(data.get("save_notice_ms"), defaults.save_notice_ms, minimum=100),
        log_retention=_coerce_int(
            data.get("log_retention"),
            defaults.log_retention,
            minimum=LOG_RETENTION_MIN,
            maximum=LOG_RETENTION_MAX,
        ),
        debug=bool(data.get("debug", defaults.debug)),
    )


def load_settings(settings_path: Path) -> EditorSettings:
    """Read editor_settings.json if it exists; missing or broken files yield defaults."""
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return EditorSettings()
    try:
        data: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError:
        return EditorSettings()
    if not isinstance(data, dict):
        return EditorSettings()
    return settings_from_mapping(data, base_dir=settings_path.parent)


def apply_env_overrides(settings: EditorSettings, env: Optional[Mapping[str, str]] = None) -> EditorSettings:
    env = os.environ if env is None else env
    updated = settings
    positions_override = env.get(POSITIONS_FILE_ENV_VAR)
    if positions_override:
        updated = replace(updated, positions_path=Path(positions_override).expanduser())
    debug_override = env_flag(env.get(DEBUG_ENV_VAR))
    if debug_override is not None:
        updated = replace(updated, debug=debug_override)
    return updated
