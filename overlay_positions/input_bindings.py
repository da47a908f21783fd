"""Configurable key bindings for the editor's drag-mode and save actions."""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

_LOGGER = logging.getLogger("OverlayPositions.Bindings")

DEFAULT_CONFIG_PATH = Path(__file__).with_name("keybindings.json")

TOGGLE_DRAG_MODE = "toggle_drag_mode"
SAVE_POSITIONS = "save_positions"

# Default layout that can be extended by the user later on.
DEFAULT_CONFIG = {
    "active_scheme": "keyboard_default",
    "schemes": {
        "keyboard_default": {
            "device_type": "keyboard",
            "display_name": "Keyboard (default)",
            "bindings": {
                TOGGLE_DRAG_MODE: ["D"],
                SAVE_POSITIONS: ["S"],
            },
        }
    },
}

ShortcutFactory = Callable[[object, str, Callable[[], None]], object]
ShortcutRelease = Callable[[object], None]


@dataclass
class ControlScheme:
    """Container for a set of bindings and some metadata."""

    name: str
    device_type: str
    display_name: str
    bindings: Dict[str, List[str]]


def _schemes_from_payload(payload: dict) -> Dict[str, ControlScheme]:
    return {
        name: ControlScheme(
            name=name,
            device_type=spec.get("device_type", "keyboard"),
            display_name=spec.get("display_name", name),
            bindings={
                action: list(inputs or [])
                for action, inputs in (spec.get("bindings") or {}).items()
            },
        )
        for name, spec in payload.get("schemes", {}).items()
    }


@dataclass
class BindingConfig:
    """Representation of the configuration file contents."""

    schemes: Dict[str, ControlScheme]
    active_scheme: str
    source_path: Path

    @classmethod
    def default(cls, path: Optional[Path] = None) -> "BindingConfig":
        return cls(
            schemes=_schemes_from_payload(DEFAULT_CONFIG),
            active_scheme=DEFAULT_CONFIG["active_scheme"],
            source_path=path or DEFAULT_CONFIG_PATH,
        )

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "BindingConfig":
        """Load config from disk, falling back to the built-in scheme when unreadable."""

        path = path or DEFAULT_CONFIG_PATH
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return cls.default(path)
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.warning("Failed to read keybindings from %s: %s; using defaults", path, exc)
            return cls.default(path)
        if not isinstance(payload, dict):
            _LOGGER.warning("Keybindings file %s is not an object; using defaults", path)
            return cls.default(path)

        schemes = _schemes_from_payload(payload)
        active = payload.get("active_scheme")
        if active not in schemes:
            raise ValueError(
                f"Active scheme '{active}' is not defined in keybindings file {path}"
            )

        return cls(schemes=schemes, active_scheme=active, source_path=path)

    def get_scheme(self, name: Optional[str] = None) -> ControlScheme:
        """Return the requested scheme or the currently active one."""

        scheme_name = name or self.active_scheme
        try:
            return self.schemes[scheme_name]
        except KeyError as exc:
            raise ValueError(f"Unknown control scheme '{scheme_name}'") from exc


def qt_shortcut_factory(widget: object, sequence: str, callback: Callable[[], None]) -> object:
    from PyQt6.QtGui import QKeySequence, QShortcut

    key_sequence = QKeySequence(sequence)
    if key_sequence.isEmpty():
        raise ValueError(f"Qt cannot parse key sequence '{sequence}'")
    shortcut = QShortcut(key_sequence, widget)
    shortcut.activated.connect(callback)
    return shortcut


def qt_shortcut_release(shortcut: object) -> None:
    shortcut.setEnabled(False)  # type: ignore[attr-defined]
    shortcut.deleteLater()  # type: ignore[attr-defined]


class BindingManager:
    """Applies the active scheme's bindings to a widget as shortcuts."""

    def __init__(
        self,
        widget: object,
        config: BindingConfig,
        *,
        shortcut_factory: ShortcutFactory = qt_shortcut_factory,
        shortcut_release: ShortcutRelease = qt_shortcut_release,
    ) -> None:
        self.widget = widget
        self.config = config
        self._shortcut_factory = shortcut_factory
        self._shortcut_release = shortcut_release
        self._handlers: Dict[str, Callable] = {}
        self._bound: List[Tuple[str, object]] = []
        self._cached_wrappers: Dict[str, Callable[[], None]] = {}

    @property
    def bound_sequences(self) -> List[str]:
        return [sequence for sequence, _shortcut in self._bound]

    def register_action(self, action_name: str, handler: Callable) -> None:
        """Associate an action identifier with a callable."""

        self._handlers[action_name] = handler
        # Drop cached wrapper so a future activate() re-evaluates the signature.
        self._cached_wrappers.pop(action_name, None)

    def activate(self, scheme_name: Optional[str] = None) -> None:
        """Apply the bindings for the currently active scheme."""

        self._release_shortcuts(shortcut for _sequence, shortcut in self._bound)
        self._bound.clear()

        scheme = self.config.get_scheme(scheme_name)
        for action, sequences in scheme.bindings.items():
            if action not in self._handlers:
                continue
            callback = self._get_wrapped_handler(action)
            for sequence in sequences:
                normalized = sequence.strip() if isinstance(sequence, str) else ""
                if not normalized:
                    _LOGGER.warning("Skipping invalid binding %r for action %s", sequence, action)
                    continue
                try:
                    shortcut = self._shortcut_factory(self.widget, normalized, callback)
                except Exception as exc:
                    _LOGGER.warning("Skipping invalid binding %r for action %s: %s", normalized, action, exc)
                    continue
                self._bound.append((normalized, shortcut))

    def _release_shortcuts(self, shortcuts: Iterable[object]) -> None:
        for shortcut in shortcuts:
            try:
                self._shortcut_release(shortcut)
            except Exception:
                _LOGGER.debug("Failed to release shortcut", exc_info=True)

    def _get_wrapped_handler(self, action: str) -> Callable[[], None]:
        if action in self._cached_wrappers:
            return self._cached_wrappers[action]

        handler = self._handlers[action]
        takes_event = self._handler_accepts_event(handler)

        def _callback() -> None:
            if takes_event:
                handler(action)
            else:
                handler()

        self._cached_wrappers[action] = _callback
        return _callback

    @staticmethod
    def _handler_accepts_event(handler: Callable) -> bool:
        try:
            signature = inspect.signature(handler)
        except (TypeError, ValueError):
            return False
        params = list(signature.parameters.values())
        return len(params) >= 1
