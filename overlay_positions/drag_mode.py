from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List

_LOGGER = logging.getLogger("OverlayPositions.Drag")


class Affordance(Enum):
    """Visual state a draggable element shows to the user."""

    INACTIVE = "inactive"
    READY = "ready"
    GRABBING = "grabbing"


class DragModeFlag:
    """Session-wide gate for every gesture controller.

    Controllers read ``enabled`` on each event; they never cache it.
    """

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    def __bool__(self) -> bool:
        return self._enabled

    @property
    def resting_affordance(self) -> Affordance:
        return Affordance.READY if self._enabled else Affordance.INACTIVE

    def add_listener(self, callback: Callable[[bool], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[bool], None]) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def set_enabled(self, enabled: bool) -> bool:
        flag = bool(enabled)
        if flag == self._enabled:
            return self._enabled
        self._enabled = flag
        _LOGGER.debug("Drag mode %s", "enabled" if flag else "disabled")
        for listener in list(self._listeners):
            try:
                listener(flag)
            except Exception:
                _LOGGER.debug("Drag mode listener failed", exc_info=True)
        return self._enabled

    def toggle(self) -> bool:
        return self.set_enabled(not self._enabled)
