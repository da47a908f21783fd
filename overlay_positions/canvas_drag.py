"""Begin/update/end drag protocol for canvas nodes placed by a translation offset."""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Tuple

from overlay_positions.descriptors import (
    LabelOffsetDescriptor,
    PositionDescriptor,
    TranslationDescriptor,
    coerce_offset,
)
from overlay_positions.drag_mode import Affordance, DragModeFlag
from overlay_positions.position_store import PositionStore

_LOGGER = logging.getLogger("OverlayPositions.Drag")

UpdateCallback = Callable[[float, float, Any], None]
DescriptorFactory = Callable[[float, float], PositionDescriptor]


class TranslationTarget(Protocol):
    """A canvas node that owns its current offset from the authored origin."""

    def offset(self) -> Optional[Tuple[float, float]]:
        ...

    def apply_offset(self, x: float, y: float) -> None:
        ...

    def set_affordance(self, affordance: Affordance) -> None:
        ...


def translation_factory(*, lock_x: bool = False) -> DescriptorFactory:
    if lock_x:
        return lambda x, y: TranslationDescriptor(y=y)
    return lambda x, y: TranslationDescriptor(x=x, y=y)


def label_offset_factory(x: float, y: float) -> PositionDescriptor:
    return LabelOffsetDescriptor(x, y)


class CanvasDragController:
    """Moves a canvas node by pointer deltas and mirrors it into the store.

    After every accepted ``update`` the node's offset and the stored
    descriptor for ``(panel_id, element_id)`` are equal.
    """

    def __init__(
        self,
        target: TranslationTarget,
        panel_id: str,
        element_id: str,
        *,
        store: PositionStore,
        drag_mode: DragModeFlag,
        on_update: Optional[UpdateCallback] = None,
        descriptor_factory: Optional[DescriptorFactory] = None,
        lock_x: bool = False,
    ) -> None:
        self._target = target
        self.panel_id = panel_id
        self.element_id = element_id
        self._store = store
        self._drag_mode = drag_mode
        self._on_update = on_update
        self._lock_x = lock_x
        self._factory = descriptor_factory or translation_factory(lock_x=lock_x)
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def begin(self) -> bool:
        if not self._drag_mode.enabled:
            return False
        self._active = True
        self._safe_affordance(Affordance.GRABBING)
        _LOGGER.debug("Canvas drag started for %s/%s", self.panel_id, self.element_id)
        return True

    def update(self, dx: float, dy: float, event: Any = None) -> Optional[Tuple[float, float]]:
        if not self._drag_mode.enabled:
            return None
        current = self._target.offset()
        if current is None:
            x, y = 0.0, 0.0
        else:
            x, y = coerce_offset(current[0], current[1])
        step_x, step_y = coerce_offset(dx, dy)
        if not self._lock_x:
            x += step_x
        y += step_y
        self._target.apply_offset(x, y)
        self._store.set(self.panel_id, self.element_id, self._factory(x, y))
        if self._on_update is not None:
            self._on_update(x, y, event)
        return (x, y)

    def end(self) -> None:
        was_active = self._active
        self._active = False
        self._safe_affordance(self._drag_mode.resting_affordance)
        if was_active:
            _LOGGER.debug("Canvas drag finished for %s/%s", self.panel_id, self.element_id)

    def _safe_affordance(self, affordance: Affordance) -> None:
        try:
            self._target.set_affordance(affordance)
        except Exception:
            _LOGGER.debug("Failed to set affordance %s", affordance, exc_info=True)
