"""Pointer drag protocol for screen boxes placed by edge offsets."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from overlay_positions.descriptors import BoxDescriptor, HorizontalAnchor, VerticalAnchor
from overlay_positions.drag_mode import Affordance, DragModeFlag
from overlay_positions.position_store import PositionStore

_LOGGER = logging.getLogger("OverlayPositions.Drag")


class BoxTarget(Protocol):
    """A screen box that owns its current edge-offset placement."""

    def placement(self) -> BoxDescriptor:
        ...

    def apply_placement(self, placement: BoxDescriptor) -> None:
        ...

    def set_affordance(self, affordance: Affordance) -> None:
        ...


@dataclass(frozen=True)
class BoxGesture:
    """State captured on pointer-down; anchors stay fixed until pointer-up."""

    start_x: float
    start_y: float
    top: int
    left: int
    right: int
    bottom: int
    vertical: VerticalAnchor
    horizontal: HorizontalAnchor

    def resolve(self, pointer_x: float, pointer_y: float) -> BoxDescriptor:
        dx = int(round(pointer_x - self.start_x))
        dy = int(round(pointer_y - self.start_y))
        top: Optional[int] = None
        bottom: Optional[int] = None
        left: Optional[int] = None
        right: Optional[int] = None
        if self.vertical is VerticalAnchor.BOTTOM:
            bottom = self.bottom - dy
        else:
            top = self.top + dy
        if self.horizontal is HorizontalAnchor.RIGHT:
            right = self.right - dx
        else:
            left = self.left + dx
        return BoxDescriptor(top=top, left=left, right=right, bottom=bottom)


class BoxDragController:
    """Drags an edge-anchored box without ever flipping its axis anchors.

    The gesture starts from the box's owned placement (seeded from the store
    at registration); rendered geometry is never read back.
    """

    def __init__(
        self,
        target: BoxTarget,
        panel_id: str,
        element_id: str,
        *,
        store: PositionStore,
        drag_mode: DragModeFlag,
    ) -> None:
        self._target = target
        self.panel_id = panel_id
        self.element_id = element_id
        self._store = store
        self._drag_mode = drag_mode
        self._gesture: Optional[BoxGesture] = None

    @property
    def dragging(self) -> bool:
        return self._gesture is not None

    @property
    def gesture(self) -> Optional[BoxGesture]:
        return self._gesture

    def begin(self, pointer_x: float, pointer_y: float) -> bool:
        if not self._drag_mode.enabled:
            return False
        current = self._target.placement()
        self._gesture = BoxGesture(
            start_x=float(pointer_x),
            start_y=float(pointer_y),
            top=current.edge("top"),
            left=current.edge("left"),
            right=current.edge("right"),
            bottom=current.edge("bottom"),
            vertical=current.vertical_anchor,
            horizontal=current.horizontal_anchor,
        )
        self._safe_affordance(Affordance.GRABBING)
        _LOGGER.debug(
            "Box drag started for %s/%s anchors=%s/%s",
            self.panel_id,
            self.element_id,
            self._gesture.vertical.value,
            self._gesture.horizontal.value,
        )
        return True

    def update(self, pointer_x: float, pointer_y: float) -> Optional[BoxDescriptor]:
        gesture = self._gesture
        if gesture is None or not self._drag_mode.enabled:
            return None
        placement = gesture.resolve(pointer_x, pointer_y)
        self._target.apply_placement(placement)
        self._store.set(self.panel_id, self.element_id, placement)
        return placement

    def end(self) -> bool:
        if self._gesture is None:
            return False
        self._gesture = None
        self._safe_affordance(self._drag_mode.resting_affordance)
        _LOGGER.debug("Box drag finished for %s/%s", self.panel_id, self.element_id)
        return True

    def _safe_affordance(self, affordance: Affordance) -> None:
        try:
            self._target.set_affordance(affordance)
        except Exception:
            _LOGGER.debug("Failed to set affordance %s", affordance, exc_info=True)
