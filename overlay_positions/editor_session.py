"""Wires the position store, drag-mode flag, controllers, and export pipeline."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from overlay_positions.annotation_anchor import AnnotationCallout, CalloutView
from overlay_positions.box_drag import BoxDragController, BoxTarget
from overlay_positions.canvas_drag import CanvasDragController, TranslationTarget, UpdateCallback
from overlay_positions.descriptors import (
    BoxDescriptor,
    LabelOffsetDescriptor,
    TranslationDescriptor,
)
from overlay_positions.drag_mode import Affordance, DragModeFlag
from overlay_positions.notifications import NotificationCenter
from overlay_positions.persistence import PersistencePipeline, SaveOutcome, SaveReport
from overlay_positions.position_store import PositionStore

_LOGGER = logging.getLogger("OverlayPositions.Editor")


class _AffordanceTarget(Protocol):
    def set_affordance(self, affordance: Affordance) -> None:
        ...


class EditorSession:
    """Owns the session state and hands it to every registered element.

    Panels register their draggable elements here; the session seeds each
    element's placement from the store (or the panel's default) before the
    element is painted.
    """

    def __init__(
        self,
        store: Optional[PositionStore],
        *,
        pipeline: PersistencePipeline,
        drag_mode: Optional[DragModeFlag] = None,
        notifications: Optional[NotificationCenter] = None,
    ) -> None:
        if store is None:
            _LOGGER.info("No saved positions; panels use their built-in defaults")
            store = PositionStore()
        self.store = store
        self.drag_mode = drag_mode or DragModeFlag()
        self._pipeline = pipeline
        self._notifications = notifications
        self._targets: List[_AffordanceTarget] = []
        self.drag_mode.add_listener(self._on_drag_mode_changed)

    def register_canvas(
        self,
        target: TranslationTarget,
        panel_id: str,
        element_id: str,
        *,
        default: TranslationDescriptor,
        lock_x: bool = False,
        on_update: Optional[UpdateCallback] = None,
    ) -> CanvasDragController:
        stored = self.store.get(panel_id, element_id)
        descriptor = stored if isinstance(stored, TranslationDescriptor) else default
        target.apply_offset(*descriptor.offset())
        self._track(target)
        return CanvasDragController(
            target,
            panel_id,
            element_id,
            store=self.store,
            drag_mode=self.drag_mode,
            on_update=on_update,
            lock_x=lock_x,
        )

    def register_box(
        self,
        target: BoxTarget,
        panel_id: str,
        element_id: str,
        *,
        default: BoxDescriptor,
    ) -> BoxDragController:
        stored = self.store.get(panel_id, element_id)
        target.apply_placement(stored if isinstance(stored, BoxDescriptor) else default)
        self._track(target)
        return BoxDragController(target, panel_id, element_id, store=self.store, drag_mode=self.drag_mode)

    def register_callout(
        self,
        view: CalloutView,
        panel_id: str,
        element_id: str,
        *,
        default: Optional[LabelOffsetDescriptor] = None,
    ) -> AnnotationCallout:
        callout = AnnotationCallout(
            view,
            panel_id,
            element_id,
            store=self.store,
            drag_mode=self.drag_mode,
            default=default,
        )
        self._track(view)
        return callout

    def toggle_drag_mode(self) -> bool:
        return self.drag_mode.toggle()

    def save(self) -> Optional[SaveReport]:
        return self._pipeline.save(self.store)

    def _track(self, target: _AffordanceTarget) -> None:
        self._targets.append(target)
        self._apply_affordance(target, self.drag_mode.resting_affordance)

    def _on_drag_mode_changed(self, enabled: bool) -> None:
        affordance = self.drag_mode.resting_affordance
        for target in self._targets:
            self._apply_affordance(target, affordance)
        _LOGGER.info("Drag mode %s (%d draggable elements)", "ON" if enabled else "OFF", len(self._targets))
        if self._notifications is not None:
            self._notifications.drag_mode_changed(enabled)

    @staticmethod
    def _apply_affordance(target: _AffordanceTarget, affordance: Affordance) -> None:
        try:
            target.set_affordance(affordance)
        except Exception:
            _LOGGER.debug("Failed to apply affordance %s", affordance, exc_info=True)


def save_notifier(notifications: Optional[NotificationCenter]) -> Callable[[SaveOutcome], None]:
    def _notify(outcome: SaveOutcome) -> None:
        if notifications is not None:
            notifications.save_finished(outcome)

    return _notify
