"""QWidget adapters for boxes placed by top/left/right/bottom offsets."""
from __future__ import annotations

import logging

from PyQt6.QtCore import QEvent, QObject, Qt
from PyQt6.QtWidgets import QApplication, QGraphicsOpacityEffect, QWidget

from overlay_positions.box_drag import BoxDragController
from overlay_positions.descriptors import BoxDescriptor, HorizontalAnchor, VerticalAnchor
from overlay_positions.drag_mode import Affordance

_LOGGER = logging.getLogger("OverlayPositions.Drag")

OUTLINE_STYLE = "border: 2px dashed #4361ee;"
GRABBING_OPACITY = 0.8


def box_origin(placement: BoxDescriptor, parent_width: int, parent_height: int, width: int, height: int) -> tuple[int, int]:
    """Top-left corner for a box inside its parent; an axis with no active edge sits at 0.

    Uses the same edge preference as the descriptor's anchor properties.
    """
    if placement.horizontal_anchor is HorizontalAnchor.RIGHT:
        x = parent_width - placement.edge("right") - width
    else:
        x = placement.edge("left")
    if placement.vertical_anchor is VerticalAnchor.BOTTOM:
        y = parent_height - placement.edge("bottom") - height
    else:
        y = placement.edge("top")
    return int(x), int(y)


class WidgetBoxTarget:
    """Owns a child widget's edge-offset placement and lays it out in its parent."""

    def __init__(self, widget: QWidget) -> None:
        self.widget = widget
        self._placement = BoxDescriptor()
        self._base_style = widget.styleSheet()
        if not widget.objectName():
            widget.setObjectName(f"draggable_{id(widget):x}")
        self._opacity = QGraphicsOpacityEffect(widget)
        self._opacity.setOpacity(1.0)
        widget.setGraphicsEffect(self._opacity)

    def placement(self) -> BoxDescriptor:
        return self._placement

    def apply_placement(self, placement: BoxDescriptor) -> None:
        self._placement = placement
        self.relayout()

    def relayout(self) -> None:
        parent = self.widget.parentWidget()
        if parent is None:
            return
        x, y = box_origin(self._placement, parent.width(), parent.height(), self.widget.width(), self.widget.height())
        self.widget.move(x, y)

    def set_affordance(self, affordance: Affordance) -> None:
        if affordance is Affordance.INACTIVE:
            self.widget.unsetCursor()
            self.widget.setStyleSheet(self._base_style)
            self._opacity.setOpacity(1.0)
            return
        cursor = Qt.CursorShape.ClosedHandCursor if affordance is Affordance.GRABBING else Qt.CursorShape.OpenHandCursor
        self.widget.setCursor(cursor)
        self._opacity.setOpacity(GRABBING_OPACITY if affordance is Affordance.GRABBING else 1.0)
        outline = f"#{self.widget.objectName()} {{ {OUTLINE_STYLE} }}"
        self.widget.setStyleSheet(f"{self._base_style}\n{outline}" if self._base_style else outline)


class BoxDragFilter(QObject):
    """Feeds a box controller from Qt mouse events.

    Presses are taken from the widget itself; moves and releases are taken
    application-wide while a drag is active, so the gesture survives the
    pointer leaving a small target.
    """

    def __init__(self, target: WidgetBoxTarget, controller: BoxDragController) -> None:
        super().__init__(target.widget)
        self._target = target
        self._controller = controller
        self._app_filter_installed = False
        target.widget.installEventFilter(self)
        parent = target.widget.parentWidget()
        if parent is not None:
            parent.installEventFilter(self)

    def eventFilter(self, obj, event) -> bool:  # type: ignore[override]
        kind = event.type()
        if kind == QEvent.Type.Resize and obj is self._target.widget.parentWidget():
            self._target.relayout()
            return False
        if kind == QEvent.Type.MouseButtonPress and obj is self._target.widget:
            if event.button() != Qt.MouseButton.LeftButton:
                return False
            point = event.globalPosition()
            if not self._controller.begin(point.x(), point.y()):
                return False
            self._listen_globally(True)
            event.accept()
            return True
        if kind == QEvent.Type.MouseMove and self._controller.dragging:
            point = event.globalPosition()
            self._controller.update(point.x(), point.y())
            return True
        if kind == QEvent.Type.MouseButtonRelease and self._controller.dragging:
            self._controller.end()
            self._listen_globally(False)
            return True
        return False

    def _listen_globally(self, enabled: bool) -> None:
        app = QApplication.instance()
        if app is None or enabled == self._app_filter_installed:
            return
        if enabled:
            app.installEventFilter(self)
        else:
            app.removeEventFilter(self)
        self._app_filter_installed = enabled
        _LOGGER.debug("Application-wide pointer tracking %s", "on" if enabled else "off")


def attach_box(widget: QWidget, controller_factory) -> tuple[WidgetBoxTarget, BoxDragController, BoxDragFilter]:
    """Create the target, let the caller build the controller, and hook events up."""
    target = WidgetBoxTarget(widget)
    controller = controller_factory(target)
    return target, controller, BoxDragFilter(target, controller)
