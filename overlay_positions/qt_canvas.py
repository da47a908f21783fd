"""QGraphicsScene adapters for translation-placed elements and callouts."""
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QEvent, QObject, QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QPen, QTransform
from PyQt6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsLineItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSimpleTextItem,
)

from overlay_positions.annotation_anchor import LabelAlignment
from overlay_positions.canvas_drag import CanvasDragController
from overlay_positions.drag_mode import Affordance, DragModeFlag

_LOGGER = logging.getLogger("OverlayPositions.Drag")

OUTLINE_COLOR = "#4361ee"
MARKER_COLOR = "#e63946"
MARKER_RADIUS = 4.0
GRABBING_OPACITY = 0.8


class GraphicsItemTarget:
    """Owns the offset of a graphics item relative to its authored position."""

    def __init__(self, item: QGraphicsItem) -> None:
        self.item = item
        self._origin = QPointF(item.pos())
        self._offset: Optional[Tuple[float, float]] = None
        self._outline = QGraphicsRectItem(item)
        pen = QPen(QColor(OUTLINE_COLOR))
        pen.setStyle(Qt.PenStyle.DashLine)
        pen.setWidthF(1.5)
        pen.setCosmetic(True)
        self._outline.setPen(pen)
        self._outline.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        self._outline.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self._outline.setVisible(False)

    def offset(self) -> Optional[Tuple[float, float]]:
        return self._offset

    def apply_offset(self, x: float, y: float) -> None:
        self._offset = (x, y)
        self.item.setPos(self._origin + QPointF(x, y))

    def set_affordance(self, affordance: Affordance) -> None:
        if affordance is Affordance.INACTIVE:
            self.item.unsetCursor()
            self.item.setOpacity(1.0)
            self._outline.setVisible(False)
            return
        if affordance is Affordance.GRABBING:
            self.item.setCursor(Qt.CursorShape.ClosedHandCursor)
            self.item.setOpacity(GRABBING_OPACITY)
        else:
            self.item.setCursor(Qt.CursorShape.OpenHandCursor)
            self.item.setOpacity(1.0)
        self._outline.setRect(self._content_rect().adjusted(-2.0, -2.0, 2.0, 2.0))
        self._outline.setVisible(True)

    def _content_rect(self) -> QRectF:
        rect = QRectF(self.item.boundingRect())
        for child in self.item.childItems():
            if child is self._outline:
                continue
            rect = rect.united(child.mapRectToParent(child.boundingRect().united(child.childrenBoundingRect())))
        return rect


class GraphicsCalloutView:
    """Marker dot at a fixed anchor, a connector line, and a draggable label."""

    def __init__(self, scene: QGraphicsScene, anchor: QPointF, text: str, *, font: Optional[QFont] = None) -> None:
        self.root = QGraphicsRectItem(QRectF())
        self.root.setPen(QPen(Qt.PenStyle.NoPen))
        self.root.setPos(anchor)
        scene.addItem(self.root)

        self.line = QGraphicsLineItem(0.0, 0.0, 0.0, 0.0, self.root)
        self.line.setPen(QPen(QColor("#333333"), 1.0))
        self.marker = QGraphicsEllipseItem(
            -MARKER_RADIUS, -MARKER_RADIUS, 2 * MARKER_RADIUS, 2 * MARKER_RADIUS, self.root
        )
        self.marker.setBrush(QBrush(QColor(MARKER_COLOR)))
        self.marker.setPen(QPen(Qt.PenStyle.NoPen))

        self.label = QGraphicsRectItem(QRectF(), self.root)
        self.label.setPen(QPen(Qt.PenStyle.NoPen))
        self.text = QGraphicsSimpleTextItem(text, self.label)
        label_font = font or QFont()
        label_font.setPointSizeF(8.5)
        label_font.setWeight(QFont.Weight.DemiBold)
        self.text.setFont(label_font)
        self._label_target = GraphicsItemTarget(self.label)

    def offset(self) -> Optional[Tuple[float, float]]:
        return self._label_target.offset()

    def apply_offset(self, x: float, y: float) -> None:
        self._label_target.apply_offset(x, y)

    def set_affordance(self, affordance: Affordance) -> None:
        self._label_target.set_affordance(affordance)

    def apply_line_end(self, x: float, y: float) -> None:
        self.line.setLine(0.0, 0.0, x, y)

    def apply_alignment(self, alignment: LabelAlignment, text_dx: float) -> None:
        bounds = self.text.boundingRect()
        left = text_dx if alignment is LabelAlignment.START else text_dx - bounds.width()
        self.text.setPos(left, -bounds.height() / 2.0)


class SceneDragFilter(QObject):
    """Routes scene mouse events to the canvas controller of the grabbed item.

    Incremental deltas are measured in the grabbed item's parent coordinates,
    so offsets stay consistent under view scaling.
    """

    def __init__(self, scene: QGraphicsScene, drag_mode: DragModeFlag) -> None:
        super().__init__(scene)
        self._scene = scene
        self._drag_mode = drag_mode
        self._controllers: Dict[int, Tuple[QGraphicsItem, CanvasDragController]] = {}
        self._active: Optional[Tuple[QGraphicsItem, CanvasDragController]] = None
        self._last_scene_pos = QPointF()
        scene.installEventFilter(self)

    def attach(self, item: QGraphicsItem, controller: CanvasDragController) -> None:
        self._controllers[id(item)] = (item, controller)
        _LOGGER.debug("Canvas element %s/%s attached to scene", controller.panel_id, controller.element_id)

    def eventFilter(self, obj, event) -> bool:  # type: ignore[override]
        kind = event.type()
        if kind == QEvent.Type.GraphicsSceneMousePress:
            if event.button() != Qt.MouseButton.LeftButton or not self._drag_mode.enabled:
                return False
            entry = self._registered_at(event.scenePos())
            if entry is None or not entry[1].begin():
                return False
            self._active = entry
            self._last_scene_pos = QPointF(event.scenePos())
            event.accept()
            return True
        if kind == QEvent.Type.GraphicsSceneMouseMove and self._active is not None:
            item, controller = self._active
            dx, dy = self._parent_delta(item, self._last_scene_pos, event.scenePos())
            self._last_scene_pos = QPointF(event.scenePos())
            controller.update(dx, dy, event)
            event.accept()
            return True
        if kind == QEvent.Type.GraphicsSceneMouseRelease and self._active is not None:
            _item, controller = self._active
            self._active = None
            controller.end()
            event.accept()
            return True
        return False

    def _registered_at(self, scene_pos: QPointF) -> Optional[Tuple[QGraphicsItem, CanvasDragController]]:
        item = self._scene.itemAt(scene_pos, QTransform())
        while item is not None:
            entry = self._controllers.get(id(item))
            if entry is not None and entry[0] is item:
                return entry
            item = item.parentItem()
        return None

    @staticmethod
    def _parent_delta(item: QGraphicsItem, previous: QPointF, current: QPointF) -> Tuple[float, float]:
        parent = item.parentItem()
        if parent is None:
            delta = current - previous
        else:
            delta = parent.mapFromScene(current) - parent.mapFromScene(previous)
        return (delta.x(), delta.y())
