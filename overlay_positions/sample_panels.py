"""Sample dashboard panels that register their overlay elements with a session.

Chart drawing is not part of the editor; each panel paints a plain frame and
reference line so the draggable labels, callouts and notes have a backdrop.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import (
    QFrame,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSimpleTextItem,
    QGraphicsView,
    QGridLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from overlay_positions.annotation_anchor import default_label_offset
from overlay_positions.descriptors import BoxDescriptor, TranslationDescriptor
from overlay_positions.editor_session import EditorSession
from overlay_positions.qt_box import attach_box
from overlay_positions.qt_canvas import GraphicsCalloutView, GraphicsItemTarget, SceneDragFilter

SCENE_WIDTH = 720.0
SCENE_HEIGHT = 300.0
REFERENCE_Y = 150.0


@dataclass(frozen=True)
class LabelSpec:
    element_id: str
    text: str
    origin: Tuple[float, float]
    default: TranslationDescriptor
    lock_x: bool = False


@dataclass(frozen=True)
class CalloutSpec:
    element_id: str
    text: str
    anchor: Tuple[float, float]
    line_length: float = 30.0
    angle: float = -45.0


@dataclass(frozen=True)
class NoteSpec:
    element_id: str
    html: str
    default: BoxDescriptor
    width: int = 240


@dataclass(frozen=True)
class PanelSpec:
    panel_id: str
    title: str
    labels: Tuple[LabelSpec, ...] = ()
    callouts: Tuple[CalloutSpec, ...] = ()
    notes: Tuple[NoteSpec, ...] = ()
    reference_line: bool = False


SAMPLE_PANELS: Tuple[PanelSpec, ...] = (
    PanelSpec(
        "panel1",
        "Learning Poverty",
        labels=(
            LabelSpec("worldAvgLabel", "World average", (SCENE_WIDTH - 90.0, REFERENCE_Y), TranslationDescriptor(y=-10), lock_x=True),
        ),
        callouts=(
            CalloutSpec("annotationHighest", "Highest risk", (560.0, 40.0), 60, -30),
            CalloutSpec("annotationLowest", "Lowest risk", (120.0, 260.0), 60, -45),
        ),
        notes=(
            NoteSpec(
                "floatingNote",
                "<strong>Key Insight:</strong> Clear correlation between income level and learning outcomes.",
                BoxDescriptor(bottom=10, right=10),
            ),
        ),
        reference_line=True,
    ),
    PanelSpec(
        "panel2",
        "Access vs Completion",
        labels=(
            LabelSpec("regressionEquation", "y = 0.82x + 12.4", (0.0, 0.0), TranslationDescriptor(10, 20)),
            LabelSpec("rSquared", "R² = 0.71", (0.0, 0.0), TranslationDescriptor(10, 38)),
            LabelSpec("sizeLegendTitle", "Spending per pupil:", (0.0, 0.0), TranslationDescriptor(560, 235)),
        ),
        notes=(
            NoteSpec(
                "floatingNote",
                "<strong>Note:</strong> Out-of-school rates above 20% pull completion down sharply.",
                BoxDescriptor(bottom=10, left=10),
            ),
        ),
    ),
    PanelSpec(
        "panel3",
        "Spending Efficiency",
        labels=(
            LabelSpec("efficiencyLabel", "← Efficiency Frontier", (0.0, 0.0), TranslationDescriptor(10, 20)),
            LabelSpec("sizeLegendTitle", "% with basic literacy:", (0.0, 0.0), TranslationDescriptor(10, 215)),
        ),
        callouts=(CalloutSpec("annotationGap", "18pp gap", (360.0, 160.0), 50, 30),),
        notes=(
            NoteSpec(
                "floatingNote",
                "<strong>Key Insight:</strong> Spending alone does not guarantee completion.",
                BoxDescriptor(top=10, right=10),
            ),
        ),
    ),
    PanelSpec(
        "panel4",
        "Equity Analysis",
        labels=(
            LabelSpec("incomeLegend", "Income Level:", (0.0, 0.0), TranslationDescriptor(600, 0)),
            LabelSpec("worldAvgLabel", "World average", (SCENE_WIDTH - 90.0, REFERENCE_Y), TranslationDescriptor(y=-10), lock_x=True),
        ),
        callouts=(
            CalloutSpec("annotationLargest", "Largest gap", (540.0, 60.0), 60, -20),
            CalloutSpec("annotationParity", "Near parity", (200.0, 250.0), 60, -135),
        ),
        notes=(
            NoteSpec(
                "miniCharts",
                "<em>Trend by income group</em>",
                BoxDescriptor(bottom=5, left=15),
                width=180,
            ),
            NoteSpec(
                "floatingNote",
                "<strong>Gender Inequality:</strong> Equity improves dramatically with economic development.",
                BoxDescriptor(top=5, right=140),
            ),
        ),
        reference_line=True,
    ),
)


class PanelFrame(QFrame):
    """One dashboard panel: a graphics view plus floating HTML notes."""

    def __init__(self, spec: PanelSpec, session: EditorSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.spec = spec
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setObjectName(spec.panel_id)

        title = QLabel(spec.title, self)
        title.setStyleSheet("font-weight: 600; padding: 4px;")
        self.scene = QGraphicsScene(QRectF(0.0, 0.0, SCENE_WIDTH, SCENE_HEIGHT), self)
        self.view = QGraphicsView(self.scene, self)
        self.view.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.view.setFrameShape(QFrame.Shape.NoFrame)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(title)
        layout.addWidget(self.view)

        self.drag_filter = SceneDragFilter(self.scene, session.drag_mode)
        self.controllers: List[object] = []
        self._draw_backdrop()
        self._register_labels(session)
        self._register_callouts(session)
        self._register_notes(session)

    def _draw_backdrop(self) -> None:
        frame = self.scene.addRect(QRectF(0.0, 0.0, SCENE_WIDTH, SCENE_HEIGHT), QPen(QColor("#dee2e6")))
        frame.setZValue(-10)
        if self.spec.reference_line:
            pen = QPen(QColor("#6c757d"), 1.0, Qt.PenStyle.DashLine)
            line = self.scene.addLine(0.0, REFERENCE_Y, SCENE_WIDTH, REFERENCE_Y, pen)
            line.setZValue(-5)

    def _register_labels(self, session: EditorSession) -> None:
        for label in self.spec.labels:
            container = QGraphicsRectItem(QRectF())
            container.setPen(QPen(Qt.PenStyle.NoPen))
            container.setPos(QPointF(*label.origin))
            text = QGraphicsSimpleTextItem(label.text, container)
            text.setFont(QFont(text.font().family(), 9))
            self.scene.addItem(container)
            target = GraphicsItemTarget(container)
            controller = session.register_canvas(
                target,
                self.spec.panel_id,
                label.element_id,
                default=label.default,
                lock_x=label.lock_x,
            )
            self.drag_filter.attach(container, controller)
            self.controllers.append(controller)

    def _register_callouts(self, session: EditorSession) -> None:
        for callout in self.spec.callouts:
            view = GraphicsCalloutView(self.scene, QPointF(*callout.anchor), callout.text)
            bound = session.register_callout(
                view,
                self.spec.panel_id,
                callout.element_id,
                default=default_label_offset(callout.line_length, callout.angle),
            )
            self.drag_filter.attach(view.label, bound.controller)
            self.controllers.append(bound)

    def _register_notes(self, session: EditorSession) -> None:
        for note in self.spec.notes:
            widget = QLabel(note.html, self)
            widget.setTextFormat(Qt.TextFormat.RichText)
            widget.setWordWrap(True)
            widget.setFixedWidth(note.width)
            widget.setStyleSheet("background: #fff8e1; padding: 8px; border-radius: 4px;")
            widget.adjustSize()
            _target, controller, _filter = attach_box(
                widget,
                lambda target, element_id=note.element_id, default=note.default: session.register_box(
                    target, self.spec.panel_id, element_id, default=default
                ),
            )
            widget.raise_()
            self.controllers.append(controller)


class LayoutWindow(QWidget):
    """Top-level window arranging the sample panels in a 2x2 grid."""

    def __init__(self, session: EditorSession, panels: Tuple[PanelSpec, ...] = SAMPLE_PANELS) -> None:
        super().__init__()
        self.setWindowTitle("Overlay Positions Editor")
        self.session = session
        grid = QGridLayout(self)
        grid.setSpacing(8)
        self.panels: List[PanelFrame] = []
        for index, spec in enumerate(panels):
            frame = PanelFrame(spec, session, self)
            grid.addWidget(frame, index // 2, index % 2)
            self.panels.append(frame)
        self.resize(1600, 800)
