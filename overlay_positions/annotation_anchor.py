"""Connector geometry for annotation callouts (pure, no Qt)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, Tuple

from overlay_positions.canvas_drag import CanvasDragController, label_offset_factory
from overlay_positions.descriptors import LabelOffsetDescriptor
from overlay_positions.drag_mode import Affordance, DragModeFlag
from overlay_positions.position_store import PositionStore

LABEL_GAP = 8.0
DEFAULT_LINE_LENGTH = 30.0
DEFAULT_LINE_ANGLE = -45.0


class LabelAlignment(Enum):
    START = "start"  # left edge of the text sits right of the connector
    END = "end"  # right edge of the text sits left of the connector


@dataclass(frozen=True)
class AnchorResolution:
    line_end: Tuple[float, float]
    alignment: LabelAlignment
    text_dx: float


def resolve_label_anchor(text_x: float, text_y: float) -> AnchorResolution:
    """Pick the connector endpoint and text alignment for a label offset.

    Only the sign of ``text_x`` matters; there is no hysteresis at 0.
    """
    if text_x < 0:
        return AnchorResolution((text_x - LABEL_GAP, text_y), LabelAlignment.END, -LABEL_GAP)
    return AnchorResolution((text_x + LABEL_GAP, text_y), LabelAlignment.START, LABEL_GAP)


def default_label_offset(
    line_length: float = DEFAULT_LINE_LENGTH,
    angle_degrees: float = DEFAULT_LINE_ANGLE,
) -> LabelOffsetDescriptor:
    radians = math.radians(angle_degrees)
    return LabelOffsetDescriptor(line_length * math.cos(radians), line_length * math.sin(radians))


class CalloutView(Protocol):
    """Rendered parts of a callout: fixed marker, connector line, draggable label."""

    def offset(self) -> Optional[Tuple[float, float]]:
        ...

    def apply_offset(self, x: float, y: float) -> None:
        ...

    def set_affordance(self, affordance: Affordance) -> None:
        ...

    def apply_line_end(self, x: float, y: float) -> None:
        ...

    def apply_alignment(self, alignment: LabelAlignment, text_dx: float) -> None:
        ...


class AnnotationCallout:
    """Binds a callout view to its label-offset entry in the store.

    The anchor point never moves; the label offset is the only persisted
    value and the connector is recomputed from it on every change.
    """

    def __init__(
        self,
        view: CalloutView,
        panel_id: str,
        element_id: str,
        *,
        store: PositionStore,
        drag_mode: DragModeFlag,
        default: Optional[LabelOffsetDescriptor] = None,
    ) -> None:
        self._view = view
        self.panel_id = panel_id
        self.element_id = element_id
        self._store = store
        self.controller = CanvasDragController(
            view,
            panel_id,
            element_id,
            store=store,
            drag_mode=drag_mode,
            on_update=self._on_label_moved,
            descriptor_factory=label_offset_factory,
        )
        saved = store.get(panel_id, element_id)
        initial = saved if isinstance(saved, LabelOffsetDescriptor) else (default or default_label_offset())
        # Default offsets go through the resolver too, so an unsaved callout's
        # line also ends LABEL_GAP beyond the label offset, and x == 0 aligns START.
        self.relayout(initial.text_x, initial.text_y)

    def relayout(self, text_x: float, text_y: float) -> AnchorResolution:
        resolution = resolve_label_anchor(text_x, text_y)
        self._view.apply_offset(text_x, text_y)
        self._view.apply_alignment(resolution.alignment, resolution.text_dx)
        self._view.apply_line_end(*resolution.line_end)
        return resolution

    def _on_label_moved(self, x: float, y: float, event: Any) -> None:
        resolution = resolve_label_anchor(x, y)
        self._view.apply_alignment(resolution.alignment, resolution.text_dx)
        self._view.apply_line_end(*resolution.line_end)
