"""Position descriptor shapes stored per overlay element (pure, no Qt)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

BOX_EDGES = ("top", "left", "right", "bottom")


class VerticalAnchor(Enum):
    TOP = "top"
    BOTTOM = "bottom"


class HorizontalAnchor(Enum):
    LEFT = "left"
    RIGHT = "right"


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _json_number(value: float) -> Union[int, float]:
    if float(value).is_integer():
        return int(value)
    return float(value)


@dataclass(frozen=True)
class TranslationDescriptor:
    """Offset applied to a canvas node relative to its authored origin.

    An axis set to None is not persisted and reads as 0 when applied.
    """

    x: Optional[float] = None
    y: Optional[float] = None

    def offset(self) -> tuple[float, float]:
        return (self.x or 0.0, self.y or 0.0)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.x is not None:
            data["x"] = _json_number(self.x)
        if self.y is not None:
            data["y"] = _json_number(self.y)
        return data


@dataclass(frozen=True)
class BoxDescriptor:
    """Edge offsets (pixels) for a screen-anchored box; None marks an inactive edge."""

    top: Optional[int] = None
    left: Optional[int] = None
    right: Optional[int] = None
    bottom: Optional[int] = None

    @property
    def vertical_anchor(self) -> VerticalAnchor:
        if self.bottom is not None:
            return VerticalAnchor.BOTTOM
        return VerticalAnchor.TOP

    @property
    def horizontal_anchor(self) -> HorizontalAnchor:
        if self.right is not None:
            return HorizontalAnchor.RIGHT
        return HorizontalAnchor.LEFT

    def edge(self, name: str) -> int:
        """Return an edge offset, treating an inactive edge as 0."""
        value = getattr(self, name)
        return 0 if value is None else int(value)

    def to_dict(self) -> Dict[str, Any]:
        return {name: int(getattr(self, name)) for name in BOX_EDGES if getattr(self, name) is not None}


@dataclass(frozen=True)
class LabelOffsetDescriptor:
    """Callout label position relative to its fixed anchor point."""

    text_x: float
    text_y: float

    def offset(self) -> tuple[float, float]:
        return (self.text_x, self.text_y)

    def to_dict(self) -> Dict[str, Any]:
        return {"textX": _json_number(self.text_x), "textY": _json_number(self.text_y)}


PositionDescriptor = Union[TranslationDescriptor, BoxDescriptor, LabelOffsetDescriptor]


def descriptor_from_dict(raw: Mapping[str, Any]) -> Union[PositionDescriptor, Dict[str, Any]]:
    """Build a typed descriptor from its JSON form.

    The shape is picked by which keys are present. A mapping that matches no
    shape (or carries non-numeric values) is returned as a plain dict copy so
    the store can round-trip it untouched.
    """
    if "textX" in raw or "textY" in raw:
        text_x = _finite(raw.get("textX"))
        text_y = _finite(raw.get("textY"))
        if text_x is not None and text_y is not None and set(raw) == {"textX", "textY"}:
            return LabelOffsetDescriptor(text_x, text_y)
        return dict(raw)
    if raw and set(raw) <= set(BOX_EDGES):
        edges: Dict[str, int] = {}
        for name, value in raw.items():
            number = _finite(value)
            if number is None:
                return dict(raw)
            edges[name] = int(round(number))
        # One edge per axis; bottom/right win, matching the anchor properties.
        if "bottom" in edges:
            edges.pop("top", None)
        if "right" in edges:
            edges.pop("left", None)
        return BoxDescriptor(**edges)
    if raw and set(raw) <= {"x", "y"}:
        axes: Dict[str, float] = {}
        for name, value in raw.items():
            number = _finite(value)
            if number is None:
                return dict(raw)
            axes[name] = number
        return TranslationDescriptor(**axes)
    return dict(raw)


def descriptor_to_dict(descriptor: Union[PositionDescriptor, Mapping[str, Any]]) -> Dict[str, Any]:
    to_dict = getattr(descriptor, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(descriptor)  # type: ignore[arg-type]


def coerce_offset(x: Any, y: Any) -> tuple[float, float]:
    """Return a usable (x, y) offset; anything unset or non-finite degrades to 0."""
    return (_finite(x) or 0.0, _finite(y) or 0.0)
