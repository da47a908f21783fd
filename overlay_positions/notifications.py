from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from overlay_positions.persistence import SaveOutcome, SaveStatus

_LOGGER = logging.getLogger("OverlayPositions.Editor")

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]

MODE_ON_COLOR = "#4361ee"
MODE_OFF_COLOR = "#6c757d"
SAVE_COLOR = "#06a77d"
FAILURE_COLOR = "#e63946"


class NoticeKind(Enum):
    MODE = "mode"
    SAVE = "save"


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    message: str
    color: str
    duration_ms: int


class NotificationCenter:
    """Schedules transient mode/save notices; owns only their display timers.

    Showing a notice of a kind that is already on screen replaces it.
    """

    def __init__(
        self,
        *,
        show: Callable[[Notice], object],
        hide: Callable[[object], None],
        after: AfterFn,
        after_cancel: AfterCancelFn,
        mode_duration_ms: int = 1500,
        save_duration_ms: int = 2000,
    ) -> None:
        self._show = show
        self._hide = hide
        self._after = after
        self._after_cancel = after_cancel
        self._mode_duration_ms = max(100, int(mode_duration_ms))
        self._save_duration_ms = max(100, int(save_duration_ms))
        self._visible: Dict[NoticeKind, tuple[object, object]] = {}

    def drag_mode_changed(self, enabled: bool) -> Notice:
        notice = Notice(
            NoticeKind.MODE,
            f"Drag Mode: {'ON' if enabled else 'OFF'}",
            MODE_ON_COLOR if enabled else MODE_OFF_COLOR,
            self._mode_duration_ms,
        )
        self.present(notice)
        return notice

    def save_finished(self, outcome: SaveOutcome) -> Optional[Notice]:
        if not outcome.message:
            return None
        color = SAVE_COLOR
        if outcome.status is SaveStatus.FAILED:
            color = FAILURE_COLOR
        elif outcome.status is SaveStatus.CANCELLED:
            color = MODE_OFF_COLOR
        notice = Notice(NoticeKind.SAVE, outcome.message, color, self._save_duration_ms)
        self.present(notice)
        return notice

    def present(self, notice: Notice) -> None:
        self.dismiss(notice.kind)
        handle = self._show(notice)
        timer = self._after(notice.duration_ms, lambda: self._expire(notice.kind, handle))
        self._visible[notice.kind] = (handle, timer)

    def dismiss(self, kind: NoticeKind) -> None:
        entry = self._visible.pop(kind, None)
        if entry is None:
            return
        handle, timer = entry
        try:
            self._after_cancel(timer)
        except Exception:
            _LOGGER.debug("Failed to cancel notification timer", exc_info=True)
        self._safe_hide(handle)

    def visible_kinds(self) -> tuple[NoticeKind, ...]:
        return tuple(self._visible)

    def _expire(self, kind: NoticeKind, handle: object) -> None:
        entry = self._visible.get(kind)
        if entry is not None and entry[0] is handle:
            del self._visible[kind]
        self._safe_hide(handle)

    def _safe_hide(self, handle: object) -> None:
        try:
            self._hide(handle)
        except Exception:
            _LOGGER.debug("Failed to hide notification", exc_info=True)
