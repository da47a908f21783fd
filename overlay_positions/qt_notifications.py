from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QLabel, QWidget

from overlay_positions.notifications import Notice, NoticeKind

MODE_MARGIN = 20


class ToastHost:
    """Shows notices as floating labels over a host widget.

    Mode notices sit in the top-right corner; save notices are centered.
    """

    def __init__(self, host: QWidget) -> None:
        self._host = host

    def show(self, notice: Notice) -> QLabel:
        label = QLabel(notice.message, self._host)
        padding = "12px 24px" if notice.kind is NoticeKind.MODE else "20px 40px"
        size = 14 if notice.kind is NoticeKind.MODE else 16
        label.setStyleSheet(
            f"background: {notice.color}; color: white; padding: {padding};"
            f" border-radius: 6px; font-size: {size}px; font-weight: 600;"
        )
        label.adjustSize()
        if notice.kind is NoticeKind.MODE:
            label.move(self._host.width() - label.width() - MODE_MARGIN, MODE_MARGIN)
        else:
            label.move((self._host.width() - label.width()) // 2, (self._host.height() - label.height()) // 2)
        label.show()
        label.raise_()
        return label

    def hide(self, handle: object) -> None:
        if isinstance(handle, QLabel):
            handle.hide()
            handle.deleteLater()


def qt_after(delay_ms: int, callback: Callable[[], None]) -> QTimer:
    timer = QTimer()
    timer.setSingleShot(True)
    timer.timeout.connect(callback)
    timer.start(delay_ms)
    return timer


def qt_after_cancel(timer: object) -> None:
    if isinstance(timer, QTimer):
        timer.stop()
