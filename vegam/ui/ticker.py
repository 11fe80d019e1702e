from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class QtTicker(QObject):
    """Recurring callback on the Qt event loop, used for the session countdown."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._callback: Optional[Callable[[], None]] = None
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_timeout)

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start(interval_ms)

    def stop(self) -> None:
        self._timer.stop()
        self._callback = None

    def _on_timeout(self) -> None:
        if self._callback is not None:
            self._callback()
