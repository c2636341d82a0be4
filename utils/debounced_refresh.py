"""Coalesce bursts of change notifications into a single UI refresh."""

from typing import Callable, Optional

from PyQt6.QtCore import QElapsedTimer, QObject, QTimer, pyqtSignal

from utils import common


class DebouncedRefresh(QObject):
    """Run ``callback`` once after requests stop arriving for ``delay_ms``.

    Log entries can stream in faster than the views should repaint; every
    request restarts the timer so the callback sees the latest state once.
    With ``max_wait_ms`` set, a steady stream of requests still refreshes
    at least that often.
    """

    refresh_executed = pyqtSignal()

    def __init__(
        self,
        callback: Callable[[], None],
        delay_ms: int = 100,
        parent: Optional[QObject] = None,
        max_wait_ms: Optional[int] = None,
    ):
        super().__init__(parent)
        self.callback = callback
        self.delay_ms = delay_ms
        self.max_wait_ms = max_wait_ms
        self.logger = common.get_logger('debounced_refresh')

        self.timer = QTimer(self)
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self._execute_refresh)
        self._burst_clock = QElapsedTimer()

        self.pending_count = 0

    @property
    def is_pending(self) -> bool:
        return self.timer.isActive()

    def request_refresh(self) -> None:
        """Schedule a refresh, postponing any refresh already scheduled."""
        if self.pending_count == 0 or not self._burst_clock.isValid():
            self._burst_clock.start()
        self.pending_count += 1
        self.timer.start(self._next_delay())

    def _next_delay(self) -> int:
        if self.max_wait_ms is None:
            return self.delay_ms
        remaining = self.max_wait_ms - self._burst_clock.elapsed()
        return max(0, min(self.delay_ms, remaining))

    def force_refresh(self) -> None:
        """Refresh now and drop the scheduled one."""
        self.timer.stop()
        self.pending_count += 1
        self._execute_refresh()

    def cancel(self) -> None:
        self.timer.stop()
        self.pending_count = 0
        self._burst_clock.invalidate()

    def _execute_refresh(self) -> None:
        coalesced = self.pending_count
        self.pending_count = 0
        self._burst_clock.invalidate()
        self.logger.debug('Refreshing after %d coalesced requests', coalesced)
        try:
            self.callback()
        except Exception as exc:
            self.logger.error(f'Error during debounced refresh: {exc}', exc_info=True)
            return
        self.refresh_executed.emit()
