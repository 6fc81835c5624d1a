"""RenderSync: the periodic tick that keeps the displayed bitmap current.

Once per interval it advances any playing animation and, if the view went
stale, rescales and redraws. Overlapping steps are skipped, never queued, so
a slow render costs at most one catch-up step.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from PySide6.QtCore import QObject, Qt, QTimer, Signal

from .errors import ScaleError
from .image_engine.metrics import SKIPPED_STEPS, metrics
from .logger import get_logger
from .view_state import ViewState

_logger = get_logger("render_sync")

TICK_INTERVAL_MS = 20


class RenderSync(QObject):
    rendered = Signal()

    def __init__(
        self,
        view: ViewState,
        interval_ms: int = TICK_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._view = view
        self._clock = clock
        self._busy = threading.Lock()

        self._timer = QTimer(self)
        self._timer.setInterval(int(interval_ms))
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._on_timeout)

    # ---- lifecycle -------------------------------------------------
    def start(self) -> None:
        if not self._timer.isActive():
            self._timer.start()
            _logger.debug("render sync started: interval=%dms", self._timer.interval())

    def stop(self) -> None:
        self._timer.stop()

    def is_active(self) -> bool:
        return self._timer.isActive()

    def interval(self) -> int:
        return self._timer.interval()

    # ---- tick ------------------------------------------------------
    def _on_timeout(self) -> None:
        self.step(self._clock())

    def step(self, now: float | None = None) -> bool:
        """Run one tick; True when a new bitmap was displayed.

        Returns False without doing anything if another step is still
        running.
        """
        if not self._busy.acquire(blocking=False):
            metrics.inc(SKIPPED_STEPS)
            return False
        try:
            self._view.tick(self._clock() if now is None else now)
            try:
                rendered = self._view.reconcile_render()
            except ScaleError as e:
                _logger.debug("render skipped: %s", e)
                return False
        finally:
            self._busy.release()
        if rendered:
            self.rendered.emit()
        return rendered
