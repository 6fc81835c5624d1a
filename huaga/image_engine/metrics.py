"""In-process render counters and timings.

ViewState and RenderSync record here; the window status bar and tests read
the totals back through ``render_stats()``.

Usage:
    from huaga.image_engine.metrics import RENDERS, RESCALE, metrics
    metrics.inc(RENDERS)
    with metrics.timed(RESCALE):
        ...
    stats = metrics.render_stats()
"""

from __future__ import annotations

import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from threading import RLock

RENDERS = "view_state.renders"
DECODE_FAILURES = "view_state.decode_failures"
RESCALE = "view_state.rescale"
SKIPPED_STEPS = "render_sync.skipped_steps"


@dataclass(frozen=True)
class RenderStats:
    renders: int = 0
    skipped_steps: int = 0
    decode_failures: int = 0
    last_rescale_ms: float | None = None
    mean_rescale_ms: float | None = None

    def summary(self) -> str:
        parts = [f"{self.renders} renders"]
        if self.last_rescale_ms is not None:
            parts.append(f"rescale {self.last_rescale_ms:.1f} ms (avg {self.mean_rescale_ms:.1f})")
        if self.skipped_steps:
            parts.append(f"{self.skipped_steps} skipped")
        if self.decode_failures:
            parts.append(f"{self.decode_failures} unreadable")
        return ", ".join(parts)


class _Metrics:
    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, list[float]] = defaultdict(list)
        self._lock = RLock()

    def inc(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[key] += int(amount)

    def count(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    @contextmanager
    def timed(self, key: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                self._timings[key].append(elapsed)

    def render_stats(self) -> RenderStats:
        with self._lock:
            samples = self._timings.get(RESCALE)
            last = mean = None
            if samples:
                last = samples[-1] * 1000.0
                mean = sum(samples) * 1000.0 / len(samples)
            return RenderStats(
                renders=self._counters.get(RENDERS, 0),
                skipped_steps=self._counters.get(SKIPPED_STEPS, 0),
                decode_failures=self._counters.get(DECODE_FAILURES, 0),
                last_rescale_ms=last,
                mean_rescale_ms=mean,
            )

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = _Metrics()
