"""Animated image playback.

An AnimationHandle holds every decoded frame with its delay; an
AnimationCursor is a playback position inside one handle that only moves
when ``advance(now)`` is called with a timestamp (seconds, monotonic clock).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from huaga.logger import get_logger

from .types import Bitmap

_logger = get_logger("animation")

# Delays below this are treated as "unspecified" and played at DEFAULT_DELAY_MS
MIN_DELAY_MS = 20
DEFAULT_DELAY_MS = 100


@dataclass(frozen=True)
class AnimationFrame:
    bitmap: Bitmap
    delay_ms: int = DEFAULT_DELAY_MS


class AnimationHandle:
    """Decoded multi-frame image.

    ``loop`` follows the GIF/WebP convention: 0 repeats forever, N plays the
    sequence N times and then holds the last frame.
    """

    def __init__(self, frames: Sequence[AnimationFrame], loop: int = 0) -> None:
        if not frames:
            raise ValueError("animation needs at least one frame")
        self.frames: tuple[AnimationFrame, ...] = tuple(frames)
        self.loop = max(0, int(loop))

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def width(self) -> int:
        return self.frames[0].bitmap.width

    @property
    def height(self) -> int:
        return self.frames[0].bitmap.height

    def frame_delay(self, index: int) -> float:
        """Effective delay of frame ``index`` in seconds."""
        delay = self.frames[index].delay_ms
        if delay < MIN_DELAY_MS:
            delay = DEFAULT_DELAY_MS
        return delay / 1000.0

    @property
    def cycle_duration(self) -> float:
        return sum(self.frame_delay(i) for i in range(len(self.frames)))

    def new_cursor(self, now: float) -> AnimationCursor:
        return AnimationCursor(self, now)


class AnimationCursor:
    def __init__(self, handle: AnimationHandle, start: float) -> None:
        self.handle = handle
        self._index = 0
        self._loops_done = 0
        self._finished = False
        self._next_at = start + handle.frame_delay(0)

    @property
    def index(self) -> int:
        return self._index

    @property
    def finished(self) -> bool:
        return self._finished

    def current_frame(self) -> Bitmap:
        return self.handle.frames[self._index].bitmap

    def advance(self, now: float) -> bool:
        """Move to the frame that should be showing at ``now``.

        Returns True when the current frame changed. Frames are skipped when
        called late; a stall longer than a whole cycle drops the missed
        cycles instead of replaying them.
        """
        if self._finished or now < self._next_at:
            return False
        start_index = self._index

        cycle = self.handle.cycle_duration
        behind = now - self._next_at
        if cycle > 0 and behind >= cycle:
            skipped = int(behind // cycle)
            if self.handle.loop:
                skipped = min(skipped, max(0, self.handle.loop - 1 - self._loops_done))
            self._loops_done += skipped
            self._next_at += skipped * cycle
            if skipped:
                _logger.debug("animation resync: skipped %d cycle(s)", skipped)

        while now >= self._next_at:
            if not self._step():
                break
        return self._index != start_index

    def _step(self) -> bool:
        last = len(self.handle.frames) - 1
        if self._index == last:
            if self.handle.loop and self._loops_done + 1 >= self.handle.loop:
                self._finished = True
                return False
            self._loops_done += 1
            self._index = 0
        else:
            self._index += 1
        self._next_at += self.handle.frame_delay(self._index)
        return True
