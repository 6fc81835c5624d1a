"""ViewState: the single shared state machine behind the viewer window.

Every public operation takes one lock for its whole duration, so the
animation/cursor pairing, the dirty flag and the displayed bitmap always
change together. Decoding and rescaling run synchronously under that lock.

States are {Empty, StillLoaded, AnimatedLoaded} x {Clean, Dirty}:

- open_image: any -> StillLoaded|AnimatedLoaded, Dirty
- apply_scroll / tick (frame changed): Loaded -> Dirty
- reconcile_render: Dirty -> Clean on success, stays Dirty on ScaleError
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .errors import DecodeError, NavigationError, NoNavigableImage, ScaleError
from .image_engine.animation import AnimationCursor, AnimationHandle
from .image_engine.decoder import decode_image, rescale
from .image_engine.metrics import DECODE_FAILURES, RENDERS, RESCALE, metrics
from .image_engine.navigator import Direction, DirectoryNavigator
from .image_engine.types import Bitmap, DecodedImage, MultiFrame, SingleFrame
from .logger import get_logger
from .path_utils import abs_path_str
from .zoom_curve import next_anchor_size

_logger = get_logger("view_state")


@dataclass(frozen=True)
class ViewSnapshot:
    """Consistent read-only copy of the state, for titles and status text."""

    current_path: str | None
    zoom_anchor_size: int
    dirty: bool
    animated: bool
    width: int = 0
    height: int = 0

    @property
    def zoom_ratio(self) -> float:
        """Displayed size relative to natural size (1.0 == 100%)."""
        ref = min(self.width, self.height)
        if ref <= 0 or self.zoom_anchor_size <= 0:
            return 1.0
        return self.zoom_anchor_size / ref


class ViewState:
    def __init__(
        self,
        display: Callable[[Bitmap], None],
        decode: Callable[[str | Path | None], DecodedImage] = decode_image,
        rescale_fn: Callable[[Bitmap, int, int], Bitmap] = rescale,
        navigator: DirectoryNavigator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._display = display
        self._decode = decode
        self._rescale = rescale_fn
        self._navigator = navigator or DirectoryNavigator()
        self._clock = clock
        self._lock = threading.RLock()

        self._zoom_anchor_size = 0
        self._dirty = False
        self._current_path: str | None = None
        self._still_image: Bitmap | None = None
        self._animation: AnimationHandle | None = None
        self._animation_cursor: AnimationCursor | None = None

    # ---- read-only accessors ----
    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def zoom_anchor_size(self) -> int:
        with self._lock:
            return self._zoom_anchor_size

    @property
    def is_dirty(self) -> bool:
        with self._lock:
            return self._dirty

    @property
    def current_path(self) -> str | None:
        with self._lock:
            return self._current_path

    @property
    def still_image(self) -> Bitmap | None:
        with self._lock:
            return self._still_image

    @property
    def is_animated(self) -> bool:
        with self._lock:
            return self._animation is not None

    def snapshot(self) -> ViewSnapshot:
        with self._lock:
            still = self._still_image
            return ViewSnapshot(
                current_path=self._current_path,
                zoom_anchor_size=self._zoom_anchor_size,
                dirty=self._dirty,
                animated=self._animation is not None,
                width=still.width if still is not None else 0,
                height=still.height if still is not None else 0,
            )

    # ---- operations ----
    def open_image(self, path: str | Path | None) -> None:
        """Load ``path`` as the current image.

        Raises DecodeError and leaves the state untouched when the file
        cannot be decoded. The zoom anchor is only seeded on the first load;
        later images keep the anchor the user already set.
        """
        with self._lock:
            self._open_locked(path)

    def _open_locked(self, path: str | Path | None) -> None:
        if path is None:
            raise DecodeError(None, "no path given")
        decoded = self._decode(path)

        if isinstance(decoded, MultiFrame):
            animation: AnimationHandle | None = decoded.animation
            cursor: AnimationCursor | None = decoded.animation.new_cursor(self._clock())
            still = cursor.current_frame()
        elif isinstance(decoded, SingleFrame):
            animation = None
            cursor = None
            still = decoded.bitmap
        else:
            raise DecodeError(path, f"unexpected decode result {type(decoded).__name__}")

        self._still_image = still
        self._animation = animation
        self._animation_cursor = cursor
        if self._zoom_anchor_size == 0:
            self._zoom_anchor_size = still.reference_dimension
        self._current_path = abs_path_str(path)
        self._dirty = True
        _logger.info(
            "opened %s (%dx%d%s)",
            self._current_path,
            still.width,
            still.height,
            f", {len(animation)} frames" if animation is not None else "",
        )

    def apply_scroll(self, raw_delta: float) -> bool:
        """Feed one scroll sample into the zoom curve.

        Ignored (returns False) until an image is loaded. A sample that
        leaves the anchor where it is, such as one pushing past a ratio
        bound, also returns False and does not mark the view dirty.
        """
        with self._lock:
            if self._still_image is None or self._zoom_anchor_size == 0:
                return False
            natural = self._still_image.reference_dimension
            old = self._zoom_anchor_size
            new = next_anchor_size(natural, old, raw_delta)
            if new == old:
                return False
            self._zoom_anchor_size = new
            self._dirty = True
            _logger.debug("scroll delta=%s anchor %d -> %d", raw_delta, old, new)
            return True

    def reset_zoom(self) -> bool:
        """Show the current image at its natural size."""
        with self._lock:
            if self._still_image is None:
                return False
            self._zoom_anchor_size = self._still_image.reference_dimension
            self._dirty = True
            return True

    def navigate(self, direction: Direction) -> str:
        """Open the first decodable sibling in ``direction``.

        Returns the new current path. Raises NoNavigableImage when no
        candidate decodes or the directory cannot be listed; the state is
        unchanged in that case.
        """
        with self._lock:
            try:
                candidates = self._navigator.candidates(self._current_path, direction)
            except NavigationError as e:
                raise NoNavigableImage(str(e)) from e

            for candidate in candidates:
                try:
                    self._open_locked(candidate)
                except DecodeError as e:
                    metrics.inc(DECODE_FAILURES)
                    _logger.warning("skipping %s: %s", candidate, e.reason or e)
                    continue
                return self._current_path  # type: ignore[return-value]

            raise NoNavigableImage(f"no decodable image {direction.value} of {self._current_path}")

    def tick(self, now: float | None = None) -> bool:
        """Advance a playing animation; True when the frame changed."""
        with self._lock:
            cursor = self._animation_cursor
            if cursor is None:
                return False
            if now is None:
                now = self._clock()
            if not cursor.advance(now):
                return False
            self._still_image = cursor.current_frame()
            self._dirty = True
            return True

    def reconcile_render(self) -> bool:
        """Rescale and display the current frame if it is stale.

        Returns True when a bitmap was handed to the display. Raises
        ScaleError (and stays dirty) when the target size is non-positive or
        the resampler fails; the last displayed bitmap stays on screen.
        """
        with self._lock:
            still = self._still_image
            if not self._dirty or still is None:
                return False
            ref = still.reference_dimension
            if ref <= 0:
                raise ScaleError(f"bitmap has no extent ({still.width}x{still.height})")
            scale = self._zoom_anchor_size / ref
            target_w = int(still.width * scale)
            target_h = int(still.height * scale)
            if target_w <= 0 or target_h <= 0:
                raise ScaleError(f"non-positive target size {target_w}x{target_h}")

            with metrics.timed(RESCALE):
                scaled = self._rescale(still, target_w, target_h)
            self._display(scaled)
            self._dirty = False
            metrics.inc(RENDERS)
            return True
