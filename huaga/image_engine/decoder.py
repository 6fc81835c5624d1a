"""Image decoder and resampler using pyvips.

Frames are normalized to sRGB, 3-band, uchar numpy arrays so the rest of
the viewer only ever sees one pixel layout. Multi-page files with a
``page-height`` (GIF, animated WebP) are split into animation frames.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Any

import numpy as np

from huaga.errors import DecodeError, ScaleError
from huaga.logger import get_logger

from .animation import DEFAULT_DELAY_MS, AnimationFrame, AnimationHandle
from .types import RGB_CHANNELS, Bitmap, DecodedImage, MultiFrame, SingleFrame

_logger = get_logger("decoder")

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        # Configure pyvips caches to avoid memory growth while browsing
        with contextlib.suppress(Exception):
            pyvips.cache_set_max(0)
            pyvips.cache_set_max_mem(0)
            pyvips.cache_set_max_files(0)
        _pyvips = pyvips
    return _pyvips


def _get_int(image: Any, field: str, default: int) -> int:
    if image.get_typeof(field) == 0:
        return default
    try:
        return int(image.get(field))
    except (TypeError, ValueError):
        return default


def _frame_delays(image: Any, count: int) -> list[int]:
    delays: list[int] = []
    if image.get_typeof("delay") != 0:
        delays = [int(d) for d in image.get("delay")]
    elif image.get_typeof("gif-delay") != 0:
        # older libvips: one delay for all frames, in centiseconds
        delays = [int(image.get("gif-delay")) * 10] * count
    if len(delays) < count:
        delays += [DEFAULT_DELAY_MS] * (count - len(delays))
    return delays[:count]


def _to_rgb_array(image: Any) -> np.ndarray:
    pyvips = _get_pyvips_module()
    with contextlib.suppress(Exception):
        image = image.colourspace("srgb")
    if image.hasalpha():
        image = image.flatten(background=[0, 0, 0])
    if image.bands > RGB_CHANNELS:
        image = image.extract_band(0, n=RGB_CHANNELS)
    elif image.bands < RGB_CHANNELS:
        image = pyvips.Image.bandjoin([image] * RGB_CHANNELS)
    if image.format != "uchar":
        image = image.cast("uchar")

    mem = image.write_to_memory()
    array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    if array.shape[2] != RGB_CHANNELS:
        raise RuntimeError(f"Unsupported band count after conversion: {array.shape[2]}")
    return array.copy()


def _decode_animation(path: str) -> DecodedImage | None:
    """Load every page of ``path``; None when the pages do not form a strip."""
    pyvips = _get_pyvips_module()
    try:
        strip = pyvips.Image.new_from_file(path, n=-1)
    except pyvips.Error as e:
        # e.g. multi-page TIFF whose pages differ in size
        _logger.debug("multi-page load failed, using first page: %s", e)
        return None
    page_height = _get_int(strip, "page-height", strip.height)
    if page_height <= 0 or strip.height % page_height != 0:
        return None
    count = strip.height // page_height
    if count < 2:
        return None
    delays = _frame_delays(strip, count)
    frames = [
        AnimationFrame(
            Bitmap(_to_rgb_array(strip.crop(0, i * page_height, strip.width, page_height))),
            delays[i],
        )
        for i in range(count)
    ]
    loop = _get_int(strip, "loop", 0)
    _logger.debug("decoded animation: path=%s frames=%d loop=%d", path, count, loop)
    return MultiFrame(AnimationHandle(frames, loop=loop))


def decode_image(path: str | Path | None) -> DecodedImage:
    """Decode ``path`` into a single frame or an animation.

    Raises DecodeError for a missing path, a non-file, or anything libvips
    cannot load.
    """
    if path is None:
        raise DecodeError(None, "no path given")
    file_path = os.fspath(path)
    if not os.path.isfile(file_path):
        raise DecodeError(file_path, "not a file")
    try:
        pyvips = _get_pyvips_module()
        image = pyvips.Image.new_from_file(file_path)
        if _get_int(image, "n-pages", 1) > 1:
            decoded = _decode_animation(file_path)
            if decoded is not None:
                return decoded
        bitmap = Bitmap(_to_rgb_array(image))
    except Exception as e:
        _logger.debug("decode failed: %s", e)
        raise DecodeError(file_path, str(e)) from e
    _logger.debug("decoded still: path=%s size=%dx%d", file_path, bitmap.width, bitmap.height)
    return SingleFrame(bitmap)


def rescale(bitmap: Bitmap, target_width: int, target_height: int) -> Bitmap:
    """Resample ``bitmap`` to the target size with a bilinear kernel."""
    if target_width <= 0 or target_height <= 0:
        raise ScaleError(f"non-positive target size {target_width}x{target_height}")
    if target_width == bitmap.width and target_height == bitmap.height:
        return bitmap
    try:
        pyvips = _get_pyvips_module()
        src = pyvips.Image.new_from_memory(
            np.ascontiguousarray(bitmap.pixels).tobytes(), bitmap.width, bitmap.height, RGB_CHANNELS, "uchar"
        )
        out = src.resize(
            target_width / bitmap.width,
            vscale=target_height / bitmap.height,
            kernel="linear",
        )
        return Bitmap(_to_rgb_array(out))
    except Exception as e:
        raise ScaleError(f"rescale to {target_width}x{target_height} failed: {e}") from e
