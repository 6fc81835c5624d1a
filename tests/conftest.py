"""Pytest configuration.

The shell tests use PySide6 widgets. A single `QApplication` is created for
the whole session as early as possible (before collection imports Qt
modules) and shut down cleanly at the end. Qt runs offscreen.

Core tests share the fakes below: in-memory bitmaps and a decoder that
serves a fixed path -> image mapping.
"""

from __future__ import annotations

import os
from typing import Any

import numpy as np
import pytest

from huaga.errors import DecodeError
from huaga.image_engine.animation import AnimationFrame, AnimationHandle
from huaga.image_engine.types import Bitmap, MultiFrame, SingleFrame
from huaga.path_utils import abs_path_str

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    # Keep a strong ref so it isn't GC'd mid-session.
    _APP = app if app is not None else QApplication([])


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return
    app.quit()
    app.processEvents()


def make_bitmap(width: int, height: int, value: int = 0) -> Bitmap:
    return Bitmap(np.full((height, width, 3), value, dtype=np.uint8))


def make_animation(*delays_ms: int, width: int = 20, height: int = 10, loop: int = 0) -> AnimationHandle:
    frames = [AnimationFrame(make_bitmap(width, height, value=i + 1), d) for i, d in enumerate(delays_ms)]
    return AnimationHandle(frames, loop=loop)


class FakeDecoder:
    """Serves decoded images from a dict; anything else is a DecodeError."""

    def __init__(self, images: dict[str, Any] | None = None) -> None:
        self.images: dict[str, Any] = {}
        self.calls: list[str] = []
        for path, image in (images or {}).items():
            self.add(path, image)

    def add(self, path: str, image: Any) -> None:
        if isinstance(image, Bitmap):
            image = SingleFrame(image)
        elif isinstance(image, AnimationHandle):
            image = MultiFrame(image)
        self.images[abs_path_str(path)] = image

    def remove(self, path: str) -> None:
        self.images.pop(abs_path_str(path), None)

    def __call__(self, path):
        if path is None:
            raise DecodeError(None, "no path given")
        key = abs_path_str(path)
        self.calls.append(key)
        try:
            return self.images[key]
        except KeyError:
            raise DecodeError(key, "not an image") from None


class RecordingRescaler:
    def __init__(self) -> None:
        self.sizes: list[tuple[int, int]] = []
        self.error: Exception | None = None

    def __call__(self, bitmap: Bitmap, width: int, height: int) -> Bitmap:
        if self.error is not None:
            raise self.error
        self.sizes.append((width, height))
        return make_bitmap(width, height)


@pytest.fixture
def fake_decoder() -> FakeDecoder:
    return FakeDecoder()


@pytest.fixture
def rescaler() -> RecordingRescaler:
    return RecordingRescaler()


@pytest.fixture
def displayed() -> list[Bitmap]:
    return []
