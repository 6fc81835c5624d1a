import contextlib

import numpy as np
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import QFrame, QLabel, QScrollArea

from .image_engine.types import RGB_CHANNELS, Bitmap
from .logger import get_logger

_logger = get_logger("ui_canvas")


def bitmap_to_pixmap(bitmap: Bitmap) -> QPixmap:
    pixels = np.ascontiguousarray(bitmap.pixels)
    q_image = QImage(
        pixels.data,
        bitmap.width,
        bitmap.height,
        RGB_CHANNELS * bitmap.width,
        QImage.Format.Format_RGB888,
    )
    # fromImage copies, so the numpy buffer may go away afterwards
    return QPixmap.fromImage(q_image)


class ImageCanvas(QScrollArea):
    """Scrollable image display plus the viewer's input gates.

    Panning is the scroll area's own behavior. Ctrl+wheel becomes
    ``zoom_scrolled``; clicks become navigation requests.
    """

    zoom_scrolled = Signal(float)
    next_requested = Signal()
    previous_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._label = QLabel(self)
        self._label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setWidget(self._label)
        self.setWidgetResizable(False)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        with contextlib.suppress(Exception):
            self.setFrameShape(QFrame.Shape.NoFrame)

    @property
    def label(self) -> QLabel:
        return self._label

    def show_bitmap(self, bitmap: Bitmap) -> None:
        """Display sink for ViewState.reconcile_render()."""
        pixmap = bitmap_to_pixmap(bitmap)
        self._label.setPixmap(pixmap)
        self._label.resize(pixmap.size())
        _logger.debug("show_bitmap: %dx%d", bitmap.width, bitmap.height)

    # ---- input gates -----------------------------------------------
    def handle_wheel(self, modifiers, dy: float) -> bool:
        """Emit a zoom sample when Ctrl is held; False lets the area scroll."""
        if not (modifiers & Qt.KeyboardModifier.ControlModifier):
            return False
        if dy:
            self.zoom_scrolled.emit(float(dy))
        return True

    def handle_click(self, button, modifiers) -> bool:
        if button == Qt.MouseButton.RightButton:
            self.previous_requested.emit()
            return True
        if button == Qt.MouseButton.LeftButton:
            if modifiers & Qt.KeyboardModifier.ShiftModifier:
                self.previous_requested.emit()
            else:
                self.next_requested.emit()
            return True
        return False

    def wheelEvent(self, event) -> None:
        if self.handle_wheel(event.modifiers(), event.angleDelta().y()):
            event.accept()
            return
        super().wheelEvent(event)

    def mousePressEvent(self, event) -> None:
        if self.handle_click(event.button(), event.modifiers()):
            event.accept()
            return
        super().mousePressEvent(event)
