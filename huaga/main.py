import os
import sys
from pathlib import Path

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QApplication, QFileDialog, QMainWindow

from huaga.errors import DecodeError, NoNavigableImage
from huaga.image_engine.metrics import metrics
from huaga.image_engine.navigator import Direction
from huaga.logger import get_logger, setup_logger
from huaga.render_sync import RenderSync
from huaga.ui_canvas import ImageCanvas
from huaga.view_state import ViewState

# --- CLI logging options -----------------------------------------------------
# Qt exits on unknown options, so our own options are parsed first, reflected
# in environment variables (HUAGA_LOG_LEVEL, HUAGA_LOG_CATS) and removed from
# sys.argv.


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    import argparse

    parser = argparse.ArgumentParser(description="Huaga", add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv[1:])
    if args.log_level:
        os.environ["HUAGA_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["HUAGA_LOG_CATS"] = args.log_cats
    return [argv[0], *remaining]


logger = get_logger("main")

APP_TITLE = "Huaga"


class HuagaWindow(QMainWindow):
    def __init__(self, view: ViewState | None = None):
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1024, 768)

        self.canvas = ImageCanvas(self)
        self.setCentralWidget(self.canvas)

        self.view = view or ViewState(display=self.canvas.show_bitmap)
        self.render_sync = RenderSync(self.view, parent=self)
        self.render_sync.rendered.connect(self._on_rendered)

        self.canvas.zoom_scrolled.connect(self.on_scroll)
        self.canvas.next_requested.connect(self.show_next)
        self.canvas.previous_requested.connect(self.show_previous)
        self._build_toolbar()

    def _build_toolbar(self) -> None:
        toolbar = self.addToolBar("Main")
        toolbar.setMovable(False)

        open_action = QAction("Open", self)
        open_action.setShortcut(QKeySequence("Ctrl+O"))
        open_action.triggered.connect(self.choose_file)
        toolbar.addAction(open_action)

        reset_action = QAction("Actual Size", self)
        reset_action.setShortcut(QKeySequence("Ctrl+0"))
        reset_action.triggered.connect(self.reset_zoom)
        toolbar.addAction(reset_action)

    # ---- event handlers --------------------------------------------
    def choose_file(self) -> None:
        start_dir = os.path.dirname(self.view.current_path or "") or os.path.expanduser("~")
        path, _ = QFileDialog.getOpenFileName(self, "Open File", start_dir)
        if path:
            self.open_file(path)

    def open_file(self, path: str | Path) -> bool:
        try:
            self.view.open_image(path)
        except DecodeError as e:
            # user-initiated open: no image change
            logger.error("open failed: %s", e)
            return False
        self._update_title()
        return True

    def on_scroll(self, raw_delta: float) -> None:
        if self.view.apply_scroll(raw_delta):
            self._update_title()

    def reset_zoom(self) -> None:
        if self.view.reset_zoom():
            self._update_title()

    def show_next(self) -> None:
        self._navigate(Direction.NEXT)

    def show_previous(self) -> None:
        self._navigate(Direction.PREVIOUS)

    def _navigate(self, direction: Direction) -> None:
        try:
            path = self.view.navigate(direction)
        except NoNavigableImage as e:
            logger.debug("navigate %s: %s", direction.value, e)
            return
        logger.debug("navigate %s -> %s", direction.value, path)
        self._update_title()

    def _on_rendered(self) -> None:
        self._update_title()
        snap = self.view.snapshot()
        self.statusBar().showMessage(f"{snap.width}x{snap.height}, {metrics.render_stats().summary()}")

    def _update_title(self) -> None:
        snap = self.view.snapshot()
        if snap.current_path is None:
            self.setWindowTitle(APP_TITLE)
            return
        name = os.path.basename(snap.current_path)
        self.setWindowTitle(f"{APP_TITLE} - {name} ({snap.zoom_ratio * 100:.0f}%)")

    # ---- lifecycle ---------------------------------------------------
    def showEvent(self, event) -> None:
        super().showEvent(event)
        self.render_sync.start()

    def closeEvent(self, event) -> None:
        self.render_sync.stop()
        super().closeEvent(event)


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    import argparse

    if argv is None:
        argv = sys.argv
    argv = _apply_cli_logging_options(argv)
    setup_logger()

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("start_path", nargs="?", help="Image file to open")
    args, _ = parser.parse_known_args(argv[1:])

    app = QApplication(argv)
    window = HuagaWindow()
    if args.start_path:
        window.open_file(Path(args.start_path))
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(run())
