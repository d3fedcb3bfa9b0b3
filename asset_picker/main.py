# main.py
"""
Entry point and reference caller window for Asset Picker.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QStandardPaths, Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from . import config
from .controllers import (
    NoSelectionReason,
    Selected,
    SelectionController,
    SelectionResult,
)
from .widgets.picker_dialog import FileDialogPickerSurface

LOGGER_NAME = "asset_picker"
DISABLED_LEVEL = logging.CRITICAL + 1

logger = logging.getLogger(LOGGER_NAME)

NO_SELECTION_MESSAGES = {
    NoSelectionReason.CANCELLED: "Selection cancelled.",
    NoSelectionReason.DISMISSED: "Picker closed.",
    NoSelectionReason.REJECTED: "The chosen file could not be used.",
}


def _default_log_dir() -> Path:
    location = QStandardPaths.writableLocation(QStandardPaths.AppLocalDataLocation)
    return Path(location) if location else Path.home() / ".asset_picker"


def configure_logging(log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure and return the application logger.

    The handler setup is idempotent to avoid duplicate handlers when called
    more than once (e.g., in tests). A rotating file handler limits on-disk
    log growth while mirroring output to stdout.
    """

    app_logger = logging.getLogger(LOGGER_NAME)
    if app_logger.handlers:
        return app_logger

    app_logger.setLevel(logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = (log_dir or _default_log_dir()) / config.LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    app_logger.addHandler(file_handler)
    app_logger.addHandler(stream_handler)
    app_logger.propagate = False

    return app_logger


_level_before_disable: Optional[int] = None


def set_logging_enabled(enabled: bool) -> None:
    """Switch all ``asset_picker`` logging on or off at runtime.

    Re-enabling restores whatever level was in effect when logging was
    switched off.
    """
    global _level_before_disable
    app_logger = logging.getLogger(LOGGER_NAME)
    if enabled:
        if _level_before_disable is not None:
            app_logger.setLevel(_level_before_disable)
            _level_before_disable = None
        return
    if _level_before_disable is None:
        _level_before_disable = app_logger.level
        app_logger.setLevel(DISABLED_LEVEL)


def logging_enabled() -> bool:
    return logging.getLogger(LOGGER_NAME).isEnabledFor(logging.CRITICAL)


def global_exception_handler(exc_type, value, tb):
    logger.error("Uncaught exception", exc_info=(exc_type, value, tb))
    sys.__excepthook__(exc_type, value, tb)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Asset Picker - PySide6")
        self.resize(config.WINDOW_WIDTH, config.WINDOW_HEIGHT)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        self.preview = QLabel("No image selected")
        self.preview.setAlignment(Qt.AlignCenter)
        self.preview.setMinimumSize(config.PREVIEW_SIZE // 2, config.PREVIEW_SIZE // 2)
        layout.addWidget(self.preview, 1)

        self.status_label = QLabel("")
        self.status_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.status_label)

        self.choose_button = QPushButton("Choose Image...")
        self.choose_button.setToolTip("Pick a single image from disk")
        self.choose_button.clicked.connect(self.choose_image)
        layout.addWidget(self.choose_button)

        self._controller: Optional[SelectionController] = None
        self.selected_image = None
        self.selected_source: Optional[str] = None

    @property
    def controller(self) -> Optional[SelectionController]:
        return self._controller

    def create_surface(self) -> FileDialogPickerSurface:
        return FileDialogPickerSurface()

    def choose_image(self) -> None:
        if self._controller is not None and self._controller.is_active:
            logger.info("Picker already open; ignoring request")
            return

        controller = SelectionController()
        controller.set_callback(self._on_image_selected)
        self._controller = controller
        self.choose_button.setEnabled(False)
        self.status_label.setText("")
        controller.present(self, self.create_surface())

    def _on_image_selected(self, result: SelectionResult) -> None:
        self._controller = None
        if not result.is_selected and result.reason is NoSelectionReason.DISMISSED:
            # Window is being torn down; leave its widgets alone
            return

        self.choose_button.setEnabled(True)
        if isinstance(result, Selected):
            self.selected_image = result.image
            self.selected_source = result.source
            pixmap = QPixmap.fromImage(result.image)
            self.preview.setPixmap(
                pixmap.scaled(
                    config.PREVIEW_SIZE,
                    config.PREVIEW_SIZE,
                    Qt.KeepAspectRatio,
                    Qt.SmoothTransformation,
                )
            )
            name = Path(result.source).name if result.source else "image"
            self.status_label.setText(f"Selected {name}")
            logger.info("Displaying %s", name)
        else:
            self.status_label.setText(NO_SELECTION_MESSAGES[result.reason])

    def closeEvent(self, event):
        if self._controller is not None:
            self._controller.close()
        super().closeEvent(event)


def main() -> int:
    configure_logging()
    sys.excepthook = global_exception_handler
    app = QApplication.instance() or QApplication(sys.argv)
    window = MainWindow()
    window.show()
    logger.info("MainWindow initialized.")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
