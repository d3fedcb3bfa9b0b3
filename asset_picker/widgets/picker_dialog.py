# picker_dialog.py
"""
Qt file dialog picker surface for SelectionController sessions.
"""
import logging
import weakref
from pathlib import Path
from typing import Iterable, Optional, Union

from PIL import Image, UnidentifiedImageError
from PySide6.QtCore import QStandardPaths
from PySide6.QtGui import QImage, QImageReader
from PySide6.QtWidgets import QFileDialog, QWidget

from .. import config
from ..controllers.selection import SelectionController
from ..utils.validation import PickedPathError, allowed_extensions, validate_image_path

logger = logging.getLogger("asset_picker.picker_dialog")


class ImageLoadError(Exception):
    """Raised when a picked file cannot be read as an image."""
    pass


def load_image(file_path: Union[str, Path], allowed_exts: Iterable[str]) -> QImage:
    """
    Validate and read a picked image file.

    Args:
        file_path: Path chosen in the dialog
        allowed_exts: Accepted suffixes, e.g. ``{".png", ".jpg"}``

    Returns:
        QImage: The decoded image with EXIF orientation applied

    Raises:
        PickedPathError: If the path fails validation
        ImageLoadError: If the file data is not a readable image
    """
    safe_path = validate_image_path(file_path, allowed_exts)

    try:
        with Image.open(safe_path) as img:
            img.verify()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageLoadError(f"Invalid image file {safe_path.name}: {exc}") from exc

    reader = QImageReader(str(safe_path))
    reader.setAutoTransform(True)
    image = reader.read()
    if image.isNull():
        raise ImageLoadError(f"Could not read {safe_path.name}: {reader.errorString()}")
    return image


class FileDialogPickerSurface:
    """Presents a non-modal QFileDialog and reports the outcome to a controller.

    The controller is referenced weakly; it owns this surface for the
    duration of the session.
    """

    def __init__(
        self,
        title: str = config.PICKER_DIALOG_TITLE,
        directory: Optional[str] = None,
        formats: Optional[Iterable[str]] = None,
    ):
        self._title = title
        self._directory = directory
        self._formats = list(formats or config.SUPPORTED_IMAGE_FORMATS)
        self._dialog: Optional[QFileDialog] = None
        self._host: Optional[QWidget] = None
        self._controller_ref: Optional[weakref.ReferenceType] = None
        self._closed = False

    @property
    def dialog(self) -> Optional[QFileDialog]:
        return self._dialog

    @property
    def is_closed(self) -> bool:
        return self._closed

    def name_filter(self) -> str:
        pattern = " ".join(f"*.{fmt}" for fmt in self._formats)
        return f"Images ({pattern})"

    def show(self, host: Optional[QWidget], controller: SelectionController) -> None:
        if self._dialog is not None or self._closed:
            raise RuntimeError("A picker surface can only be shown once")

        self._controller_ref = weakref.ref(controller)
        directory = self._directory or (
            QStandardPaths.writableLocation(QStandardPaths.PicturesLocation) or ""
        )
        dialog = QFileDialog(host, self._title, directory, self.name_filter())
        dialog.setFileMode(QFileDialog.ExistingFile)
        dialog.setAcceptMode(QFileDialog.AcceptOpen)
        if not config.USE_NATIVE_DIALOG:
            dialog.setOption(QFileDialog.DontUseNativeDialog, True)
        dialog.fileSelected.connect(self._on_file_selected)
        dialog.rejected.connect(self._on_rejected)
        if host is not None:
            host.destroyed.connect(self._on_host_destroyed)
            self._host = host

        self._dialog = dialog
        dialog.open()
        logger.debug("Opened file dialog in %s", directory or "<cwd>")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._host is not None:
            try:
                self._host.destroyed.disconnect(self._on_host_destroyed)
            except (RuntimeError, TypeError) as exc:
                logger.debug("Host signal already disconnected: %s", exc)
            self._host = None
        dialog, self._dialog = self._dialog, None
        if dialog is not None:
            # hide() rather than close(): closing a visible QDialog emits rejected
            dialog.hide()
            dialog.deleteLater()

    def _controller(self) -> Optional[SelectionController]:
        if self._closed or self._controller_ref is None:
            return None
        controller = self._controller_ref()
        if controller is None:
            logger.debug("Controller released before the dialog finished")
        return controller

    def _on_file_selected(self, file_path: str) -> None:
        controller = self._controller()
        if controller is None:
            return
        try:
            image = load_image(file_path, allowed_extensions(self._formats))
        except (PickedPathError, ImageLoadError) as exc:
            logger.warning("Rejected picked file %s: %s", file_path, exc)
            controller.on_user_rejected(str(exc))
            return
        controller.on_user_picked(image, source=file_path)

    def _on_rejected(self) -> None:
        controller = self._controller()
        if controller is not None:
            controller.on_user_cancelled()

    def _on_host_destroyed(self, *_args) -> None:
        # The dialog is a child of the host and is destroyed with it
        self._dialog = None
        self._host = None
        controller = self._controller()
        if controller is not None:
            controller.on_host_dismissed_without_picker()
