import gc
import os
from pathlib import Path
from typing import List

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

pytest.importorskip(
    "PySide6.QtWidgets",
    reason="PySide6 Qt bindings required for picker dialog tests",
    exc_type=ImportError,
)

from PIL import Image  # noqa: E402
from PySide6.QtCore import QCoreApplication, QEvent  # noqa: E402
from PySide6.QtGui import QImage  # noqa: E402
from PySide6.QtWidgets import QApplication, QWidget  # noqa: E402

from asset_picker.controllers import (  # noqa: E402
    NoSelectionReason,
    Selected,
    SelectionController,
    SelectionResult,
)
from asset_picker.utils.validation import allowed_extensions  # noqa: E402
from asset_picker.widgets.picker_dialog import (  # noqa: E402
    FileDialogPickerSurface,
    ImageLoadError,
    load_image,
)


@pytest.fixture(scope="module")
def qt_app() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


def create_temp_image(tmp_path: Path, name: str = "img.png", size=(10, 10)) -> Path:
    img = Image.new("RGB", size, color="red")
    path = tmp_path / name
    img.save(path)
    return path


@pytest.fixture()
def session(qt_app, tmp_path):
    results: List[SelectionResult] = []
    host = QWidget()
    surface = FileDialogPickerSurface(directory=str(tmp_path))
    controller = SelectionController(strict=True)
    controller.set_callback(results.append)
    controller.present(host, surface)
    yield controller, surface, host, results
    surface.close()


def test_show_opens_dialog_with_image_filter(session):
    controller, surface, host, _ = session

    assert controller.is_active
    assert surface.dialog is not None
    assert surface.dialog.parent() is host
    assert "*.png" in surface.name_filter()
    assert surface.name_filter().startswith("Images (")


def test_file_selected_delivers_loaded_image(session, tmp_path):
    controller, surface, _, results = session
    path = create_temp_image(tmp_path, size=(12, 8))

    surface.dialog.fileSelected.emit(str(path))

    assert len(results) == 1
    result = results[0]
    assert isinstance(result, Selected)
    assert isinstance(result.image, QImage)
    assert (result.image.width(), result.image.height()) == (12, 8)
    assert result.source == str(path)
    assert controller.result is result
    assert surface.is_closed
    assert surface.dialog is None


def test_invalid_file_is_rejected(session, tmp_path):
    _, surface, _, results = session
    bogus = tmp_path / "notes.txt"
    bogus.write_text("hello")

    surface.dialog.fileSelected.emit(str(bogus))

    assert results[0].reason is NoSelectionReason.REJECTED
    assert "not a supported image type" in results[0].detail


def test_corrupt_image_is_rejected(session, tmp_path):
    _, surface, _, results = session
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"definitely not a png")

    surface.dialog.fileSelected.emit(str(broken))

    assert results[0].reason is NoSelectionReason.REJECTED


def test_dialog_rejection_cancels(session):
    controller, surface, _, results = session

    surface.dialog.reject()

    assert [r.reason for r in results] == [NoSelectionReason.CANCELLED]
    assert controller.is_completed


def test_host_destruction_resolves_as_dismissed(session):
    _, surface, host, results = session

    host.deleteLater()
    QCoreApplication.sendPostedEvents(None, QEvent.DeferredDelete)

    assert [r.reason for r in results] == [NoSelectionReason.DISMISSED]
    assert surface.is_closed


def test_events_after_controller_release_are_ignored(qt_app, tmp_path):
    results: List[SelectionResult] = []
    surface = FileDialogPickerSurface(directory=str(tmp_path))
    controller = SelectionController(strict=True)
    controller.set_callback(results.append)
    controller.present(None, surface)
    dialog = surface.dialog

    del controller
    gc.collect()
    dialog.reject()

    assert results == []
    surface.close()


def test_close_is_idempotent(qt_app, tmp_path):
    surface = FileDialogPickerSurface(directory=str(tmp_path))
    controller = SelectionController(strict=True)
    controller.set_callback(lambda result: None)
    controller.present(None, surface)

    surface.close()
    surface.close()

    assert surface.is_closed
    assert surface.dialog is None


def test_surface_cannot_be_shown_twice(qt_app, tmp_path):
    first_results: List[SelectionResult] = []
    surface = FileDialogPickerSurface(directory=str(tmp_path))
    first = SelectionController(strict=True)
    first.set_callback(first_results.append)
    first.present(None, surface)
    dialog = surface.dialog

    second = SelectionController(strict=True)
    second.set_callback(lambda result: None)
    second.present(None, surface)

    assert second.is_completed
    assert second.result.reason is NoSelectionReason.REJECTED
    assert not surface.is_closed
    assert surface.dialog is dialog

    dialog.reject()

    assert [r.reason for r in first_results] == [NoSelectionReason.CANCELLED]
    assert first.is_completed
    assert surface.is_closed


def test_load_image_reads_png(qt_app, tmp_path):
    path = create_temp_image(tmp_path)
    image = load_image(path, allowed_extensions(["png"]))
    assert not image.isNull()
    assert image.width() == 10


def test_load_image_raises_on_corrupt_data(qt_app, tmp_path):
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"\x00\x01\x02")
    with pytest.raises(ImageLoadError):
        load_image(broken, allowed_extensions(["jpg"]))
