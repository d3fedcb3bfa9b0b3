"""Qt widgets backing picker sessions."""

from .picker_dialog import FileDialogPickerSurface, ImageLoadError, load_image

__all__ = ["FileDialogPickerSurface", "ImageLoadError", "load_image"]
