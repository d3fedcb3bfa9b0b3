"""Asset Picker: single-image selection for PySide6 applications."""

__version__ = "0.1.0"
