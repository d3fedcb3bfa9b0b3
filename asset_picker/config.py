# config.py
"""
Application configuration constants for Asset Picker
"""
import os

# Supported image formats
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']

# Picker dialog
PICKER_DIALOG_TITLE = "Select Image"
USE_NATIVE_DIALOG = False  # Qt's own dialog behaves the same on every platform

# Preview shown by the caller window
PREVIEW_SIZE = 480
WINDOW_WIDTH = 640
WINDOW_HEIGHT = 600

# Logging
LOG_FILE_NAME = "asset_picker.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5

# Raise on controller misuse instead of logging it
STRICT_MISUSE = os.environ.get("ASSET_PICKER_STRICT", "").lower() in {"1", "true", "yes"}
