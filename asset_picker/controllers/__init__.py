"""Controller layer for decoupling picker sessions from widgets."""

from .selection import (
    NoSelection,
    NoSelectionReason,
    PickerMisuseError,
    PickerSurface,
    Selected,
    SelectionCallback,
    SelectionController,
    SelectionResult,
    SelectionState,
)

__all__ = [
    "NoSelection",
    "NoSelectionReason",
    "PickerMisuseError",
    "PickerSurface",
    "Selected",
    "SelectionCallback",
    "SelectionController",
    "SelectionResult",
    "SelectionState",
]
