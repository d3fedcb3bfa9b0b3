"""Checks applied to the file a user picks before it is read."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Set, Union
from urllib.parse import urlparse


class PickedPathError(ValueError):
    """Raised when a picked path cannot be used as a local image file."""


def _is_remote(path_str: str) -> bool:
    # One-letter schemes are Windows drive letters ("C:\\...")
    scheme = urlparse(path_str).scheme
    return len(scheme) > 1


def allowed_extensions(formats: Iterable[str]) -> Set[str]:
    """Turn format names such as ``"png"`` into suffixes such as ``".png"``."""
    return {f".{fmt.lower().lstrip('.')}" for fmt in formats}


def validate_image_path(path: Union[str, Path], allowed_exts: Iterable[str]) -> Path:
    """Validate the *path* a user picked in the dialog.

    Only existing local files whose suffix is in *allowed_exts* are accepted.
    Returns the resolved ``Path``; raises :class:`PickedPathError` otherwise.
    """
    picked = str(path)
    if not picked:
        raise PickedPathError("No file was picked")
    if _is_remote(picked):
        raise PickedPathError(f"Remote locations cannot be picked: {picked}")

    try:
        resolved = Path(picked).expanduser().resolve(strict=True)
    except FileNotFoundError as exc:
        raise PickedPathError(f"Picked file no longer exists: {picked}") from exc

    if not resolved.is_file():
        raise PickedPathError(f"Picked item is not a file: {resolved.name}")

    accepted = allowed_extensions(allowed_exts)
    if resolved.suffix.lower() not in accepted:
        shown = resolved.suffix or "<none>"
        raise PickedPathError(
            f"{resolved.name} is not a supported image type ({shown}); "
            f"expected one of {', '.join(sorted(accepted))}"
        )

    return resolved
