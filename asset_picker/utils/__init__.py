"""Utility package for asset picker."""

from . import validation

__all__ = ["validation"]
