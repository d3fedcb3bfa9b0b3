"""Single-shot controller for image selection sessions.

This module introduces :class:`SelectionController`, a small service layer
that sits between a caller window and a picker surface (for example the Qt
file dialog in :mod:`asset_picker.widgets.picker_dialog`).  A controller runs
exactly one session: it is presented once, receives events from the surface,
and delivers exactly one :data:`SelectionResult` to the caller's callback.
After that it is inert and every further event is dropped.

The controller never owns its caller.  Bound-method callbacks are held through
:class:`weakref.WeakMethod` and any callback is released as soon as the result
has been delivered, so a caller that keeps a reference to its controller does
not form a reference cycle with it.  The module has no Qt dependency so the
contract can be exercised from tests or non-Qt front ends.
"""

from __future__ import annotations

import enum
import inspect
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Union

from .. import config

logger = logging.getLogger("asset_picker.selection")


class PickerMisuseError(RuntimeError):
    """Raised in strict mode when a controller is driven out of order."""


class NoSelectionReason(enum.Enum):
    """Why a session ended without an image."""

    CANCELLED = "cancelled"
    DISMISSED = "dismissed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Selected:
    """The user picked an image; ``image`` is delivered as supplied."""

    image: Any
    source: Optional[str] = None

    @property
    def is_selected(self) -> bool:
        return True


@dataclass(frozen=True)
class NoSelection:
    """The session ended without an image."""

    reason: NoSelectionReason = NoSelectionReason.CANCELLED
    detail: str = ""

    @property
    def is_selected(self) -> bool:
        return False


SelectionResult = Union[Selected, NoSelection]
SelectionCallback = Callable[[SelectionResult], None]


class SelectionState(enum.Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    COMPLETED = "completed"


class PickerSurface(Protocol):
    """Picker UI driven by a :class:`SelectionController`."""

    def show(self, host: Any, controller: "SelectionController") -> None:
        ...

    def close(self) -> None:
        ...


def _hold_callback(callback: SelectionCallback) -> Callable[[], Optional[SelectionCallback]]:
    """Return a zero-argument accessor for *callback*.

    Bound methods are referenced weakly so the controller does not keep the
    method's owner alive.
    """
    if inspect.ismethod(callback):
        return weakref.WeakMethod(callback)
    return lambda: callback


class SelectionController:
    """Run one picker session and report its outcome exactly once.

    Lifecycle is ``IDLE -> PRESENTING -> COMPLETED``.  Terminal events
    received while idle or after completion are ignored.

    Misuse (presenting twice, presenting without a callback, setting the
    callback twice or after :meth:`present`) raises
    :class:`PickerMisuseError` when *strict* is true and is otherwise logged
    and ignored.  Setting a callback on a completed controller is always a
    no-op.
    """

    def __init__(self, *, strict: Optional[bool] = None) -> None:
        self._strict = config.STRICT_MISUSE if strict is None else strict
        self._state = SelectionState.IDLE
        self._callback_ref: Optional[Callable[[], Optional[SelectionCallback]]] = None
        self._surface: Optional[PickerSurface] = None
        self._result: Optional[SelectionResult] = None

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def is_active(self) -> bool:
        """Return whether the picker surface is currently presented."""

        return self._state is SelectionState.PRESENTING

    @property
    def is_completed(self) -> bool:
        return self._state is SelectionState.COMPLETED

    @property
    def result(self) -> Optional[SelectionResult]:
        """Return the delivered result, or ``None`` before completion."""

        return self._result

    def set_callback(self, callback: SelectionCallback) -> None:
        """Store the callback that receives the session outcome."""

        if not callable(callback):
            raise TypeError("callback must be callable")
        if self._state is SelectionState.COMPLETED:
            logger.debug("Ignoring set_callback() on a completed controller")
            return
        if self._state is not SelectionState.IDLE:
            self._misuse("set_callback() called after present()")
            return
        if self._callback_ref is not None:
            self._misuse("callback is already set")
            return
        self._callback_ref = _hold_callback(callback)

    def present(self, host: Any, surface: PickerSurface) -> None:
        """Show *surface* scoped to *host* and start the session."""

        if self._state is not SelectionState.IDLE:
            self._misuse(f"present() called while {self._state.value}")
            return
        if self._callback_ref is None:
            self._misuse("present() called before set_callback()")
            return
        self._state = SelectionState.PRESENTING
        self._surface = surface
        logger.info("Presenting %s", type(surface).__name__)
        try:
            surface.show(host, self)
        except Exception:
            logger.exception("Picker surface failed to open")
            # A surface that refused to show is not ours to close
            self._surface = None
            self._complete(
                NoSelection(NoSelectionReason.REJECTED, "picker surface failed to open")
            )

    def on_user_picked(self, image: Any, source: Optional[str] = None) -> None:
        self._complete(Selected(image, source))

    def on_user_cancelled(self) -> None:
        self._complete(NoSelection(NoSelectionReason.CANCELLED))

    def on_user_rejected(self, detail: str = "") -> None:
        """Resolve a pick the surface could not turn into an image."""

        self._complete(NoSelection(NoSelectionReason.REJECTED, detail))

    def on_host_dismissed_without_picker(self) -> None:
        """Resolve the session when the host goes away before any pick."""

        self._complete(NoSelection(NoSelectionReason.DISMISSED))

    def close(self) -> None:
        """Tear the session down from the caller side.

        A presenting controller resolves as dismissed.  An idle controller
        becomes inert without ever invoking its callback.
        """

        if self._state is SelectionState.PRESENTING:
            self.on_host_dismissed_without_picker()
            return
        self._state = SelectionState.COMPLETED
        self._callback_ref = None
        self._surface = None

    def _complete(self, result: SelectionResult) -> None:
        if self._state is SelectionState.COMPLETED:
            logger.debug("Dropping %s; session already completed", _describe(result))
            return
        if self._state is SelectionState.IDLE:
            logger.debug("Dropping %s; controller was never presented", _describe(result))
            return

        self._state = SelectionState.COMPLETED
        self._result = result
        callback = self._callback_ref() if self._callback_ref is not None else None
        surface = self._surface
        self._callback_ref = None
        self._surface = None

        try:
            if callback is None:
                logger.debug("Callback owner is gone; %s not delivered", _describe(result))
            else:
                logger.info("Selection finished: %s", _describe(result))
                callback(result)
        finally:
            if surface is not None:
                surface.close()

    def _misuse(self, message: str) -> None:
        if self._strict:
            raise PickerMisuseError(message)
        logger.warning("Ignoring picker misuse: %s", message)


def _describe(result: SelectionResult) -> str:
    if isinstance(result, Selected):
        return f"selected image from {result.source}" if result.source else "selected image"
    if result.detail:
        return f"no selection ({result.reason.value}: {result.detail})"
    return f"no selection ({result.reason.value})"
