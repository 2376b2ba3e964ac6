"""
Frame Clock
===========

Cooperative one-callback-per-frame scheduling with cancellable handles.

The display loop calls run_frame() once per refresh. Callbacks scheduled
while a frame is running fire on the following frame, so at most one tick
executes at a time and none re-enters another.
"""

from __future__ import annotations

import itertools
from typing import Callable, Dict, Optional

Callback = Callable[[], None]


class TickHandle:
    """Handle to a pending callback. Cancelling is idempotent."""

    __slots__ = ("_id", "_cancelled", "_fired")

    def __init__(self, handle_id: int):
        self._id = handle_id
        self._cancelled = False
        self._fired = False

    @property
    def id(self) -> int:
        return self._id

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "fired" if self._fired else "pending"
        return f"TickHandle({self._id}, {state})"


class FrameClock:
    """
    Holds callbacks until the next frame.

    Mirrors a browser-style request/cancel animation frame pair.
    """

    def __init__(self):
        self._pending: Dict[int, Callback] = {}
        self._handles: Dict[int, TickHandle] = {}
        self._ids = itertools.count(1)
        self._frame: int = 0

    @property
    def frame(self) -> int:
        """Number of frames run so far."""
        return self._frame

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def schedule(self, callback: Callback) -> TickHandle:
        """Queue callback for the next frame."""
        handle = TickHandle(next(self._ids))
        self._pending[handle.id] = callback
        self._handles[handle.id] = handle
        return handle

    def cancel(self, handle: Optional[TickHandle]) -> None:
        """Cancel a pending callback. No-op for None or already-settled handles."""
        if handle is None or not handle.pending:
            return
        handle._cancelled = True
        self._pending.pop(handle.id, None)
        self._handles.pop(handle.id, None)

    def run_frame(self) -> int:
        """
        Fire every callback that was pending when the frame began.

        A callback may cancel a later one in the same batch; cancelled
        callbacks are skipped.

        Returns:
            Number of callbacks fired.
        """
        self._frame += 1
        batch = list(self._pending.keys())
        fired = 0
        for handle_id in batch:
            callback = self._pending.pop(handle_id, None)
            handle = self._handles.pop(handle_id, None)
            if callback is None or handle is None:
                continue
            handle._fired = True
            callback()
            fired += 1
        return fired
