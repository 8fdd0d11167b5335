"""Frame scheduling for reel animations.

A scheduled callback runs once per frame, repeatedly, until its handle is
cancelled. Cancelling is idempotent and takes effect immediately: a
cancelled callback never runs again, even if the cancel happens in the
middle of a frame that still has other callbacks to run.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]

DEFAULT_FRAME_INTERVAL = 1 / 60

_handle_ids = itertools.count(1)


@dataclass
class FrameHandle:
    """Handle returned by schedule(); pass it to cancel()."""

    id: int = field(default_factory=lambda: next(_handle_ids))
    cancelled: bool = False
    timer: Any = None


@runtime_checkable
class FrameScheduler(Protocol):
    """Protocol for "run before the next paint, repeatedly" primitives."""

    def schedule(self, callback: FrameCallback) -> FrameHandle:
        """Run ``callback(now)`` once per frame until the handle is cancelled."""
        ...

    def cancel(self, handle: FrameHandle | None) -> None:
        """Stop a scheduled callback; None and repeated cancels are no-ops."""
        ...

    def now(self) -> float:
        """Current time in seconds on the scheduler's clock."""
        ...

    @property
    def active_count(self) -> int:
        """Number of callbacks still scheduled."""
        ...


class ManualFrameScheduler(FrameScheduler):
    """Deterministic scheduler driven by explicit ticks.

    Used by tests and headless tools; time only moves when tick() or
    advance() is called.
    """

    def __init__(self, frame_interval: float = DEFAULT_FRAME_INTERVAL, start: float = 0.0):
        self.frame_interval = frame_interval
        self._now = start
        self._callbacks: dict[int, FrameCallback] = {}

    def schedule(self, callback: FrameCallback) -> FrameHandle:
        handle = FrameHandle()
        self._callbacks[handle.id] = callback
        return handle

    def cancel(self, handle: FrameHandle | None) -> None:
        if handle is None or handle.cancelled:
            return
        handle.cancelled = True
        self._callbacks.pop(handle.id, None)

    def now(self) -> float:
        return self._now

    @property
    def active_count(self) -> int:
        return len(self._callbacks)

    def tick(self) -> None:
        """Advance one frame and run every live callback once."""
        self._now += self.frame_interval
        for handle_id, callback in list(self._callbacks.items()):
            # Skip callbacks cancelled earlier in this frame
            if handle_id in self._callbacks:
                callback(self._now)

    def advance(self, seconds: float) -> None:
        """Run as many frames as fit in ``seconds``."""
        frames = int(round(seconds / self.frame_interval))
        for _ in range(frames):
            self.tick()


class AsyncioFrameScheduler(FrameScheduler):
    """Frame scheduler on top of the running asyncio event loop."""

    def __init__(self, frame_interval: float = DEFAULT_FRAME_INTERVAL):
        self.frame_interval = frame_interval
        self._active: dict[int, FrameHandle] = {}

    def schedule(self, callback: FrameCallback) -> FrameHandle:
        loop = asyncio.get_running_loop()
        handle = FrameHandle()
        self._active[handle.id] = handle
        handle.timer = loop.call_later(self.frame_interval, self._run, handle, callback)
        return handle

    def cancel(self, handle: FrameHandle | None) -> None:
        if handle is None or handle.cancelled:
            return
        handle.cancelled = True
        if handle.timer is not None:
            handle.timer.cancel()
            handle.timer = None
        self._active.pop(handle.id, None)

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    @property
    def active_count(self) -> int:
        return len(self._active)

    def _run(self, handle: FrameHandle, callback: FrameCallback) -> None:
        if handle.cancelled:
            return
        loop = asyncio.get_running_loop()
        try:
            callback(loop.time())
        except Exception:
            logger.exception(f"Frame callback {handle.id} failed, cancelling")
            self.cancel(handle)
            raise
        if not handle.cancelled:
            handle.timer = loop.call_later(self.frame_interval, self._run, handle, callback)
