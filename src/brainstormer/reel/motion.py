"""Motion state machine for a single reel.

Phases: IDLE, DRAGGING, FLINGING, SNAPPING, AUTO_SPINNING.

Position policy: the reel is an unbounded circular list. ``position`` is
the scroll-axis coordinate under the viewport center, always wrapped into
[0, total_extent); it is never clamped to content bounds. The centered
index is the nearest-item projection of ``position`` and wraps with it.

Every animated phase runs through exactly one scheduled frame callback.
Leaving an animated phase cancels that callback first.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from brainstormer.config import Settings
from brainstormer.reel.circular import CircularIndex, circular_offset, item_centers
from brainstormer.reel.inputs import (
    DragMove,
    DragRelease,
    DragStart,
    MotionInput,
    StepInput,
)
from brainstormer.reel.models import Phase, SelectorState
from brainstormer.reel.scheduler import FrameHandle, FrameScheduler

logger = logging.getLogger(__name__)

# Float slack when comparing accumulated frame time against a cadence
TIME_EPSILON = 1e-9

# Offsets below this many pixels count as already centered
POSITION_EPSILON = 1e-6


def ease_out_quad(t: float) -> float:
    """Quadratic ease-out: k = 1 - (1 - t)^2, with t clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return 1 - (1 - t) ** 2


class MotionEngine:
    """Drives one SelectorState through its motion phases.

    Args:
        state: The reel state this engine mutates (owned by the Selector)
        scheduler: Frame scheduling primitive
        settings: Tunables (durations, velocity limits, spin cadence)
        on_index_changed: Called with the new center index on every change
        on_settled: Called with (index, cause) when the reel settles on an
            item: a discrete step, an auto-spin tick, a finished snap, or a
            forced settle on lock
    """

    def __init__(
        self,
        state: SelectorState,
        scheduler: FrameScheduler,
        settings: Settings,
        *,
        on_index_changed: Callable[[int], None],
        on_settled: Callable[[int, str], None],
    ):
        self.state = state
        self.scheduler = scheduler
        self.settings = settings
        self._on_index_changed = on_index_changed
        self._on_settled = on_settled
        self._handle: FrameHandle | None = None
        self._index = CircularIndex(len(state.catalog))
        self._centers: list[float] = []
        self._settled_index = state.center_index
        self.reset_geometry(state.extents)

    # --- Geometry ---

    def reset_geometry(self, extents: Sequence[float]) -> None:
        """Adopt new item extents (after a catalog change) and recenter."""
        length = len(self.state.catalog)
        if len(extents) != length:
            raise ValueError(
                f"Expected {length} item extents, got {len(extents)}"
            )
        self.state.extents = list(extents)
        self._index = CircularIndex(length)
        self._centers = item_centers(self.state.extents)
        self.state.center_index = min(self.state.center_index, length - 1)
        self.state.position = self._centers[self.state.center_index]
        self._settled_index = self.state.center_index

    def position_of(self, index: int) -> float:
        """Position that centers ``index`` in the viewport."""
        return self._centers[self._index.wrap(index)]

    @property
    def index_model(self) -> CircularIndex:
        return self._index

    @property
    def has_pending_frame(self) -> bool:
        return self._handle is not None

    # --- Input entry point ---

    def apply(self, motion: MotionInput) -> None:
        """Single motion-update function for every input family."""
        if self.state.phase == Phase.AUTO_SPINNING:
            return

        if isinstance(motion, StepInput):
            self._cancel_frame()
            self.state.phase = Phase.IDLE
            self.state.velocity = 0.0
            direction = 1 if motion.steps > 0 else -1
            for _ in range(abs(motion.steps)):
                self._step(direction, cause="step")
        elif isinstance(motion, DragStart):
            self._cancel_frame()
            self.state.phase = Phase.DRAGGING
            self.state.velocity = 0.0
        elif isinstance(motion, DragMove):
            if self.state.phase != Phase.DRAGGING:
                return
            self.state.velocity = motion.velocity
            self._set_position(self.state.position + motion.delta)
        elif isinstance(motion, DragRelease):
            if self.state.phase != Phase.DRAGGING:
                return
            self._release(motion.velocity)

    # --- Transitions ---

    def start_auto_spin(self, speed: float) -> None:
        """Step forward every ``spin_cadence / speed`` seconds until cancelled."""
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self._cancel_frame()
        self.state.phase = Phase.AUTO_SPINNING
        self.state.velocity = 0.0
        cadence = self.settings.spin_cadence / speed
        last = self.scheduler.now()
        accumulated = 0.0

        def frame(now: float) -> None:
            nonlocal last, accumulated
            accumulated += now - last
            last = now
            while accumulated + TIME_EPSILON >= cadence:
                accumulated -= cadence
                self._step(1, cause="spin")
                if handle.cancelled:
                    return

        handle = self._schedule(frame)
        logger.debug(f"Auto-spin started: cadence={cadence:.3f}s")

    def start_fling(self, velocity: float) -> None:
        """Ballistic travel of ``v * D / 2`` eased out over D, then snap."""
        self._cancel_frame()
        self.state.phase = Phase.FLINGING
        self.state.velocity = velocity
        duration = self.settings.fling_duration
        distance = velocity * duration / 2
        start = self.state.position
        started_at = self.scheduler.now()

        def frame(now: float) -> None:
            progress = min(1.0, (now - started_at) / duration) if duration > 0 else 1.0
            self.state.velocity = velocity * (1 - progress)
            self._set_position(start + distance * ease_out_quad(progress))
            if handle.cancelled:
                return
            if progress >= 1.0:
                self.start_snap()

        handle = self._schedule(frame)

    def start_snap(self) -> None:
        """Ease to the center of the nearest item, then settle."""
        self._cancel_frame()
        target_index = self._index.nearest_index(self.state.position, self.state.extents)
        start = self.state.position
        offset = circular_offset(start, self._centers[target_index], self.state.total_extent)
        self.state.velocity = 0.0

        if abs(offset) < POSITION_EPSILON or self.settings.snap_duration <= 0:
            self._finish_snap(target_index)
            return

        self.state.phase = Phase.SNAPPING
        duration = self.settings.snap_duration
        started_at = self.scheduler.now()

        def frame(now: float) -> None:
            progress = min(1.0, (now - started_at) / duration)
            if progress >= 1.0:
                self._finish_snap(target_index)
                return
            self._set_position(start + offset * ease_out_quad(progress))

        self._schedule(frame)

    def cancel(self) -> None:
        """Halt any motion and return to IDLE without snapping."""
        previous = self.state.phase
        self._cancel_frame()
        self.state.phase = Phase.IDLE
        self.state.velocity = 0.0
        if previous != Phase.IDLE:
            logger.debug(f"Animation canceled in phase {previous.value}")

    def settle_now(self, cause: str = "lock") -> None:
        """Cancel motion and jump to the centered item's exact position."""
        self.cancel()
        self.state.position = self._centers[self.state.center_index]
        if self.state.center_index != self._settled_index:
            self._settle(cause)

    # --- Internals ---

    def _release(self, velocity: float) -> None:
        limit = self.settings.max_fling_velocity
        velocity = max(-limit, min(limit, velocity))
        if abs(velocity) < self.settings.min_fling_velocity:
            self.start_snap()
        else:
            self.start_fling(velocity)

    def _finish_snap(self, target_index: int) -> None:
        self._cancel_frame()
        self.state.phase = Phase.IDLE
        self.state.velocity = 0.0
        self.state.position = self._centers[target_index]
        self._update_center(target_index)
        self._settle("snap")

    def _step(self, direction: int, cause: str) -> None:
        new_index = self._index.step(self.state.center_index, direction)
        self.state.position = self._centers[new_index]
        self._update_center(new_index)
        self._settle(cause)

    def _settle(self, cause: str) -> None:
        self._settled_index = self.state.center_index
        self._on_settled(self.state.center_index, cause)

    def _set_position(self, position: float) -> None:
        self.state.position = position % self.state.total_extent
        nearest = self._index.nearest_index(self.state.position, self.state.extents)
        self._update_center(nearest)

    def _update_center(self, index: int) -> None:
        if index != self.state.center_index:
            self.state.center_index = index
            self._on_index_changed(index)

    def _schedule(self, callback: Callable[[float], None]) -> FrameHandle:
        self._handle = self.scheduler.schedule(callback)
        return self._handle

    def _cancel_frame(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
