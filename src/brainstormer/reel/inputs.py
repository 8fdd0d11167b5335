"""Input unification: wheel, pointer drag and touch into one delta stream.

Direction convention: positive means "forward", i.e. towards the next
item. Wheel delta follows the browser convention (positive deltaY is a
scroll down, forward). Pointer and touch coordinates grow downwards, so
moving a finger or pointer up is forward.

Touch is re-emitted as wheel-equivalent delta and goes through the same
accumulator as the wheel, so equal net travel lands on the same index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Union

logger = logging.getLogger(__name__)


# --- Typed motion inputs ---


@dataclass(frozen=True)
class StepInput:
    """Discrete signed unit steps (wheel or touch)."""

    steps: int


@dataclass(frozen=True)
class DragStart:
    """Pointer pressed; the reel should stop and follow the pointer."""

    time: float


@dataclass(frozen=True)
class DragMove:
    """Continuous forward displacement, 1:1 with pointer travel."""

    delta: float
    velocity: float


@dataclass(frozen=True)
class DragRelease:
    """Pointer released with the last sampled forward velocity."""

    velocity: float


MotionInput = Union[StepInput, DragStart, DragMove, DragRelease]
MotionSink = Callable[[MotionInput], None]


class WheelAccumulator:
    """Turns raw wheel delta into unit steps, carrying the remainder."""

    def __init__(self, step: float = 120.0):
        if step <= 0:
            raise ValueError(f"wheel step must be positive, got {step}")
        self.step = step
        self.accumulated = 0.0

    def feed(self, delta: float) -> int:
        """Add ``delta`` and return the signed number of whole steps crossed."""
        self.accumulated += delta
        steps = 0
        while self.accumulated >= self.step:
            steps += 1
            self.accumulated -= self.step
        while self.accumulated <= -self.step:
            steps -= 1
            self.accumulated += self.step
        return steps

    def reset(self) -> None:
        self.accumulated = 0.0


class DragTracker:
    """Tracks one pointer drag and an exponentially-weighted velocity."""

    def __init__(self, smoothing: float = 0.8):
        if not 0.0 < smoothing <= 1.0:
            raise ValueError(f"smoothing must be in (0, 1], got {smoothing}")
        self.smoothing = smoothing
        self.active = False
        self.start_y = 0.0
        self.last_y = 0.0
        self.last_time = 0.0
        self.velocity = 0.0

    def press(self, y: float, time: float) -> None:
        self.active = True
        self.start_y = y
        self.last_y = y
        self.last_time = time
        self.velocity = 0.0

    def move(self, y: float, time: float) -> float:
        """Return the forward delta since the last sample."""
        delta = self.last_y - y
        interval = time - self.last_time
        if interval > 0:
            instant = delta / interval
            self.velocity = (
                self.smoothing * instant + (1 - self.smoothing) * self.velocity
            )
        self.last_y = y
        self.last_time = time
        return delta

    def release(self, time: float, idle_cutoff: float | None = None) -> float:
        """End the drag and return the fling velocity.

        A pointer held still for longer than ``idle_cutoff`` before release
        has no momentum left.
        """
        self.active = False
        if idle_cutoff is not None and time - self.last_time > idle_cutoff:
            return 0.0
        return self.velocity

    def reset(self) -> None:
        self.active = False
        self.velocity = 0.0


class TouchAdapter:
    """Synthesizes wheel-equivalent delta from vertical touch travel."""

    def __init__(self, scale: float = 1.0, min_travel: float = 12.0):
        self.scale = scale
        self.min_travel = min_travel
        self.active = False
        self.last_y = 0.0
        self.travel = 0.0

    def start(self, y: float) -> None:
        self.active = True
        self.last_y = y
        self.travel = 0.0

    def move(self, y: float) -> float:
        """Return wheel-equivalent delta, or 0.0 below the travel threshold."""
        self.travel += self.last_y - y
        self.last_y = y
        if abs(self.travel) < self.min_travel:
            return 0.0
        delta = self.travel * self.scale
        self.travel = 0.0
        return delta

    def end(self) -> float:
        """Flush whatever travel is left below the threshold."""
        self.active = False
        delta = self.travel * self.scale
        self.travel = 0.0
        return delta

    def reset(self) -> None:
        self.active = False
        self.travel = 0.0


class InputUnifier:
    """Translates raw gestures into typed motion inputs for one reel.

    ``accepts_input`` gates every gesture: when it returns False the event
    is dropped before any accumulator is touched.
    """

    def __init__(
        self,
        sink: MotionSink,
        accepts_input: Callable[[], bool],
        *,
        wheel_step: float = 120.0,
        touch_scale: float = 1.0,
        touch_min_travel: float = 12.0,
        velocity_smoothing: float = 0.8,
        release_idle_cutoff: float | None = 0.1,
    ):
        self._sink = sink
        self._accepts_input = accepts_input
        self.wheel_acc = WheelAccumulator(wheel_step)
        self.drag = DragTracker(velocity_smoothing)
        self.touch = TouchAdapter(touch_scale, touch_min_travel)
        self.release_idle_cutoff = release_idle_cutoff

    def wheel(self, delta_y: float) -> bool:
        """Handle a wheel event. Returns False if the event was ignored."""
        if not self._accepts_input():
            return False
        self._emit_wheel(delta_y)
        return True

    def press(self, y: float, time: float) -> bool:
        if not self._accepts_input():
            return False
        self.drag.press(y, time)
        self._sink(DragStart(time=time))
        return True

    def move(self, y: float, time: float) -> bool:
        if not self._accepts_input() or not self.drag.active:
            return False
        delta = self.drag.move(y, time)
        self._sink(DragMove(delta=delta, velocity=self.drag.velocity))
        return True

    def release(self, time: float) -> bool:
        if not self._accepts_input() or not self.drag.active:
            return False
        velocity = self.drag.release(time, self.release_idle_cutoff)
        self._sink(DragRelease(velocity=velocity))
        return True

    def touch_start(self, y: float) -> bool:
        if not self._accepts_input():
            return False
        self.touch.start(y)
        return True

    def touch_move(self, y: float) -> bool:
        if not self._accepts_input() or not self.touch.active:
            return False
        delta = self.touch.move(y)
        if delta:
            self._emit_wheel(delta)
        return True

    def touch_end(self) -> bool:
        if not self._accepts_input() or not self.touch.active:
            return False
        delta = self.touch.end()
        if delta:
            self._emit_wheel(delta)
        return True

    def reset(self) -> None:
        """Drop any partially accumulated gesture."""
        self.wheel_acc.reset()
        self.drag.reset()
        self.touch.reset()

    def _emit_wheel(self, delta: float) -> None:
        steps = self.wheel_acc.feed(delta)
        if steps:
            logger.debug(f"Wheel delta {delta:+.1f} -> {steps:+d} step(s)")
            self._sink(StepInput(steps=steps))
