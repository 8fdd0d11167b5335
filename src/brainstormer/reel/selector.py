"""Selector (reel): one circular, momentum-scrollable choice list.

Composes the circular index model, the input unification layer and the
motion engine around a single owned SelectorState. The Selector never
renders; it hands the visible window to render callbacks and settled
selections to selection-changed callbacks.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Sequence

from brainstormer.config import Settings
from brainstormer.reel.inputs import InputUnifier
from brainstormer.reel.models import (
    Catalog,
    Item,
    Phase,
    SelectionChanged,
    SelectorState,
    WindowRendered,
)
from brainstormer.reel.motion import MotionEngine
from brainstormer.reel.scheduler import FrameScheduler

logger = logging.getLogger(__name__)

SelectionCallback = Callable[[SelectionChanged], None]
RenderCallback = Callable[[WindowRendered], None]


class Selector:
    """A single reel over one catalog.

    Args:
        catalog: Items to choose from (at least one, enforced by Catalog)
        scheduler: Frame scheduler shared by all animations of this reel
        settings: Tunables; defaults to Settings()
        category: Category key, copied into emitted events
        initial_index: Starting index; random (via ``rng``) if None
        extents: Per-item extents along the scroll axis; uniform
            ``settings.item_extent`` if None
        rng: Random source for the initial index
    """

    def __init__(
        self,
        catalog: Catalog,
        scheduler: FrameScheduler,
        settings: Settings | None = None,
        *,
        category: str | None = None,
        initial_index: int | None = None,
        extents: Sequence[float] | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or Settings()
        self.category = category if category is not None else catalog.category
        self.scheduler = scheduler
        self._selection_callbacks: list[SelectionCallback] = []
        self._render_callbacks: list[RenderCallback] = []

        if initial_index is None:
            initial_index = (rng or random).randrange(len(catalog))
        center = min(max(initial_index, 0), len(catalog) - 1)

        self.state = SelectorState(
            catalog=catalog,
            center_index=center,
            extents=self._resolve_extents(catalog, extents),
        )
        self.motion = MotionEngine(
            self.state,
            scheduler,
            self.settings,
            on_index_changed=self._handle_index_changed,
            on_settled=self._handle_settled,
        )
        self.inputs = InputUnifier(
            self.motion.apply,
            self._accepts_input,
            wheel_step=self.settings.wheel_step,
            touch_scale=self.settings.touch_scale,
            touch_min_travel=self.settings.touch_min_travel,
            velocity_smoothing=self.settings.velocity_smoothing,
            release_idle_cutoff=self.settings.release_idle_cutoff,
        )

    # --- Read-only views ---

    @property
    def catalog(self) -> Catalog:
        return self.state.catalog

    @property
    def current_index(self) -> int:
        return self.state.center_index

    @property
    def current_value(self) -> Item:
        """The centered item; always a concrete catalog entry."""
        return self.state.catalog[self.state.center_index]

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def locked(self) -> bool:
        return self.state.locked

    def window(self, size: int | None = None) -> list[Item]:
        """Visible items centered on the current index."""
        indices = self.motion.index_model.window(
            self.state.center_index, size or self.settings.window_size
        )
        return [self.state.catalog[i] for i in indices]

    # --- Subscriptions ---

    def on_selection_changed(self, callback: SelectionCallback) -> SelectionCallback:
        """Register a selection-changed listener (usable as a decorator)."""
        self._selection_callbacks.append(callback)
        return callback

    def on_render(self, callback: RenderCallback) -> RenderCallback:
        """Register a render listener and send it the current window."""
        self._render_callbacks.append(callback)
        callback(self._window_event())
        return callback

    # --- Commands ---

    def set_catalog(self, catalog: Catalog, extents: Sequence[float] | None = None) -> None:
        """Replace the items, clamp the index and re-render.

        An auto-spin keeps running over the new items; any drag, fling or
        snap in progress is cancelled. Mismatched extents raise ValueError
        and leave the reel untouched.
        """
        resolved = self._resolve_extents(catalog, extents)
        if self.state.phase in (Phase.DRAGGING, Phase.FLINGING, Phase.SNAPPING):
            self.motion.cancel()
            self.inputs.reset()
        previous = self.state.center_index
        self.state.catalog = catalog
        self.motion.reset_geometry(resolved)
        if self.state.center_index != previous:
            logger.debug(
                f"[{self.category}] Index clamped {previous} -> "
                f"{self.state.center_index} on catalog change"
            )
        self._render()

    def spin(self, speed: float = 1.0) -> None:
        """Enter AUTO_SPINNING until stop() or lock(); no-op if locked."""
        if self.state.locked:
            return
        self.inputs.reset()
        self.motion.start_auto_spin(speed)

    def stop(self) -> None:
        """Cancel any animation and return to IDLE without snapping."""
        self.motion.cancel()

    def lock(self, value: bool = True) -> None:
        """Toggle the lock; locking settles the reel on its centered item."""
        self.state.locked = bool(value)
        if self.state.locked:
            self.inputs.reset()
            self.motion.settle_now(cause="lock")

    # --- Raw input (from the host surface) ---

    def wheel(self, delta_y: float) -> bool:
        return self.inputs.wheel(delta_y)

    def press(self, y: float, time: float | None = None) -> bool:
        return self.inputs.press(y, self._time(time))

    def move(self, y: float, time: float | None = None) -> bool:
        return self.inputs.move(y, self._time(time))

    def release(self, time: float | None = None) -> bool:
        return self.inputs.release(self._time(time))

    def touch_start(self, y: float) -> bool:
        return self.inputs.touch_start(y)

    def touch_move(self, y: float) -> bool:
        return self.inputs.touch_move(y)

    def touch_end(self) -> bool:
        return self.inputs.touch_end()

    # --- Internals ---

    def _accepts_input(self) -> bool:
        return not self.state.locked and self.state.phase != Phase.AUTO_SPINNING

    def _time(self, time: float | None) -> float:
        return self.scheduler.now() if time is None else time

    def _resolve_extents(
        self, catalog: Catalog, extents: Sequence[float] | None
    ) -> list[float]:
        if extents is None:
            return [self.settings.item_extent] * len(catalog)
        if len(extents) != len(catalog):
            raise ValueError(
                f"Expected {len(catalog)} item extents, got {len(extents)}"
            )
        return list(extents)

    def _window_event(self) -> WindowRendered:
        indices = self.motion.index_model.window(
            self.state.center_index, self.settings.window_size
        )
        return WindowRendered(
            category=self.category,
            center_index=self.state.center_index,
            indices=indices,
            labels=[self.state.catalog[i].label for i in indices],
        )

    def _render(self) -> None:
        if not self._render_callbacks:
            return
        event = self._window_event()
        for callback in list(self._render_callbacks):
            callback(event)

    def _handle_index_changed(self, index: int) -> None:
        self._render()

    def _handle_settled(self, index: int, cause: str) -> None:
        event = SelectionChanged.for_item(
            self.category, index, self.state.catalog[index], cause
        )
        for callback in list(self._selection_callbacks):
            callback(event)
