"""Reel engine: circular, momentum-driven selection lists.

This package implements the interactive core:
- models.py: Item, Catalog, SelectorState, phases and events
- circular.py: Pure circular index arithmetic
- inputs.py: Wheel, drag and touch unified into one delta stream
- scheduler.py: Cancelable per-frame callbacks (manual and asyncio)
- motion.py: Drag/fling/snap/auto-spin state machine
- selector.py: One reel composing the pieces above
- ensemble.py: All reels of one concept and the Pick-set
"""

from brainstormer.reel.models import (
    Catalog,
    Item,
    Phase,
    SelectionChanged,
    SelectorState,
    WindowRendered,
)
from brainstormer.reel.circular import CircularIndex
from brainstormer.reel.scheduler import (
    AsyncioFrameScheduler,
    FrameHandle,
    FrameScheduler,
    ManualFrameScheduler,
)
from brainstormer.reel.motion import MotionEngine, ease_out_quad
from brainstormer.reel.selector import Selector
from brainstormer.reel.ensemble import Ensemble

__all__ = [
    "Catalog",
    "Item",
    "Phase",
    "SelectionChanged",
    "SelectorState",
    "WindowRendered",
    "CircularIndex",
    "AsyncioFrameScheduler",
    "FrameHandle",
    "FrameScheduler",
    "ManualFrameScheduler",
    "MotionEngine",
    "ease_out_quad",
    "Selector",
    "Ensemble",
]
