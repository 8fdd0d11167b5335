"""Ensemble controller: the set of reels that make up one concept."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Iterator

from brainstormer.config import Settings
from brainstormer.reel.models import Item
from brainstormer.reel.scheduler import FrameScheduler
from brainstormer.reel.selector import Selector
from brainstormer.sources.defaults import placeholder_catalog

if TYPE_CHECKING:
    from brainstormer.sources.categories import CategoryDescriptor
    from brainstormer.sources.loader import LoadResult

logger = logging.getLogger(__name__)


class Ensemble:
    """Owns one Selector per category key.

    Selectors share no mutable state, so batch operations are plain
    sequential iteration in insertion order.
    """

    def __init__(self, selectors: dict[str, Selector] | None = None):
        self._selectors: dict[str, Selector] = dict(selectors or {})
        # Placeholder reels stay locked through unlock_all() and reroll()
        self.disabled: set[str] = set()

    @classmethod
    def from_load_result(
        cls,
        result: "LoadResult",
        descriptors: list["CategoryDescriptor"],
        scheduler: FrameScheduler,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        placeholders: bool = False,
    ) -> "Ensemble":
        """Build one reel per loaded category.

        Categories without a catalog (exhausted, no fallback) are skipped,
        or, with ``placeholders``, get a locked single-item reel, so the
        rest of the ensemble still works.
        """
        ensemble = cls()
        for descriptor in descriptors:
            catalog = result.catalogs.get(descriptor.key)
            if catalog is None and not placeholders:
                logger.warning(f"[{descriptor.key}] No catalog loaded, reel hidden")
                continue
            disabled = catalog is None
            selector = Selector(
                catalog or placeholder_catalog(descriptor.key),
                scheduler,
                settings,
                category=descriptor.key,
                rng=rng,
            )
            ensemble.add(descriptor.key, selector)
            if disabled:
                logger.warning(f"[{descriptor.key}] No catalog loaded, reel disabled")
                selector.lock(True)
                ensemble.disabled.add(descriptor.key)
        return ensemble

    def add(self, key: str, selector: Selector) -> None:
        if key in self._selectors:
            raise ValueError(f"Duplicate category key: {key}")
        self._selectors[key] = selector

    def __getitem__(self, key: str) -> Selector:
        return self._selectors[key]

    def __contains__(self, key: object) -> bool:
        return key in self._selectors

    def __iter__(self) -> Iterator[str]:
        return iter(self._selectors)

    def __len__(self) -> int:
        return len(self._selectors)

    @property
    def keys(self) -> list[str]:
        return list(self._selectors)

    def spin_all(self, speed: float = 1.0) -> None:
        for selector in self._selectors.values():
            selector.spin(speed)

    def stop_all(self) -> None:
        for selector in self._selectors.values():
            selector.stop()

    def lock_all(self) -> None:
        for selector in self._selectors.values():
            selector.lock(True)

    def unlock_all(self) -> None:
        for key, selector in self._selectors.items():
            if key not in self.disabled:
                selector.lock(False)

    def reroll(self, speed: float = 1.0) -> None:
        """Unlock, stop and spin every reel (the "spin" button)."""
        self.unlock_all()
        self.stop_all()
        self.spin_all(speed)

    def commit_picks(self) -> dict[str, Item]:
        """Snapshot the centered item of every reel.

        Call after lock_all() so every value is settled.
        """
        unsettled = [k for k, s in self._selectors.items() if s.state.is_animating]
        if unsettled:
            logger.warning(f"Committing picks while reels are moving: {unsettled}")
        return {key: s.current_value for key, s in self._selectors.items()}
