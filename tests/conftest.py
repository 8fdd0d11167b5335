"""Shared fixtures for reel and loader tests."""

import pytest

from brainstormer.config import Settings
from brainstormer.reel.models import Catalog
from brainstormer.reel.scheduler import ManualFrameScheduler
from brainstormer.reel.selector import Selector


@pytest.fixture
def scheduler():
    """Deterministic frame scheduler at 60 fps, starting at t=0."""
    return ManualFrameScheduler()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def letters():
    """Five-item catalog; with 40px items the centers are 20, 60, 100, 140, 180."""
    return Catalog.of(["A", "B", "C", "D", "E"], category="letters")


@pytest.fixture
def make_selector(scheduler, settings):
    """Factory for selectors on the shared manual scheduler."""

    def factory(catalog, initial_index=0, **kwargs):
        kwargs.setdefault("settings", settings)
        return Selector(
            catalog,
            scheduler,
            category=catalog.category,
            initial_index=initial_index,
            **kwargs,
        )

    return factory


@pytest.fixture
def run_frames(scheduler):
    """Tick the manual scheduler ``count`` times."""

    def run(count):
        for _ in range(count):
            scheduler.tick()

    return run
