"""Tests for the Ensemble controller."""

import random

import pytest

from brainstormer.reel.ensemble import Ensemble
from brainstormer.reel.models import Catalog, Item, Phase
from brainstormer.sources.categories import CategoryDescriptor
from brainstormer.sources.defaults import PLACEHOLDER_ITEM
from brainstormer.sources.loader import LoadReport, LoadResult


@pytest.fixture
def ensemble(make_selector):
    reels = Ensemble()
    reels.add("theme", make_selector(Catalog.of(["Pirates", "Space", "Farm"], "theme")))
    reels.add("mechanic_1", make_selector(Catalog.of(["Drafting", "Bidding"], "mechanic_1")))
    reels.add(
        "mechanic_2",
        make_selector(Catalog.of(["Tiles", "Dice", "Cards", "Auction"], "mechanic_2")),
    )
    return reels


def descriptor(key):
    return CategoryDescriptor(key=key, title=key.title(), source_files=(f"{key}.json",))


class TestEnsembleBasics:
    """Keyed access and batch operations."""

    def test_keys_keep_insertion_order(self, ensemble):
        assert ensemble.keys == ["theme", "mechanic_1", "mechanic_2"]
        assert "theme" in ensemble
        assert len(ensemble) == 3

    def test_duplicate_key_rejected(self, ensemble, make_selector, letters):
        with pytest.raises(ValueError):
            ensemble.add("theme", make_selector(letters))

    def test_spin_and_stop_all(self, ensemble, run_frames):
        ensemble.spin_all(1.0)
        assert all(ensemble[k].phase == Phase.AUTO_SPINNING for k in ensemble)
        run_frames(10)
        ensemble.stop_all()
        assert all(ensemble[k].phase == Phase.IDLE for k in ensemble)

    def test_lock_all_blocks_spin(self, ensemble):
        ensemble.lock_all()
        ensemble.spin_all()
        assert all(ensemble[k].phase == Phase.IDLE for k in ensemble)

    def test_reroll_unlocks_and_spins(self, ensemble):
        ensemble.lock_all()
        ensemble.reroll(2.0)
        assert all(not ensemble[k].locked for k in ensemble)
        assert all(ensemble[k].phase == Phase.AUTO_SPINNING for k in ensemble)


class TestCommitPicks:
    """The Pick-set is one centered item per reel."""

    def test_commit_after_lock(self, ensemble, run_frames):
        ensemble.spin_all()
        run_frames(13)  # two steps each
        ensemble.stop_all()
        ensemble.lock_all()
        picks = ensemble.commit_picks()
        assert picks == {
            "theme": Item("Farm"),
            "mechanic_1": Item("Drafting"),
            "mechanic_2": Item("Cards"),
        }

    def test_commit_while_moving_still_returns_values(self, ensemble, caplog):
        ensemble.spin_all()
        picks = ensemble.commit_picks()
        assert set(picks) == {"theme", "mechanic_1", "mechanic_2"}
        assert "moving" in caplog.text


class TestFromLoadResult:
    """Building reels from a joint load."""

    def make_result(self):
        result = LoadResult()
        result.catalogs["theme"] = Catalog.of(["Pirates"], "theme")
        result.reports["theme"] = LoadReport(category="theme", source="theme.json")
        result.reports["mechanic_1"] = LoadReport(
            category="mechanic_1", error="[mechanic_1] All sources failed"
        )
        return result

    def test_missing_catalog_is_skipped(self, scheduler):
        ensemble = Ensemble.from_load_result(
            self.make_result(),
            [descriptor("theme"), descriptor("mechanic_1")],
            scheduler,
            rng=random.Random(0),
        )
        assert ensemble.keys == ["theme"]
        assert ensemble["theme"].category == "theme"

    def test_placeholder_reel_stays_locked(self, scheduler):
        ensemble = Ensemble.from_load_result(
            self.make_result(),
            [descriptor("theme"), descriptor("mechanic_1")],
            scheduler,
            placeholders=True,
        )
        assert ensemble.keys == ["theme", "mechanic_1", "mechanic_2"]
        assert ensemble["mechanic_1"].locked
        assert ensemble["mechanic_1"].current_value == PLACEHOLDER_ITEM

        ensemble.reroll()
        assert ensemble["mechanic_1"].locked
        assert ensemble["mechanic_1"].phase == Phase.IDLE
        assert ensemble["theme"].phase == Phase.AUTO_SPINNING
