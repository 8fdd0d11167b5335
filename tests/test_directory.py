"""Tests for the alphabetical directory view."""

import pytest

from brainstormer.directory import (
    ALL_BUCKET,
    bucket_by_initial,
    bucket_for,
    paginate,
    resolve_bucket,
)
from brainstormer.reel.models import Item


@pytest.fixture
def items():
    labels = ["Zombies", "area control", "Bidding", "Farming", "2-player duel", "Puzzle"]
    return [Item(label) for label in labels]


class TestBuckets:
    def test_bucket_for(self):
        assert bucket_for("apple") == "A–E"
        assert bucket_for("Kites") == "K–O"
        assert bucket_for("  zebra") == "U–Z"
        assert bucket_for("42") is None

    def test_grouping(self, items):
        buckets = bucket_by_initial(items)
        assert [i.label for i in buckets["A–E"]] == ["area control", "Bidding"]
        assert [i.label for i in buckets["U–Z"]] == ["Zombies"]
        assert len(buckets[ALL_BUCKET]) == len(items)
        assert "2-player duel" not in [i.label for i in buckets["A–E"]]

    @pytest.mark.parametrize("name", ["A-E", "a-e", "A–E", " a–e "])
    def test_resolve_bucket_aliases(self, name):
        assert resolve_bucket(name) == "A–E"

    def test_resolve_all(self):
        assert resolve_bucket("all") == ALL_BUCKET

    def test_unknown_bucket(self):
        with pytest.raises(ValueError):
            resolve_bucket("A-Z")


class TestPaginate:
    def test_pages(self, items):
        page = paginate(items, 1, 4, bucket=ALL_BUCKET)
        assert page.total_pages == 2
        assert len(page.items) == 2
        assert page.label == "ALL — Page 2 / 2"

    def test_page_is_clamped(self, items):
        assert paginate(items, 9, 4).page == 1
        assert paginate(items, -3, 4).page == 0

    def test_empty_bucket_has_one_page(self):
        page = paginate([], 0, 10)
        assert page.total_pages == 1
        assert page.items == []

    def test_size_must_be_positive(self, items):
        with pytest.raises(ValueError):
            paginate(items, 0, 0)
