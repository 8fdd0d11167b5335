"""Alphabetical directory of a catalog, for browsing outside the reels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from brainstormer.reel.models import Item

# Bucket name -> inclusive initial-letter range
BUCKETS = {
    "A–E": ("A", "E"),
    "F–J": ("F", "J"),
    "K–O": ("K", "O"),
    "P–T": ("P", "T"),
    "U–Z": ("U", "Z"),
}
ALL_BUCKET = "ALL"


def bucket_for(label: str) -> str | None:
    """Letter bucket for a label, or None if it does not start with A-Z."""
    initial = label.strip()[:1].upper()
    for name, (low, high) in BUCKETS.items():
        if low <= initial <= high:
            return name
    return None


def bucket_by_initial(items: Iterable[Item]) -> dict[str, list[Item]]:
    """Group items by first letter; every item is also in ALL.

    Each bucket is sorted by label, ignoring case.
    """
    buckets: dict[str, list[Item]] = {name: [] for name in BUCKETS}
    buckets[ALL_BUCKET] = []
    for item in items:
        name = bucket_for(item.label)
        if name is not None:
            buckets[name].append(item)
        buckets[ALL_BUCKET].append(item)
    for entries in buckets.values():
        entries.sort(key=lambda item: item.label.casefold())
    return buckets


def resolve_bucket(name: str) -> str:
    """Accept "A-E" or "a–e" style names as well as the canonical ones."""
    wanted = name.strip().upper().replace("-", "–")
    if wanted == ALL_BUCKET or wanted in BUCKETS:
        return wanted
    raise ValueError(f"Unknown bucket '{name}'. Must be one of: {[*BUCKETS, ALL_BUCKET]}")


@dataclass
class Page:
    """One page of a bucket."""

    bucket: str
    page: int  # zero-based
    total_pages: int
    items: list[Item]

    @property
    def label(self) -> str:
        return f"{self.bucket} — Page {self.page + 1} / {self.total_pages}"


def paginate(entries: list[Item], page: int, size: int, bucket: str = ALL_BUCKET) -> Page:
    """Slice ``entries`` into a page, clamping ``page`` into range."""
    if size < 1:
        raise ValueError(f"page size must be >= 1, got {size}")
    total = max(1, math.ceil(len(entries) / size))
    page = min(max(page, 0), total - 1)
    start = page * size
    return Page(bucket=bucket, page=page, total_pages=total, items=entries[start : start + size])
