"""Circular index arithmetic over a fixed-length sequence.

Pure functions only; no I/O and no mutable state. Positions used by
nearest_index are measured along the scroll axis in the same unit as the
item extents, with item 0 starting at position 0.
"""

from __future__ import annotations

from typing import Sequence


def sign(value: float) -> int:
    """Return +1, -1 or 0."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


class CircularIndex:
    """Index arithmetic for a circular list of ``length`` items."""

    def __init__(self, length: int):
        if length < 1:
            raise ValueError(f"length must be >= 1, got {length}")
        self.length = length

    def wrap(self, index: int) -> int:
        """Map any integer onto [0, length)."""
        return ((index % self.length) + self.length) % self.length

    def window(self, center: int, size: int = 3) -> list[int]:
        """Return ``size`` indices centered on ``center``.

        Example: length 5, center 0, size 3 -> [4, 0, 1]
        """
        if size < 1 or size % 2 == 0:
            raise ValueError(f"window size must be a positive odd number, got {size}")
        half = size // 2
        return [self.wrap(i) for i in range(center - half, center + half + 1)]

    def step(self, center: int, direction: float) -> int:
        """Move one item in the direction's sign; zero does not move."""
        return self.wrap(center + sign(direction))

    def nearest_index(self, position: float, extents: Sequence[float]) -> int:
        """Index whose center is circularly closest to ``position``."""
        centers = item_centers(extents)
        total = sum(extents)
        wrapped = position % total
        best_index = 0
        best_distance = float("inf")
        for index, center in enumerate(centers):
            distance = abs(circular_offset(wrapped, center, total))
            if distance < best_distance:
                best_index = index
                best_distance = distance
        return best_index


def item_centers(extents: Sequence[float]) -> list[float]:
    """Center coordinate of each item along the scroll axis."""
    if not extents:
        raise ValueError("extents must not be empty")
    centers = []
    start = 0.0
    for extent in extents:
        if extent <= 0:
            raise ValueError(f"item extents must be positive, got {extent}")
        centers.append(start + extent / 2)
        start += extent
    return centers


def circular_offset(origin: float, target: float, total: float) -> float:
    """Signed shortest displacement from ``origin`` to ``target`` on a loop."""
    offset = (target - origin) % total
    if offset > total / 2:
        offset -= total
    return offset
