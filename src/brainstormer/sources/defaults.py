"""Embedded fallback catalogs.

Used by the loader under FallbackPolicy.DEFAULT when every candidate
source for a category failed. Kept short on purpose: enough for the
reels to be usable offline, not a replacement for the full catalogs.
"""

from __future__ import annotations

from brainstormer.reel.models import Catalog, Item
from brainstormer.sources.normalize import normalize_entries

DEFAULT_THEMES = [
    {"name": "Deep Sea Salvage", "desc": "Recover wrecks before the pressure wins."},
    {"name": "Clockwork City", "desc": "Keep the gears of a mechanical metropolis turning."},
    {"name": "Desert Caravans", "desc": "Trade across shifting dunes."},
    {"name": "Haunted Library", "desc": "Catalog books that do not want to be read."},
    {"name": "Lunar Colony", "desc": "Grow a settlement on scarce oxygen."},
    {"name": "Mycelium Network", "desc": "Spread underground and share nutrients."},
    {"name": "Night Market", "desc": "Run a stall where the stock changes at midnight."},
    {"name": "Sky Pirates", "desc": "Raid airships between floating islands."},
]

DEFAULT_MECHANICS = [
    {"name": "Area Control", "desc": "Hold regions of the board to score."},
    {"name": "Deck Building", "desc": "Improve a personal deck over the game."},
    {"name": "Dice Drafting", "desc": "Pick dice from a shared roll."},
    {"name": "Hidden Roles", "desc": "Some players secretly work for another side."},
    {"name": "Push Your Luck", "desc": "Keep going for more, or bank what you have."},
    {"name": "Set Collection", "desc": "Gather matching groups of components."},
    {"name": "Tile Placement", "desc": "Lay tiles to build a shared map."},
    {"name": "Worker Placement", "desc": "Send workers to claim limited actions."},
]

DEFAULT_CATALOGS: dict[str, list[dict]] = {
    "theme": DEFAULT_THEMES,
    "mechanic_1": DEFAULT_MECHANICS,
    "mechanic_2": DEFAULT_MECHANICS,
}

PLACEHOLDER_ITEM = Item(label="(unavailable)")


def default_catalog(category: str) -> Catalog | None:
    """Embedded catalog for ``category``, or None if there is none."""
    entries = DEFAULT_CATALOGS.get(category)
    if not entries:
        return None
    return Catalog(items=tuple(normalize_entries(entries)), category=category)


def placeholder_catalog(category: str) -> Catalog:
    """Single-item catalog for a reel that must exist but has no data."""
    return Catalog(items=(PLACEHOLDER_ITEM,), category=category)
