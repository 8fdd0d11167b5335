"""Data model for reels: items, catalogs, phases and emitted events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

from pydantic import BaseModel, Field

from brainstormer.errors import EmptyCatalog


@dataclass(frozen=True)
class Item:
    """A selectable catalog entry.

    Identity is positional: two items with the same label are still
    distinct entries when they sit at different catalog indices.
    """

    label: str
    description: str | None = None
    url: str | None = None

    def to_dict(self) -> dict:
        """Serialize for output, omitting empty optional fields."""
        data = {"label": self.label}
        if self.description:
            data["description"] = self.description
        if self.url:
            data["url"] = self.url
        return data


@dataclass(frozen=True)
class Catalog:
    """Ordered, read-only sequence of items for one category.

    Raises:
        EmptyCatalog: If constructed with no items
    """

    items: tuple[Item, ...]
    category: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise EmptyCatalog(self.category)

    @classmethod
    def of(cls, entries: Iterable[Item | str], category: str | None = None) -> "Catalog":
        """Build a catalog from items or bare labels."""
        items = tuple(e if isinstance(e, Item) else Item(label=str(e)) for e in entries)
        return cls(items=items, category=category)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Item:
        return self.items[index]

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    @property
    def labels(self) -> list[str]:
        return [item.label for item in self.items]


class Phase(str, Enum):
    """Motion state machine phases."""

    IDLE = "idle"
    DRAGGING = "dragging"
    FLINGING = "flinging"
    SNAPPING = "snapping"
    AUTO_SPINNING = "auto_spinning"


@dataclass
class SelectorState:
    """Mutable per-reel state, owned by exactly one Selector."""

    catalog: Catalog
    center_index: int = 0
    position: float = 0.0
    velocity: float = 0.0
    phase: Phase = Phase.IDLE
    locked: bool = False
    extents: list[float] = field(default_factory=list)

    @property
    def total_extent(self) -> float:
        return sum(self.extents)

    @property
    def is_animating(self) -> bool:
        return self.phase in (Phase.FLINGING, Phase.SNAPPING, Phase.AUTO_SPINNING)


# --- Events ---


class SelectionChanged(BaseModel):
    """Emitted when a reel settles on (or steps to) a new item."""

    category: Optional[str] = Field(None, description="Category key of the reel")
    index: int = Field(..., ge=0, description="Catalog index of the centered item")
    label: str
    description: Optional[str] = None
    url: Optional[str] = None
    cause: str = Field(..., description="step, spin, snap or lock")

    @classmethod
    def for_item(
        cls, category: str | None, index: int, item: Item, cause: str
    ) -> "SelectionChanged":
        return cls(
            category=category,
            index=index,
            label=item.label,
            description=item.description,
            url=item.url,
            cause=cause,
        )


class WindowRendered(BaseModel):
    """Visible window handed to the render callback on every index change."""

    category: Optional[str] = None
    center_index: int = Field(..., ge=0)
    indices: list[int]
    labels: list[str]
