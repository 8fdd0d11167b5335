"""Catalog sources: category config, loading and normalization.

- categories.py: Load and validate categories.yaml (mirrors + descriptors)
- normalize.py: Coerce raw JSON entries into Items
- loader.py: Ordered-fallback, per-candidate-timeout async loader
- defaults.py: Embedded fallback catalogs
"""

from brainstormer.sources.categories import (
    CategoryConfigError,
    CategoryDescriptor,
    CategoryRegistry,
    MirrorSet,
)
from brainstormer.sources.loader import (
    Attempt,
    FallbackPolicy,
    LoadHealth,
    LoadReport,
    LoadResult,
    SourceLoader,
)
from brainstormer.sources.normalize import extract_entries, normalize_entry

__all__ = [
    "CategoryConfigError",
    "CategoryDescriptor",
    "CategoryRegistry",
    "MirrorSet",
    "Attempt",
    "FallbackPolicy",
    "LoadHealth",
    "LoadReport",
    "LoadResult",
    "SourceLoader",
    "extract_entries",
    "normalize_entry",
]
