"""Error taxonomy for catalog loading and reel construction.

SourceUnavailable is recovered inside the loader (next candidate).
SourceExhausted and EmptyCatalog are surfaced to the caller.
Stopping or locking a reel is not an error and raises nothing.
"""

from __future__ import annotations


class BrainstormerError(Exception):
    """Base class for all Brainstormer errors."""

    pass


class SourceUnavailable(BrainstormerError):
    """Raised when a single candidate source yields no usable catalog."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"{location}: {reason}")


class SourceExhausted(BrainstormerError):
    """Raised when every candidate source for a category failed."""

    def __init__(self, category: str, last_error: BaseException | None = None):
        self.category = category
        self.last_error = last_error
        detail = str(last_error) if last_error else "no candidate sources"
        super().__init__(f"[{category}] All sources failed (last error: {detail})")


class EmptyCatalog(BrainstormerError):
    """Raised when a catalog would hold zero items."""

    def __init__(self, category: str | None = None):
        self.category = category
        message = "Catalog must contain at least one item"
        super().__init__(f"[{category}] {message}" if category else message)
