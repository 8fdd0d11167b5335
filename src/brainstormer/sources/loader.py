"""Resilient multi-mirror catalog loader.

For each category the loader tries the descriptor's candidate sources
strictly in order and keeps the first one that yields a valid entry list.
A candidate is rejected (SourceUnavailable, recorded, next one tried) when:
- the transport fails or exceeds the per-candidate timeout
- the HTTP status is not 2xx
- the body looks like HTML (leading '<') or is not JSON
- the JSON holds no entry list, or the list is empty (unless allowed)

There are no retries beyond the candidate list. When every candidate
failed, the fallback policy decides between raising SourceExhausted and
returning the embedded default catalog.

Categories are independent: load_all() never raises for one category,
and iter_loaded() yields each category as soon as it is ready.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, Mapping
from urllib.parse import unquote, urlparse

import httpx

from brainstormer.config import Settings
from brainstormer.errors import EmptyCatalog, SourceExhausted, SourceUnavailable
from brainstormer.reel.models import Catalog, Item
from brainstormer.sources.categories import CategoryDescriptor
from brainstormer.sources.defaults import default_catalog
from brainstormer.sources.normalize import extract_entries, normalize_entries

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 4.0


class FallbackPolicy(str, Enum):
    """What to do when every candidate for a category failed."""

    RAISE = "raise"
    DEFAULT = "default"


class LoadHealth(str, Enum):
    """Per-category and aggregate load status, best to worst."""

    OK = "ok"
    DEGRADED = "degraded"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        return [LoadHealth.OK, LoadHealth.DEGRADED, LoadHealth.FAILED].index(self)


@dataclass
class Attempt:
    """One candidate tried for a category."""

    location: str
    ok: bool
    error: str | None = None


@dataclass
class LoadReport:
    """Receipt for loading one category: what was tried and what was used."""

    category: str
    attempts: list[Attempt] = field(default_factory=list)
    source: str | None = None
    item_count: int = 0
    used_fallback: bool = False
    error: str | None = None

    @property
    def health(self) -> LoadHealth:
        if self.error is not None:
            return LoadHealth.FAILED
        if self.used_fallback:
            return LoadHealth.DEGRADED
        return LoadHealth.OK

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "health": self.health.value,
            "source": self.source,
            "item_count": self.item_count,
            "used_fallback": self.used_fallback,
            "error": self.error,
            "attempts": [
                {"location": a.location, "ok": a.ok, "error": a.error}
                for a in self.attempts
            ],
        }


@dataclass
class LoadResult:
    """Outcome of a joint load: catalogs that loaded plus every report."""

    catalogs: dict[str, Catalog] = field(default_factory=dict)
    reports: dict[str, LoadReport] = field(default_factory=dict)

    @property
    def health(self) -> LoadHealth:
        """Worst health across categories (OK when nothing was loaded)."""
        worst = LoadHealth.OK
        for report in self.reports.values():
            if report.health.rank > worst.rank:
                worst = report.health
        return worst

    @property
    def failures(self) -> list[str]:
        return [k for k, r in self.reports.items() if r.health == LoadHealth.FAILED]

    def status_line(self) -> str:
        """Short human summary for a status indicator."""
        counts = ", ".join(
            f"{len(catalog)} {key}" for key, catalog in self.catalogs.items()
        )
        if self.health == LoadHealth.FAILED:
            return f"Data fetch failed for: {', '.join(self.failures)}"
        if self.health == LoadHealth.DEGRADED:
            return f"Loaded {counts} (some from built-in defaults)"
        return f"Loaded {counts}"


@dataclass
class _FetchOutcome:
    items: list[Item] | None
    source: str | None
    attempts: list[Attempt]
    last_error: SourceUnavailable | None


class SourceLoader:
    """Fetches catalogs from ordered candidate sources.

    Args:
        client: httpx client for http(s) candidates; one is created (and
            closed by aclose()) if not given
        timeout: Total time budget per candidate, in seconds
        policy: Fallback policy once every candidate failed
        fallbacks: Category key -> fallback catalog. If None, the embedded
            defaults are used
        allow_empty: Accept an empty entry list as a valid response
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        policy: FallbackPolicy = FallbackPolicy.RAISE,
        fallbacks: Mapping[str, Catalog] | None = None,
        allow_empty: bool = False,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), follow_redirects=True
        )
        self.timeout = timeout
        self.policy = FallbackPolicy(policy)
        self._fallbacks = fallbacks
        self.allow_empty = allow_empty

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> "SourceLoader":
        return cls(
            client,
            timeout=settings.fetch_timeout,
            policy=FallbackPolicy(settings.fallback_policy),
            allow_empty=settings.allow_empty_catalogs,
        )

    async def __aenter__(self) -> "SourceLoader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # --- Public API ---

    async def load(self, descriptor: CategoryDescriptor) -> Catalog:
        """Load one category.

        Raises:
            SourceExhausted: Every candidate failed and no fallback applies
            EmptyCatalog: An accepted source held no entries and no
                fallback applies
        """
        catalog, _ = await self.load_with_report(descriptor)
        return catalog

    async def load_with_report(
        self, descriptor: CategoryDescriptor
    ) -> tuple[Catalog, LoadReport]:
        outcome = await self._fetch(descriptor)
        catalog, report, error = self._resolve(descriptor, outcome)
        if error is not None:
            raise error
        return catalog, report

    async def load_all(self, descriptors: list[CategoryDescriptor]) -> LoadResult:
        """Load every category concurrently, aggregating failures."""
        result = LoadResult()
        async for key, catalog, report in self.iter_loaded(descriptors):
            result.reports[key] = report
            if catalog is not None:
                result.catalogs[key] = catalog
        # Keep descriptor order rather than completion order
        order = [d.key for d in descriptors]
        result.reports = {k: result.reports[k] for k in order if k in result.reports}
        result.catalogs = {k: result.catalogs[k] for k in order if k in result.catalogs}
        logger.info(f"Load finished: health={result.health.value}")
        return result

    async def iter_loaded(
        self, descriptors: list[CategoryDescriptor]
    ) -> AsyncIterator[tuple[str, Catalog | None, LoadReport]]:
        """Yield (key, catalog or None, report) as each category finishes.

        Descriptors with identical candidates and payload key share one fetch.
        """
        groups: dict[tuple, list[CategoryDescriptor]] = {}
        for descriptor in descriptors:
            groups.setdefault(descriptor.fetch_key, []).append(descriptor)

        async def run(group: list[CategoryDescriptor]):
            return group, await self._fetch(group[0])

        tasks = [asyncio.ensure_future(run(group)) for group in groups.values()]
        try:
            for next_done in asyncio.as_completed(tasks):
                group, outcome = await next_done
                for descriptor in group:
                    catalog, report, error = self._resolve(descriptor, outcome)
                    if error is not None:
                        logger.error(str(error))
                    yield descriptor.key, catalog, report
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    # --- Internals ---

    async def _fetch(self, descriptor: CategoryDescriptor) -> _FetchOutcome:
        attempts: list[Attempt] = []
        last_error: SourceUnavailable | None = None
        for location in descriptor.source_files:
            try:
                items = await self._try_candidate(location, descriptor.payload_key)
            except SourceUnavailable as e:
                logger.info(f"[{descriptor.key}] Candidate failed: {e}")
                attempts.append(Attempt(location=location, ok=False, error=e.reason))
                last_error = e
                continue
            attempts.append(Attempt(location=location, ok=True))
            logger.debug(f"[{descriptor.key}] Loaded {len(items)} items from {location}")
            return _FetchOutcome(items, location, attempts, last_error)
        return _FetchOutcome(None, None, attempts, last_error)

    def _resolve(
        self, descriptor: CategoryDescriptor, outcome: _FetchOutcome
    ) -> tuple[Catalog | None, LoadReport, Exception | None]:
        key = descriptor.key
        report = LoadReport(
            category=key, attempts=list(outcome.attempts), source=outcome.source
        )

        error: Exception | None = None
        if outcome.items:
            catalog = Catalog(items=tuple(outcome.items), category=key)
            report.item_count = len(catalog)
            return catalog, report, None
        elif outcome.items is not None:
            error = EmptyCatalog(key)
        else:
            error = SourceExhausted(key, outcome.last_error)

        fallback = self._fallback_for(key)
        if fallback is not None:
            logger.warning(f"[{key}] Using fallback catalog: {error}")
            report.used_fallback = True
            report.item_count = len(fallback)
            return replace(fallback, category=key), report, None

        report.error = str(error)
        return None, report, error

    def _fallback_for(self, key: str) -> Catalog | None:
        if self.policy != FallbackPolicy.DEFAULT:
            return None
        if self._fallbacks is not None:
            return self._fallbacks.get(key)
        return default_catalog(key)

    async def _try_candidate(self, location: str, payload_key: str) -> list[Item]:
        try:
            text = await asyncio.wait_for(self._read(location), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise SourceUnavailable(location, f"timed out after {self.timeout}s")

        if text.lstrip().startswith("<"):
            raise SourceUnavailable(location, "HTML body, not JSON")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise SourceUnavailable(location, f"invalid JSON ({e.msg})")

        entries = extract_entries(payload, payload_key)
        if entries is None:
            raise SourceUnavailable(location, "no entry list in payload")
        if not entries and not self.allow_empty:
            raise SourceUnavailable(location, "empty entry list")
        return normalize_entries(entries)

    async def _read(self, location: str) -> str:
        parsed = urlparse(location)
        if parsed.scheme in ("http", "https"):
            try:
                response = await self._client.get(location)
            except httpx.HTTPError as e:
                raise SourceUnavailable(location, f"transport error ({type(e).__name__})")
            if not response.is_success:
                raise SourceUnavailable(location, f"HTTP {response.status_code}")
            return response.text

        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
        elif parsed.scheme == "" or len(parsed.scheme) == 1:  # plain or Windows drive path
            path = Path(location)
        else:
            raise SourceUnavailable(location, f"unsupported scheme '{parsed.scheme}'")

        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise SourceUnavailable(location, f"read failed ({e.__class__.__name__})")
