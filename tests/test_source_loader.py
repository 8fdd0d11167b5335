"""Tests for the resilient multi-mirror catalog loader."""

import asyncio
import json

import httpx
import pytest

from brainstormer.errors import EmptyCatalog, SourceExhausted
from brainstormer.reel.models import Catalog, Item
from brainstormer.sources.categories import CategoryDescriptor
from brainstormer.sources.loader import FallbackPolicy, LoadHealth, SourceLoader

PINNED = "https://raw.example.com/pinned/themes.json"
BRANCH = "https://raw.example.com/main/themes.json"


def descriptor(key="theme", sources=(PINNED, BRANCH), payload_key="themes"):
    return CategoryDescriptor(
        key=key, title=key.title(), source_files=tuple(sources), payload_key=payload_key
    )


def routes(table, calls=None):
    """MockTransport serving a URL -> response table; unknown URLs are 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        route = table.get(url)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(route, Exception):
            raise route
        return route

    return httpx.MockTransport(handler)


def json_response(payload):
    return httpx.Response(200, text=json.dumps(payload))


def make_loader(transport, **kwargs):
    return SourceLoader(httpx.AsyncClient(transport=transport), **kwargs)


class TestCandidateOrder:
    """Candidates are tried strictly in order; the first valid one wins."""

    @pytest.mark.asyncio
    async def test_first_valid_candidate_wins(self):
        calls = []
        transport = routes(
            {
                PINNED: json_response({"themes": [{"name": "Pirates"}]}),
                BRANCH: json_response({"themes": [{"name": "Never used"}]}),
            },
            calls,
        )
        async with make_loader(transport) as loader:
            catalog, report = await loader.load_with_report(descriptor())

        assert catalog.labels == ["Pirates"]
        assert calls == [PINNED]
        assert report.source == PINNED
        assert report.health == LoadHealth.OK

    @pytest.mark.asyncio
    async def test_404_falls_through_to_next(self):
        transport = routes({BRANCH: json_response(["Space", "Farm"])})
        async with make_loader(transport) as loader:
            catalog, report = await loader.load_with_report(descriptor())

        assert catalog.labels == ["Space", "Farm"]
        assert catalog.category == "theme"
        assert [(a.ok, a.error) for a in report.attempts] == [
            (False, "HTTP 404"),
            (True, None),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response, reason",
        [
            (httpx.Response(200, text="<!doctype html><p>rate limited</p>"), "HTML body, not JSON"),
            (httpx.Response(200, text="{not json"), "invalid JSON"),
            (httpx.Response(200, text='{"mechanics": ["a"]}'), "no entry list in payload"),
            (httpx.Response(200, text='{"themes": []}'), "empty entry list"),
            (httpx.Response(500, text="oops"), "HTTP 500"),
        ],
    )
    async def test_bad_candidate_is_skipped(self, response, reason):
        transport = routes({PINNED: response, BRANCH: json_response(["Space"])})
        async with make_loader(transport) as loader:
            catalog, report = await loader.load_with_report(descriptor())

        assert catalog.labels == ["Space"]
        assert report.attempts[0].error.startswith(reason)
        assert report.source == BRANCH

    @pytest.mark.asyncio
    async def test_transport_error_is_skipped(self):
        transport = routes(
            {PINNED: httpx.ConnectError("refused"), BRANCH: json_response(["Space"])}
        )
        async with make_loader(transport) as loader:
            _, report = await loader.load_with_report(descriptor())
        assert report.attempts[0].error == "transport error (ConnectError)"

    @pytest.mark.asyncio
    async def test_slow_candidate_times_out(self):
        async def handler(request):
            if str(request.url) == PINNED:
                await asyncio.sleep(5)
            return json_response(["Space"])

        async with make_loader(httpx.MockTransport(handler), timeout=0.05) as loader:
            catalog, report = await loader.load_with_report(descriptor())

        assert catalog.labels == ["Space"]
        assert report.attempts[0].error == "timed out after 0.05s"


class TestExhaustion:
    """What happens once every candidate failed."""

    @pytest.mark.asyncio
    async def test_raise_policy(self):
        async with make_loader(routes({}), policy=FallbackPolicy.RAISE) as loader:
            with pytest.raises(SourceExhausted) as exc_info:
                await loader.load(descriptor())

        assert exc_info.value.category == "theme"
        assert "HTTP 404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_default_policy_uses_fallback(self):
        fallback = Catalog.of(["Offline theme"])
        async with make_loader(
            routes({}), policy=FallbackPolicy.DEFAULT, fallbacks={"theme": fallback}
        ) as loader:
            catalog, report = await loader.load_with_report(descriptor())

        assert catalog.labels == ["Offline theme"]
        assert catalog.category == "theme"
        assert report.used_fallback
        assert report.health == LoadHealth.DEGRADED

    @pytest.mark.asyncio
    async def test_embedded_defaults(self):
        async with make_loader(routes({}), policy=FallbackPolicy.DEFAULT) as loader:
            catalog = await loader.load(descriptor())
        assert len(catalog) > 0

    @pytest.mark.asyncio
    async def test_default_policy_without_fallback_still_raises(self):
        async with make_loader(routes({}), policy=FallbackPolicy.DEFAULT) as loader:
            with pytest.raises(SourceExhausted):
                await loader.load(descriptor(key="colour"))

    @pytest.mark.asyncio
    async def test_allowed_empty_list_is_empty_catalog(self):
        transport = routes({PINNED: json_response([])})
        async with make_loader(transport, allow_empty=True) as loader:
            with pytest.raises(EmptyCatalog):
                await loader.load(descriptor(sources=(PINNED,)))


class TestLoadAll:
    """Joint load of independent categories."""

    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_others(self):
        mech = "https://raw.example.com/main/mechanics.json"
        transport = routes({mech: json_response({"mechanics": ["Drafting"]})})
        descriptors = [
            descriptor(),
            descriptor("mechanic_1", (mech,), "mechanics"),
        ]
        async with make_loader(transport, policy=FallbackPolicy.RAISE) as loader:
            result = await loader.load_all(descriptors)

        assert list(result.reports) == ["theme", "mechanic_1"]
        assert list(result.catalogs) == ["mechanic_1"]
        assert result.health == LoadHealth.FAILED
        assert result.failures == ["theme"]
        assert result.status_line() == "Data fetch failed for: theme"

    @pytest.mark.asyncio
    async def test_shared_file_is_fetched_once(self):
        mech = "https://raw.example.com/main/mechanics.json"
        calls = []
        transport = routes({mech: json_response({"mechanics": ["Drafting", "Bidding"]})}, calls)
        descriptors = [
            descriptor("mechanic_1", (mech,), "mechanics"),
            descriptor("mechanic_2", (mech,), "mechanics"),
        ]
        async with make_loader(transport) as loader:
            result = await loader.load_all(descriptors)

        assert calls == [mech]
        assert result.catalogs["mechanic_1"].labels == result.catalogs["mechanic_2"].labels
        assert result.catalogs["mechanic_2"].category == "mechanic_2"
        assert result.status_line() == "Loaded 2 mechanic_1, 2 mechanic_2"

    @pytest.mark.asyncio
    async def test_iter_loaded_yields_fast_categories_first(self):
        slow = "https://raw.example.com/slow.json"
        fast = "https://raw.example.com/fast.json"

        async def handler(request):
            if str(request.url) == slow:
                await asyncio.sleep(0.1)
            return json_response(["x"])

        descriptors = [descriptor("slow", (slow,)), descriptor("fast", (fast,))]
        async with make_loader(httpx.MockTransport(handler)) as loader:
            keys = [key async for key, _, _ in loader.iter_loaded(descriptors)]

        assert keys == ["fast", "slow"]

    @pytest.mark.asyncio
    async def test_report_serializes(self):
        transport = routes({BRANCH: json_response(["Space"])})
        async with make_loader(transport) as loader:
            result = await loader.load_all([descriptor()])

        data = result.reports["theme"].to_dict()
        assert data["health"] == "ok"
        assert data["attempts"][0] == {"location": PINNED, "ok": False, "error": "HTTP 404"}


class TestLocalSources:
    """Plain paths and file:// URLs are read from disk."""

    @pytest.mark.asyncio
    async def test_plain_path(self, tmp_path):
        path = tmp_path / "themes.json"
        path.write_text(json.dumps({"items": [{"label": "Local", "desc": ["A", "B"]}]}))
        async with SourceLoader() as loader:
            catalog = await loader.load(descriptor(sources=(str(path),)))
        assert catalog[0] == Item("Local", "A B")

    @pytest.mark.asyncio
    async def test_file_url_after_missing_file(self, tmp_path):
        path = tmp_path / "themes.json"
        path.write_text('["From file URL"]')
        sources = (str(tmp_path / "missing.json"), path.as_uri())
        async with SourceLoader() as loader:
            catalog, report = await loader.load_with_report(descriptor(sources=sources))
        assert catalog.labels == ["From file URL"]
        assert report.attempts[0].error == "read failed (FileNotFoundError)"

    @pytest.mark.asyncio
    async def test_unsupported_scheme(self):
        async with SourceLoader() as loader:
            with pytest.raises(SourceExhausted) as exc_info:
                await loader.load(descriptor(sources=("ftp://example.com/themes.json",)))
        assert "unsupported scheme 'ftp'" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unreadable_path_does_not_break_load_all(self, tmp_path):
        """A path the OS rejects outright only fails its own category."""
        good = tmp_path / "mechanics.json"
        good.write_text('["Drafting"]')
        descriptors = [
            descriptor(sources=("x\x00y.json",)),
            descriptor("mechanic_1", (str(good),), "mechanics"),
        ]
        async with SourceLoader() as loader:
            result = await loader.load_all(descriptors)

        assert result.failures == ["theme"]
        assert result.catalogs["mechanic_1"].labels == ["Drafting"]
        attempt = result.reports["theme"].attempts[0]
        assert attempt.error == "read failed (ValueError)"
