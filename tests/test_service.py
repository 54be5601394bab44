"""Tests for ReadingListService: cache loading, refreshes and failure handling."""

import asyncio

import pytest

from upnext_cli.api.client import FetchOutcome, ReadingListClient
from upnext_cli.core.service import ReadingListService
from upnext_cli.models.entries import (
    OutdatedEntry,
    deserialize_entries,
    parse_raw_entries,
    serialize_entries,
)
from upnext_cli.storage.cache import CacheStore

from .conftest import make_item

pytestmark = pytest.mark.unit


PREVIOUS = [
    OutdatedEntry(
        title="Previously Cached",
        image_url="",
        color="#77DD77",
        chapters_read=1,
        total_chapters=4,
        chapters_left=3,
    )
]


class StubClient:
    """Returns queued outcomes; can hold a fetch open until released."""

    def __init__(self, *outcomes: FetchOutcome):
        self.outcomes = list(outcomes)
        self.calls = 0
        self.release: asyncio.Event | None = None

    async def fetch(self) -> FetchOutcome:
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        return self.outcomes.pop(0)


def ok(*items) -> FetchOutcome:
    return FetchOutcome(entries=parse_raw_entries(list(items)))


@pytest.fixture
def cache(tmp_path):
    return CacheStore(tmp_path, "readingListCache")


class TestLoadCache:
    """Tests for load_cache."""

    def test_empty_cache_leaves_state(self, cache):
        service = ReadingListService(StubClient(), cache)
        assert service.load_cache() == []
        assert service.loading is True

    def test_loads_cached_list(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        service = ReadingListService(StubClient(), cache)

        assert service.load_cache() == PREVIOUS
        assert service.entries == PREVIOUS
        assert service.loading is False

    def test_malformed_cache_treated_as_empty(self, cache):
        cache.save('[{"title": "incomplete"}]')
        service = ReadingListService(StubClient(), cache)

        assert service.load_cache() == []
        assert cache.load() is None


class TestRefresh:
    """Tests for refresh."""

    @pytest.mark.asyncio
    async def test_success_replaces_and_persists(self, cache):
        client = StubClient(
            ok(
                make_item(english="B", progress=1, inferred=5),
                make_item(english="A", progress=4, inferred=5),
            )
        )
        service = ReadingListService(client, cache)

        result = await service.refresh()

        assert [e.title for e in result] == ["A", "B"]
        assert service.entries == result
        assert service.loading is False
        assert service.last_error is None
        assert deserialize_entries(cache.load()) == result

    @pytest.mark.asyncio
    async def test_success_replaces_wholesale(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        service = ReadingListService(
            StubClient(ok(make_item(english="New", progress=0, inferred=2))), cache
        )
        service.load_cache()

        result = await service.refresh()

        assert [e.title for e in result] == ["New"]
        assert [e.title for e in deserialize_entries(cache.load())] == ["New"]

    @pytest.mark.asyncio
    async def test_empty_result_is_cached(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        service = ReadingListService(StubClient(ok()), cache)
        service.load_cache()

        assert await service.refresh() == []
        assert cache.load() == "[]"

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_list(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        service = ReadingListService(
            StubClient(FetchOutcome.failure("HTTP 500", status=500)), cache
        )
        service.load_cache()

        result = await service.refresh()

        assert result == PREVIOUS
        assert service.loading is False
        assert service.last_error.status == 500
        assert deserialize_entries(cache.load()) == PREVIOUS

    @pytest.mark.asyncio
    async def test_forced_refresh_failure_leaves_empty(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        service = ReadingListService(
            StubClient(FetchOutcome.failure("HTTP 500", status=500)), cache
        )
        service.load_cache()

        result = await service.refresh(force_clear=True)

        assert result == []
        assert service.entries == []
        assert cache.load() is None
        assert not cache.exists
        assert service.loading is False

    @pytest.mark.asyncio
    async def test_forced_refresh_success(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        service = ReadingListService(
            StubClient(ok(make_item(english="Fresh", progress=0, inferred=1))), cache
        )
        service.load_cache()

        result = await service.refresh(force_clear=True)

        assert [e.title for e in result] == ["Fresh"]
        assert cache.exists

    @pytest.mark.asyncio
    async def test_loading_flag_during_refresh(self, cache):
        client = StubClient(ok())
        client.release = asyncio.Event()
        service = ReadingListService(client, cache)
        service.loading = False

        task = asyncio.create_task(service.refresh())
        while client.calls == 0:
            await asyncio.sleep(0)
        assert service.loading is True

        client.release.set()
        await task
        assert service.loading is False

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_share_one_fetch(self, cache):
        client = StubClient(ok(make_item(english="Once", progress=0, inferred=3)))
        client.release = asyncio.Event()
        service = ReadingListService(client, cache)

        first = asyncio.create_task(service.refresh())
        second = asyncio.create_task(service.refresh())
        await asyncio.sleep(0)
        client.release.set()

        first_result, second_result = await asyncio.gather(first, second)
        assert client.calls == 1
        assert first_result == second_result
        assert [e.title for e in first_result] == ["Once"]

    @pytest.mark.asyncio
    async def test_forced_refresh_during_running_refresh_still_clears(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        client = StubClient(
            FetchOutcome.failure("HTTP 500", status=500),
            FetchOutcome.failure("HTTP 500", status=500),
        )
        client.release = asyncio.Event()
        service = ReadingListService(client, cache)
        service.load_cache()

        normal = asyncio.create_task(service.refresh())
        while client.calls == 0:
            await asyncio.sleep(0)
        forced = asyncio.create_task(service.refresh(force_clear=True))
        await asyncio.sleep(0)
        client.release.set()

        normal_result, forced_result = await asyncio.gather(normal, forced)
        assert normal_result == PREVIOUS
        assert forced_result == []
        assert service.entries == []
        assert not cache.exists
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_sequential_refreshes_each_fetch(self, cache):
        client = StubClient(ok(), ok())
        service = ReadingListService(client, cache)

        await service.refresh()
        await service.refresh()
        assert client.calls == 2


class TestInitialize:
    """Tests for the load-if-empty startup sequence."""

    @pytest.mark.asyncio
    async def test_uses_cache_without_fetching(self, cache):
        cache.save(serialize_entries(PREVIOUS))
        client = StubClient()
        service = ReadingListService(client, cache)

        assert await service.initialize() == PREVIOUS
        assert client.calls == 0

    @pytest.mark.asyncio
    async def test_refreshes_when_cache_empty(self, cache):
        client = StubClient(ok(make_item(english="Fetched", progress=0, inferred=1)))
        service = ReadingListService(client, cache)

        result = await service.initialize()

        assert client.calls == 1
        assert [e.title for e in result] == ["Fetched"]


class TestAgainstServer:
    """End-to-end refreshes through the real client and a local API."""

    @pytest.mark.asyncio
    async def test_refresh_then_reload(
        self, reading_list_server, server_config, sample_payload
    ):
        _, state = reading_list_server
        state.body = sample_payload
        cache = CacheStore(server_config.cache_dir, server_config.cache_key)

        async with ReadingListClient(server_config) as client:
            derived = await ReadingListService(client, cache).refresh()

        reloaded = ReadingListService(ReadingListClient(server_config), cache)
        assert reloaded.load_cache() == derived
        assert [e.title for e in derived] == ["Almost There", "Middle", "Far Behind"]

    @pytest.mark.asyncio
    async def test_server_error_keeps_cached_list(self, reading_list_server, server_config):
        _, state = reading_list_server
        state.status = 500
        cache = CacheStore(server_config.cache_dir, server_config.cache_key)
        cache.save(serialize_entries(PREVIOUS))

        async with ReadingListClient(server_config) as client:
            service = ReadingListService(client, cache)
            service.load_cache()
            result = await service.refresh()

        assert result == PREVIOUS
        assert service.loading is False
