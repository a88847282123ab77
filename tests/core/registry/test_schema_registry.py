# tests/core/registry/test_schema_registry.py
from __future__ import annotations

import asyncio
import threading

import pytest

from sports.proxy.contracts.tools import ToolSchema
from sports.proxy.core.registry import InMemorySchemaCache, ToolSchemaRegistry


def _fn(name: str, description: str = "") -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": {}},
        },
    }


class FakeSource:
    def __init__(self, tools=None, *, error: Exception | None = None, delay: float = 0):
        self.tools = tools or []
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch_schema(self):
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.tools)


LOCAL = [ToolSchema(name="resolve_team", description="Resolve a team name")]


def _registry(clock, **kwargs) -> ToolSchemaRegistry:
    return ToolSchemaRegistry(clock=clock, refresh_interval=300, **kwargs)


class TestToolsFor:
    @pytest.mark.asyncio
    async def test_first_read_fetches(self, clock):
        source = FakeSource([_fn("get_team_roster"), _fn("get_standings")])
        registry = _registry(clock)
        registry.add_domain("baseball", source)

        tools = await registry.tools_for("baseball")

        assert [t.name for t in tools] == ["get_team_roster", "get_standings"]
        assert all(t.domain == "baseball" and t.fetched_at is not None for t in tools)
        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_fresh_read_does_not_refetch(self, clock):
        source = FakeSource([_fn("get_standings")])
        registry = _registry(clock)
        registry.add_domain("baseball", source)

        await registry.tools_for("baseball")
        clock.advance(299)
        await registry.tools_for("baseball")

        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_stale_read_refetches(self, clock):
        source = FakeSource([_fn("get_standings")])
        registry = _registry(clock)
        registry.add_domain("baseball", source)

        await registry.tools_for("baseball")
        clock.advance(301)
        await registry.tools_for("baseball")

        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_unknown_domain_is_empty(self, clock):
        assert await _registry(clock).tools_for("cricket") == []

    @pytest.mark.asyncio
    async def test_local_tools_win_name_clashes(self, clock):
        source = FakeSource([_fn("resolve_team", "backend version"), _fn("get_standings")])
        registry = _registry(clock)
        registry.add_domain("baseball", source, local_tools=LOCAL)

        tools = await registry.tools_for("baseball")

        assert [t.name for t in tools] == ["resolve_team", "get_standings"]
        assert tools[0].description == "Resolve a team name"

    @pytest.mark.asyncio
    async def test_invalid_entries_are_skipped(self, clock):
        source = FakeSource([_fn("get_standings"), {"type": "function", "function": {}}])
        registry = _registry(clock)
        registry.add_domain("baseball", source)

        assert [t.name for t in await registry.tools_for("baseball")] == ["get_standings"]

    @pytest.mark.asyncio
    async def test_alias_lookup_through_normalizer(self, clock):
        registry = _registry(clock, normalize=lambda d: {"mlb": "baseball"}.get(d.lower(), d.lower()))
        registry.add_domain("baseball", FakeSource([_fn("get_standings")]))

        assert [t.name for t in await registry.tools_for("MLB")] == ["get_standings"]


class TestFallback:
    @pytest.mark.asyncio
    async def test_durable_copy_served_when_backend_down(self, clock):
        cache = InMemorySchemaCache()
        good = _registry(clock, cache=cache)
        good.add_domain("baseball", FakeSource([_fn("get_standings")]))
        await good.refresh("baseball")

        # a fresh process sharing the durable copy
        restarted = _registry(clock, cache=cache)
        restarted.add_domain("baseball", FakeSource(error=ConnectionError("refused")))
        state = await restarted.refresh("baseball")

        assert state.available
        assert state.stale
        assert state.last_error == "refused"
        assert [t.name for t in state.tools] == ["get_standings"]

    @pytest.mark.asyncio
    async def test_in_memory_copy_when_no_durable(self, clock):
        class ForgetfulCache(InMemorySchemaCache):
            def load(self, domain):
                return None

        source = FakeSource([_fn("get_standings")])
        registry = _registry(clock, cache=ForgetfulCache())
        registry.add_domain("baseball", source)
        await registry.refresh("baseball")

        source.error = RuntimeError("502 Bad Gateway")
        state = await registry.refresh("baseball")

        assert state.stale
        assert [t.name for t in state.tools] == ["get_standings"]

    @pytest.mark.asyncio
    async def test_nothing_known_means_unavailable(self, clock):
        registry = _registry(clock)
        registry.add_domain("hockey", FakeSource(error=RuntimeError("down")), local_tools=LOCAL)

        tools = await registry.tools_for("hockey")
        status = registry.status()["hockey"]

        # local tools still answer
        assert [t.name for t in tools] == ["resolve_team"]
        assert status["available"] is False
        assert status["last_error"] == "down"

    @pytest.mark.asyncio
    async def test_fetch_timeout(self, clock):
        registry = _registry(clock, timeout=0.01)
        registry.add_domain("baseball", FakeSource([_fn("x")], delay=1))

        state = await registry.refresh("baseball")

        assert not state.available
        assert "timed out" in state.last_error

    @pytest.mark.asyncio
    async def test_failed_attempt_is_not_retried_before_interval(self, clock):
        source = FakeSource(error=RuntimeError("down"))
        registry = _registry(clock)
        registry.add_domain("baseball", source)

        await registry.tools_for("baseball")
        await registry.tools_for("baseball")

        assert source.calls == 1


class TestRefresh:
    @pytest.mark.asyncio
    async def test_concurrent_refreshes_share_one_fetch(self, clock):
        source = FakeSource([_fn("get_standings")], delay=0.02)
        registry = _registry(clock)
        registry.add_domain("baseball", source)

        states = await asyncio.gather(*(registry.refresh("baseball") for _ in range(4)))

        assert source.calls == 1
        assert all(s is states[0] for s in states)

    @pytest.mark.asyncio
    async def test_unknown_domain_raises(self, clock):
        with pytest.raises(KeyError):
            await _registry(clock).refresh("cricket")

    @pytest.mark.asyncio
    async def test_domain_without_source_is_available(self, clock):
        registry = _registry(clock)
        registry.add_domain("curling", None, local_tools=LOCAL)

        state = await registry.refresh("curling")

        assert state.available
        assert [t.name for t in registry.cached_tools("curling")] == ["resolve_team"]

    @pytest.mark.asyncio
    async def test_refresh_all_reports_per_domain(self, clock):
        registry = _registry(clock)
        registry.add_domain("baseball", FakeSource([_fn("a")]))
        registry.add_domain("hockey", FakeSource(error=RuntimeError("down")))

        results = await registry.refresh_all()

        assert results["baseball"].available
        assert not results["hockey"].available

    @pytest.mark.asyncio
    async def test_start_and_shutdown(self, clock):
        source = FakeSource([_fn("a")])
        registry = _registry(clock)
        registry.add_domain("baseball", source)

        await registry.start()
        await registry.shutdown()

        assert source.calls == 1
        assert registry.status()["baseball"]["tool_count"] == 1


class TestTopology:
    @pytest.mark.asyncio
    async def test_remove_domain_forgets_everything(self, clock):
        cache = InMemorySchemaCache()
        registry = _registry(clock, cache=cache)
        registry.add_domain("baseball", FakeSource([_fn("a")]))
        await registry.refresh("baseball")

        registry.remove_domain("baseball")

        assert registry.domains() == []
        assert "baseball" not in cache
        assert await registry.tools_for("baseball") == []

    def test_duplicate_source_rejected(self, clock):
        registry = _registry(clock)
        registry.add_domain("baseball", None)
        with pytest.raises(ValueError):
            registry.add_domain("baseball", None)

    @pytest.mark.asyncio
    async def test_search_across_domains(self, clock):
        registry = _registry(clock)
        registry.add_domain("baseball", FakeSource([_fn("get_standings", "League standings")]))
        registry.add_domain("hockey", FakeSource([_fn("get_team_roster", "Roster")]))
        await registry.refresh_all()

        assert [t.name for t in registry.search_tools("standings")] == ["get_standings"]
        assert [t.name for t in registry.search_tools("ROSTER", domain="hockey")] == ["get_team_roster"]
        assert registry.search_tools("roster", domain="baseball") == []
        assert len(registry.search_tools("")) == 2

    @pytest.mark.asyncio
    async def test_status_reports_age(self, clock):
        registry = _registry(clock)
        registry.add_domain("baseball", FakeSource([_fn("a")]))
        await registry.refresh("baseball")
        clock.advance(42)

        status = registry.status()["baseball"]

        assert status["age_seconds"] == 42
        assert status["stale"] is False
        assert status["tools"] == ["a"]


class TestDurableCacheIO:
    @pytest.mark.asyncio
    async def test_save_and_load_run_off_the_event_loop(self, clock):
        loop_thread = threading.get_ident()

        class RecordingCache(InMemorySchemaCache):
            def __init__(self):
                super().__init__()
                self.threads = []

            def load(self, domain):
                self.threads.append(threading.get_ident())
                return super().load(domain)

            def save(self, domain, tools, fetched_at):
                self.threads.append(threading.get_ident())
                super().save(domain, tools, fetched_at)

        cache = RecordingCache()
        registry = _registry(clock, cache=cache)
        source = FakeSource([_fn("get_standings")])
        registry.add_domain("baseball", source)

        await registry.refresh("baseball")
        source.error = ConnectionError("refused")
        clock.advance(301)
        state = await registry.refresh("baseball")

        assert state.stale
        assert len(cache.threads) == 2
        assert loop_thread not in cache.threads
