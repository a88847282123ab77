# tests/core/cache/test_result_cache.py
from __future__ import annotations

import asyncio

import pytest

from sports.proxy.core.cache import ResultCache, Volatility, VolatilityTable, cache_key


class TestCacheKey:
    def test_argument_order_does_not_matter(self):
        assert cache_key("get_team_info", {"a": 1, "b": 2}) == cache_key(
            "get_team_info", {"b": 2, "a": 1}
        )

    def test_namespace_separates_domains(self):
        assert cache_key("get_standings", {}, "baseball") != cache_key("get_standings", {}, "hockey")


class TestVolatility:
    def test_known_tools(self):
        table = VolatilityTable()
        assert table.classify("get_live_game") is Volatility.LIVE
        assert table.classify("get_team_roster") is Volatility.METADATA
        assert table.classify("resolve_team") is Volatility.METADATA
        assert table.classify("get_fantasy_league_rosters") is Volatility.FANTASY
        assert table.ttl_for("get_player_stats") == 60.0

    def test_unknown_tool_uses_default(self):
        assert VolatilityTable().classify("get_weather") is Volatility.STATS

    def test_overrides(self):
        table = VolatilityTable({Volatility.LIVE: 2.0})
        assert table.ttl_for("get_live_game") == 2.0
        assert table.ttl_for("get_team_info") == 300.0


class TestResultCache:
    def test_entry_expires_after_its_ttl(self, clock):
        cache = ResultCache(clock=clock)
        cache.set("get_live_game", {"gamePk": 1}, {"inning": 3})

        clock.advance(9)
        assert cache.get("get_live_game", {"gamePk": 1}).value == {"inning": 3}

        clock.advance(2)
        assert cache.get("get_live_game", {"gamePk": 1}) is None
        assert cache.stats()["expired"] == 1

    def test_explicit_ttl(self, clock):
        cache = ResultCache(clock=clock)
        cache.set("get_team_info", {"teamId": "147"}, {}, ttl=1)
        clock.advance(1)
        assert cache.get("get_team_info", {"teamId": "147"}) is None

    def test_unserialisable_arguments_are_a_miss(self, clock):
        cache = ResultCache(clock=clock)
        circular: dict = {}
        circular["self"] = circular

        assert cache.set("get_standings", circular, 1) is None
        assert cache.get("get_standings", circular) is None
        assert cache.stats()["errors"] == 2

    def test_invalidate_and_purge(self, clock):
        cache = ResultCache(clock=clock)
        cache.set("get_standings", {}, 1, namespace="baseball")
        cache.set("get_live_game", {}, 2, namespace="baseball")

        assert cache.invalidate("get_standings", {}, namespace="baseball")
        assert not cache.invalidate("get_standings", {}, namespace="baseball")

        clock.advance(30)
        assert cache.purge_expired() == 1
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_get_or_load_caches_success(self, clock):
        cache = ResultCache(clock=clock)
        calls = 0

        async def load():
            nonlocal calls
            calls += 1
            return {"teams": []}

        first = await cache.get_or_load("get_standings", {}, load)
        second = await cache.get_or_load("get_standings", {}, load)

        assert first == ({"teams": []}, False)
        assert second == ({"teams": []}, True)
        assert calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_one_call(self, clock):
        cache = ResultCache(clock=clock)
        calls = 0

        async def load():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return "standings"

        results = await asyncio.gather(
            *(cache.get_or_load("get_standings", {}, load) for _ in range(5))
        )

        assert calls == 1
        assert sorted(cached for _, cached in results) == [False, True, True, True, True]

    @pytest.mark.asyncio
    async def test_loader_error_is_not_cached(self, clock):
        cache = ResultCache(clock=clock)

        async def boom():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError):
            await cache.get_or_load("get_standings", {}, boom)
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_expired_entries_and_locks_do_not_accumulate(self, clock):
        cache = ResultCache(clock=clock, purge_every=10)

        async def load():
            return {"inning": 1}

        for game in range(1000):
            await cache.get_or_load("get_live_game", {"gameId": game}, load)
            clock.advance(60)

        assert len(cache) == 1
        assert cache.stats()["pending_loads"] == 0
        assert cache.stats()["expired"] == 999

    @pytest.mark.asyncio
    async def test_load_lock_released_after_failure(self, clock):
        cache = ResultCache(clock=clock)

        async def boom():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError):
            await cache.get_or_load("get_standings", {}, boom)
        assert cache.stats()["pending_loads"] == 0
