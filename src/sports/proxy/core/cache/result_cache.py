# sports/proxy/core/cache/result_cache.py
"""
In-process result cache keyed by tool name and canonical arguments.

The cache is an optimisation, never a dependency: any fault while keying,
reading or writing is logged and treated as a miss. Only successful loads
are stored.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from sports.proxy.core.cache.volatility import Volatility, VolatilityTable

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def cache_key(
    tool_name: str,
    arguments: dict[str, Any],
    namespace: str | None = None,
) -> str:
    """``[namespace/]tool_name`` + canonical JSON of the arguments."""
    canonical = json.dumps(
        arguments or {}, sort_keys=True, separators=(",", ":"), default=str
    )
    prefix = f"{namespace}/{tool_name}" if namespace else tool_name
    return f"{prefix}:{canonical}"


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float
    volatility: Volatility


class ResultCache:
    def __init__(
        self,
        *,
        volatility: VolatilityTable | None = None,
        clock: Clock = time.monotonic,
        purge_every: int = 256,
    ) -> None:
        self._volatility = volatility or VolatilityTable()
        self._clock = clock
        self._purge_every = max(1, purge_every)
        self._entries: dict[str, CacheEntry] = {}
        # per-key load locks live only while a caller holds or awaits them
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._writes = 0
        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._errors = 0

    @property
    def volatility(self) -> VolatilityTable:
        return self._volatility

    def _key(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        namespace: str | None,
    ) -> str | None:
        try:
            return cache_key(tool_name, arguments, namespace)
        except (TypeError, ValueError) as exc:
            self._errors += 1
            logger.warning("Cannot build cache key for '%s': %s", tool_name, exc)
            return None

    def _lookup(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            self._expired += 1
            self._misses += 1
            return None
        self._hits += 1
        return entry

    def get(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        *,
        namespace: str | None = None,
    ) -> CacheEntry | None:
        key = self._key(tool_name, arguments, namespace)
        if key is None:
            self._misses += 1
            return None
        return self._lookup(key)

    def set(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        value: Any,
        ttl: float | None = None,
        *,
        namespace: str | None = None,
    ) -> CacheEntry | None:
        key = self._key(tool_name, arguments, namespace)
        if key is None:
            return None
        return self._store(key, tool_name, value, ttl)

    def _store(
        self,
        key: str,
        tool_name: str,
        value: Any,
        ttl: float | None,
    ) -> CacheEntry:
        volatility = self._volatility.classify(tool_name)
        if ttl is None:
            ttl = self._volatility.ttl_for(tool_name)
        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=self._clock() + ttl,
            volatility=volatility,
        )
        self._entries[key] = entry

        self._writes += 1
        if self._writes % self._purge_every == 0:
            purged = self.purge_expired()
            if purged:
                logger.debug("Purged %d expired cache entries", purged)
        return entry

    async def get_or_load(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        loader: Callable[[], Awaitable[Any]],
        ttl: float | None = None,
        *,
        namespace: str | None = None,
    ) -> tuple[Any, bool]:
        """Return ``(value, cached)``.

        Concurrent callers for the same key share one load. A loader
        exception propagates and nothing is cached.
        """
        key = self._key(tool_name, arguments, namespace)
        if key is None:
            self._misses += 1
            return await loader(), False

        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                entry = self._lookup(key)
                if entry is not None:
                    return entry.value, True

                value = await loader()
                self._store(key, tool_name, value, ttl)
                return value, False
        finally:
            users = self._lock_users[key] - 1
            if users:
                self._lock_users[key] = users
            else:
                del self._lock_users[key]
                del self._locks[key]

    def invalidate(
        self,
        tool_name: str,
        arguments: dict[str, Any],
        *,
        namespace: str | None = None,
    ) -> bool:
        key = self._key(tool_name, arguments, namespace)
        return key is not None and self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for k in expired:
            del self._entries[k]
        self._expired += len(expired)
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        return {
            "size": len(self._entries),
            "pending_loads": len(self._locks),
            "hits": self._hits,
            "misses": self._misses,
            "expired": self._expired,
            "errors": self._errors,
            "ttls": self._volatility.describe(),
        }

    def __len__(self) -> int:
        return len(self._entries)
