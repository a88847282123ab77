# sports/proxy/core/registry/schema_registry.py
"""
Tool schema registry.

Keeps a live view of which tools each domain exposes. Schemas are fetched
from the domain backend, refreshed on an interval, and degrade gracefully:

    live fetch → durable copy (stale) → last in-memory copy (stale) → empty

Local tools (resolvers, search) are merged into every domain that has them,
so entity resolution works even before the first backend fetch succeeds.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from sports.proxy.contracts.errors import StaleSchema
from sports.proxy.contracts.tools import ToolSchema
from sports.proxy.core.registry.schema_cache import InMemorySchemaCache, SchemaCache

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SchemaSource(Protocol):
    async def fetch_schema(self) -> list[dict[str, Any]]:
        ...


@dataclass
class DomainSchemas:
    """In-memory schema state of one domain."""

    domain: str
    tools: list[ToolSchema] = field(default_factory=list)
    fetched_at: datetime | None = None
    fetched_clock: float | None = None
    last_attempt: float | None = None
    available: bool = False
    stale: bool = False
    last_error: str | None = None


class ToolSchemaRegistry:
    def __init__(
        self,
        *,
        cache: SchemaCache | None = None,
        normalize: Callable[[str], str | None] | None = None,
        clock: Clock = time.monotonic,
        refresh_interval: float = 300.0,
        timeout: float = 10.0,
    ) -> None:
        self._cache = cache or InMemorySchemaCache()
        self._normalize = normalize
        self._clock = clock
        self._interval = refresh_interval
        self._timeout = timeout

        self._sources: dict[str, SchemaSource | None] = {}
        self._local: dict[str, list[ToolSchema]] = {}
        self._states: dict[str, DomainSchemas] = {}
        self._inflight: dict[str, asyncio.Task[DomainSchemas]] = {}
        self._task: asyncio.Task[None] | None = None

    # -- topology ------------------------------------------------------------

    def add_domain(
        self,
        domain: str,
        source: SchemaSource | None,
        *,
        local_tools: list[ToolSchema] | None = None,
    ) -> None:
        if domain in self._sources:
            raise ValueError(f"Domain '{domain}' already has a schema source")
        self._sources[domain] = source
        self._local[domain] = [t.with_meta(domain=domain, fetched_at=None) for t in local_tools or []]
        logger.info(
            "Schema source for '%s': %s (+%d local tool(s))",
            domain, type(source).__name__ if source else "none", len(self._local[domain]),
        )

    def remove_domain(self, domain: str) -> None:
        """Forget a domain: memory, durable copy and pending refresh."""
        name = self._resolve(domain)
        if name is None:
            return
        self._sources.pop(name, None)
        self._local.pop(name, None)
        self._states.pop(name, None)
        task = self._inflight.pop(name, None)
        if task is not None:
            task.cancel()
        try:
            self._cache.delete(name)
        except OSError as exc:
            logger.warning("Could not delete cached schemas for '%s': %s", name, exc)
        logger.info("Removed domain '%s' from schema registry", name)

    def domains(self) -> list[str]:
        return list(self._sources)

    def _resolve(self, domain: str) -> str | None:
        name = self._normalize(domain) if self._normalize else domain.strip().lower()
        return name if name in self._sources else None

    # -- reads ---------------------------------------------------------------

    def _is_fresh(self, state: DomainSchemas | None) -> bool:
        if state is None or state.last_attempt is None:
            return False
        return self._clock() - state.last_attempt < self._interval

    def _merged(self, domain: str, state: DomainSchemas | None) -> list[ToolSchema]:
        local = self._local.get(domain, [])
        names = {t.name for t in local}
        remote = [t for t in (state.tools if state else []) if t.name not in names]
        return [*local, *remote]

    async def tools_for(self, domain: str) -> list[ToolSchema]:
        """Current tools of ``domain`` (empty for unknown domains)."""
        name = self._resolve(domain)
        if name is None:
            return []
        state = self._states.get(name)
        if not self._is_fresh(state):
            state = await self.refresh(name)
        return self._merged(name, state)

    def cached_tools(self, domain: str) -> list[ToolSchema]:
        """Tools currently in memory, without triggering a refresh."""
        name = self._resolve(domain)
        if name is None:
            return []
        return self._merged(name, self._states.get(name))

    def search_tools(self, query: str, domain: str | None = None) -> list[ToolSchema]:
        q = (query or "").strip().lower()
        if domain is not None:
            name = self._resolve(domain)
            names = [name] if name else []
        else:
            names = list(self._sources)

        out: list[ToolSchema] = []
        for name in names:
            for tool in self.cached_tools(name):
                if not q or q in tool.name.lower() or q in tool.description.lower():
                    out.append(tool)
        return out

    # -- refresh -------------------------------------------------------------

    async def refresh(self, domain: str) -> DomainSchemas:
        """Refresh one domain; concurrent callers share a single fetch."""
        name = self._resolve(domain)
        if name is None:
            raise KeyError(f"Domain '{domain}' not found. Available: {list(self._sources)}")

        task = self._inflight.get(name)
        if task is None or task.done():
            task = asyncio.ensure_future(self._do_refresh(name))
            self._inflight[name] = task
            task.add_done_callback(lambda t, n=name: self._clear_inflight(n, t))
        return await asyncio.shield(task)

    def _clear_inflight(self, name: str, task: asyncio.Task[Any]) -> None:
        if self._inflight.get(name) is task:
            del self._inflight[name]

    async def refresh_all(self) -> dict[str, DomainSchemas | BaseException]:
        names = list(self._sources)
        results = await asyncio.gather(
            *(self.refresh(n) for n in names), return_exceptions=True
        )
        for name, res in zip(names, results):
            if isinstance(res, BaseException):
                logger.error("Schema refresh of '%s' raised: %r", name, res)
        return dict(zip(names, results))

    async def _do_refresh(self, domain: str) -> DomainSchemas:
        state = self._states.setdefault(domain, DomainSchemas(domain=domain))
        state.last_attempt = self._clock()
        source = self._sources.get(domain)

        if source is None:
            state.available = True
            state.stale = False
            return state

        try:
            raw = await asyncio.wait_for(source.fetch_schema(), timeout=self._timeout)
        except asyncio.TimeoutError:
            return await self._fallback(state, f"schema fetch timed out after {self._timeout}s")
        except Exception as exc:
            return await self._fallback(state, str(exc) or type(exc).__name__)

        fetched_at = datetime.now(timezone.utc)
        tools = self._parse(domain, raw, fetched_at)

        state.tools = tools
        state.fetched_at = fetched_at
        state.fetched_clock = state.last_attempt
        state.available = True
        state.stale = False
        state.last_error = None

        try:
            await asyncio.to_thread(self._cache.save, domain, tools, fetched_at)
        except OSError as exc:
            logger.warning("Could not persist schemas for '%s': %s", domain, exc)

        logger.info("Refreshed %d tool schema(s) for '%s'", len(tools), domain)
        return state

    @staticmethod
    def _parse(domain: str, raw: list[dict[str, Any]], fetched_at: datetime) -> list[ToolSchema]:
        tools: list[ToolSchema] = []
        for item in raw:
            try:
                tools.append(ToolSchema.from_function(item, domain=domain, fetched_at=fetched_at))
            except ValueError as exc:
                logger.warning("Skipping invalid tool schema in '%s': %s", domain, exc)
        return tools

    async def _fallback(self, state: DomainSchemas, error: str) -> DomainSchemas:
        domain = state.domain
        state.last_error = error
        logger.warning("Schema fetch failed for '%s': %s", domain, error)

        durable = await asyncio.to_thread(self._cache.load, domain)
        if durable is not None:
            state.tools = list(durable.tools)
            state.fetched_at = durable.fetched_at
            state.available = True
            state.stale = True
            logger.warning(
                "%s: serving durable schemas for '%s' fetched at %s",
                StaleSchema.__name__, domain, durable.fetched_at,
            )
            return state

        if state.tools:
            state.available = True
            state.stale = True
            logger.warning(
                "%s: serving in-memory schemas for '%s' fetched at %s",
                StaleSchema.__name__, domain, state.fetched_at,
            )
            return state

        state.available = False
        state.stale = False
        logger.warning("No schemas available for '%s'", domain)
        return state

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        """Initial refresh of every domain, then periodic refreshes."""
        await self.refresh_all()
        if self._task is None:
            self._task = asyncio.create_task(self._periodic(), name="schema-refresh")

    async def _periodic(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.refresh_all()

    async def shutdown(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        for pending in list(self._inflight.values()):
            pending.cancel()
        self._inflight.clear()

    # -- health --------------------------------------------------------------

    def status(self) -> dict[str, dict[str, Any]]:
        now = self._clock()
        out: dict[str, dict[str, Any]] = {}
        for name in self._sources:
            state = self._states.get(name)
            tools = self._merged(name, state)
            out[name] = {
                "tool_count": len(tools),
                "available": bool(state and state.available),
                "stale": bool(state and state.stale),
                "fetched_at": state.fetched_at.isoformat() if state and state.fetched_at else None,
                "last_attempt": state.last_attempt if state else None,
                "age_seconds": (
                    now - state.fetched_clock
                    if state and state.fetched_clock is not None
                    else None
                ),
                "last_error": state.last_error if state else None,
                "tools": [t.name for t in tools],
            }
        return out
