# sports/proxy/core/pipeline/pipeline.py
"""
Two-phase orchestration of one request's tool invocations.

Phase A (approve) runs every resolver invocation and collects canonical ids
into a ``ResolutionTable``. Phase B (run_dependents) enriches the remaining
invocations from that table and runs them. Phase B never starts before
Phase A has finished; within each phase calls run concurrently.

Failures are recorded per invocation. The pipeline itself only raises on
cancellation.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from sports.proxy.contracts.entity import EntityKind
from sports.proxy.contracts.errors import InvalidInvocation, SportsProxyError
from sports.proxy.contracts.tools import Phase, ToolInvocation, ToolResult
from sports.proxy.core.cache.result_cache import ResultCache
from sports.proxy.core.pipeline.enrichment import enrich, missing_requirements
from sports.proxy.core.pipeline.state import (
    ApprovalOutcome,
    ResolutionTable,
    resolved_entity,
)

logger = logging.getLogger(__name__)


class Invoker(Protocol):
    async def invoke(self, domain: str, invocation: ToolInvocation) -> Any:
        ...


class OrchestrationPipeline:
    def __init__(self, *, invoker: Invoker, cache: ResultCache | None = None) -> None:
        self._invoker = invoker
        self._cache = cache

    async def execute(
        self,
        invocations: list[ToolInvocation],
        *,
        domain: str,
    ) -> list[ToolResult]:
        outcome = await self.approve(invocations, domain)
        dependents = await self.run_dependents(invocations, outcome.table, domain)
        return [*outcome.results, *dependents]

    # -- phase A -------------------------------------------------------------

    async def approve(
        self,
        invocations: list[ToolInvocation],
        domain: str,
    ) -> ApprovalOutcome:
        resolvers = [
            (pos, inv) for pos, inv in enumerate(invocations) if inv.phase is Phase.RESOLVER
        ]

        by_kind: dict[EntityKind, list[tuple[int, ToolInvocation]]] = {}
        for pos, inv in resolvers:
            by_kind.setdefault(inv.kind, []).append((pos, inv))

        # same kind in proposal order, kinds concurrently
        async def run_kind(
            items: list[tuple[int, ToolInvocation]],
        ) -> list[tuple[int, ToolResult]]:
            return [(pos, await self._call(domain, inv)) for pos, inv in items]

        groups = await asyncio.gather(*(run_kind(items) for items in by_kind.values()))
        by_pos = dict(pair for group in groups for pair in group)

        table = ResolutionTable()
        results: list[ToolResult] = []
        for pos, inv in resolvers:
            result = by_pos[pos]
            results.append(result)
            if not result.success:
                continue
            entity = resolved_entity(result.result, inv.kind, source_tool=inv.tool_name)
            if entity is not None:
                table.record(entity)

        logger.debug("Approved %d resolver call(s) in '%s': %s", len(results), domain, table.to_dict())
        return ApprovalOutcome(results=results, table=table)

    # -- phase B -------------------------------------------------------------

    async def run_dependents(
        self,
        invocations: list[ToolInvocation],
        table: ResolutionTable,
        domain: str,
    ) -> list[ToolResult]:
        seen: set[str] = set()
        planned: list[ToolInvocation] = []
        for inv in invocations:
            if inv.phase is not Phase.DEPENDENT:
                continue
            if inv.tool_name in seen:
                logger.debug("Dropping duplicate dependent call '%s'", inv.tool_name)
                continue
            seen.add(inv.tool_name)
            planned.append(enrich(inv, table))

        async def run_one(inv: ToolInvocation) -> ToolResult:
            missing = missing_requirements(inv)
            if missing:
                error = InvalidInvocation(inv.tool_name, missing)
                logger.info("Rejected '%s': %s", inv.tool_name, error)
                return ToolResult.failed(inv, str(error), error_kind=error.kind)
            return await self._call(domain, inv)

        return list(await asyncio.gather(*(run_one(inv) for inv in planned)))

    # -- execution -----------------------------------------------------------

    async def _call(self, domain: str, invocation: ToolInvocation) -> ToolResult:
        async def load() -> Any:
            return await self._invoker.invoke(domain, invocation)

        try:
            if self._cache is None:
                value, cached = await load(), False
            else:
                value, cached = await self._cache.get_or_load(
                    invocation.tool_name, invocation.arguments, load, namespace=domain
                )
        except SportsProxyError as exc:
            logger.warning(
                "Tool '%s' in '%s' failed (%s): %s",
                invocation.tool_name, domain, exc.kind, exc,
            )
            return ToolResult.failed(invocation, str(exc), error_kind=exc.kind)
        except Exception as exc:
            logger.exception("Unexpected error in tool '%s' (%s)", invocation.tool_name, domain)
            return ToolResult.failed(
                invocation, str(exc) or type(exc).__name__, error_kind="internal_error"
            )

        return ToolResult.ok(invocation, value, cached=cached)
