# sports/proxy/core/resolver/base.py
"""
Resolver – the name → canonical identifier capability of a domain.

Resolvers are keyed by domain in ``ResolverRegistry``; the only concrete
implementation is ``StoreResolver``, backed by the relational entity store,
so adding a domain is a configuration change.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from sports.proxy.contracts.entity import Entity, EntityKind, ResolutionResult

logger = logging.getLogger(__name__)


class Resolver(ABC):
    """Resolves free-text names within one domain.

    Override points
    ~~~~~~~~~~~~~~~
    * ``resolve`` - exact → alias → fuzzy, with suggestions on a miss.
    * ``search_teams`` / ``search_players`` - filtered multi-result search.
    """

    domain: str

    @abstractmethod
    async def resolve(
        self,
        name: str,
        kind: EntityKind,
        *,
        fuzzy: bool = True,
        include_detail: bool = False,
        team: str | None = None,
    ) -> ResolutionResult:
        """Resolve ``name`` to a canonical entity.

        Raises:
            ResolutionFailure: the backing store failed. A miss is returned
                as a ``ResolutionResult`` without a matched entity.
        """

    @abstractmethod
    async def search_teams(
        self,
        *,
        query: str | None = None,
        division: str | None = None,
        league: str | None = None,
        conference: str | None = None,
        limit: int = 10,
    ) -> list[Entity]:
        ...

    @abstractmethod
    async def search_players(
        self,
        *,
        query: str | None = None,
        team: str | None = None,
        position: str | None = None,
        active: bool | None = True,
        limit: int = 10,
    ) -> list[Entity]:
        ...

    async def resolve_team(self, name: str, **options: Any) -> ResolutionResult:
        return await self.resolve(name, EntityKind.TEAM, **options)

    async def resolve_player(self, name: str, **options: Any) -> ResolutionResult:
        return await self.resolve(name, EntityKind.PLAYER, **options)

    async def resolve_batch(
        self,
        entities: list[dict[str, Any]],
        **options: Any,
    ) -> dict[str, Any]:
        """Resolve a mixed list of ``{type, name, team?}`` requests.

        Unknown types are reported per entry; they never fail the batch.
        """
        results: list[dict[str, Any]] = []
        for item in entities:
            name = str(item.get("name") or "")
            raw_type = item.get("type")
            try:
                kind = EntityKind(raw_type)
            except ValueError:
                results.append(
                    {
                        "query": name,
                        "type": raw_type,
                        "resolved": False,
                        "error": f"Unknown entity type '{raw_type}'",
                    }
                )
                continue

            team = item.get("team") if kind is EntityKind.PLAYER else None
            outcome = await self.resolve(name, kind, team=team, **options)
            results.append({"type": kind.value, **outcome.to_dict()})

        return {
            "batch_results": results,
            "total": len(entities),
            "resolved": sum(1 for r in results if r.get("resolved")),
        }
