# sports/proxy/core/resolver/store_resolver.py
from __future__ import annotations

import logging
from typing import Any

from sports.proxy.contracts.entity import (
    Entity,
    EntityKind,
    MatchType,
    ResolutionResult,
    Suggestion,
)
from sports.proxy.contracts.errors import ResolutionFailure, StoreError
from sports.proxy.core.resolver.base import Resolver
from sports.proxy.core.store.repository import EntityStore

logger = logging.getLogger(__name__)


class StoreResolver(Resolver):
    """Resolver backed by a domain's ``EntityStore``.

    Phases are strictly ordered and the first hit wins:

    1. exact  - display name / abbreviation / city (teams), full name (players)
    2. alias  - alias table
    3. fuzzy  - containment, name-prefix > secondary-prefix > any (opt-in)

    A total miss returns up to ``suggestion_limit`` ranked suggestions,
    independent of the ``fuzzy`` flag.
    """

    def __init__(self, store: EntityStore, *, suggestion_limit: int = 5) -> None:
        self.domain = store.domain
        self._store = store
        self._suggestion_limit = suggestion_limit

    @property
    def store(self) -> EntityStore:
        return self._store

    async def resolve(
        self,
        name: str,
        kind: EntityKind,
        *,
        fuzzy: bool = True,
        include_detail: bool = False,
        team: str | None = None,
    ) -> ResolutionResult:
        text = (name or "").strip().lower()
        if not text:
            return ResolutionResult.miss(name or "", [])

        team = team.strip() if team and team.strip() else None

        try:
            entity = await self._store.find_exact(kind, text, team=team)
            if entity is not None:
                return await self._matched(name, entity, MatchType.EXACT, include_detail)

            hit = await self._store.find_alias(kind, text, team=team)
            if hit is not None:
                entity, alias_type = hit
                return await self._matched(
                    name, entity, MatchType.ALIAS, include_detail, alias_type=alias_type
                )

            if fuzzy:
                entity = await self._store.find_fuzzy(kind, text, team=team)
                if entity is not None:
                    return await self._matched(name, entity, MatchType.FUZZY, include_detail)

            candidates = await self._store.suggest(
                kind, text, team=team, limit=self._suggestion_limit
            )
        except StoreError as exc:
            raise ResolutionFailure(
                f"Could not resolve {kind.value} '{name}': {exc}",
                domain=self.domain,
                tool=f"resolve_{kind.value}",
            ) from exc

        logger.debug(
            "No %s match for '%s' in '%s' (%d suggestion(s))",
            kind.value, name, self.domain, len(candidates),
        )
        return ResolutionResult.miss(
            name,
            [
                Suggestion(id=e.id, display_name=e.display_name, attributes=e.attributes)
                for e in candidates
            ],
        )

    async def _matched(
        self,
        query: str,
        entity: Entity,
        match_type: MatchType,
        include_detail: bool,
        *,
        alias_type: str | None = None,
    ) -> ResolutionResult:
        detail = await self._detail(entity) if include_detail else None
        logger.debug(
            "Resolved '%s' → %s %s (%s) in '%s'",
            query, entity.kind.value, entity.id, match_type.value, self.domain,
        )
        return ResolutionResult.matched(
            query, entity, match_type, alias_type=alias_type, detail=detail
        )

    async def _detail(self, entity: Entity) -> dict[str, Any]:
        aliases = await self._store.aliases_for(entity.kind, entity.id)
        detail: dict[str, Any] = {"aliases": [a.to_dict() for a in aliases]}
        if entity.kind is EntityKind.TEAM:
            detail["roster_stats"] = await self._store.roster_summary(entity.id)
        else:
            detail["current_stats"] = await self._store.stats_for(entity.kind, entity.id)
        return detail

    async def search_teams(
        self,
        *,
        query: str | None = None,
        division: str | None = None,
        league: str | None = None,
        conference: str | None = None,
        limit: int = 10,
    ) -> list[Entity]:
        filters = {"division": division, "league": league, "conference": conference}
        try:
            return await self._store.search_teams(
                query=query,
                filters={k: v for k, v in filters.items() if v},
                limit=limit,
            )
        except StoreError as exc:
            raise ResolutionFailure(str(exc), domain=self.domain, tool="search_teams") from exc

    async def search_players(
        self,
        *,
        query: str | None = None,
        team: str | None = None,
        position: str | None = None,
        active: bool | None = True,
        limit: int = 10,
    ) -> list[Entity]:
        try:
            return await self._store.search_players(
                query=query, team=team, position=position, active=active, limit=limit
            )
        except StoreError as exc:
            raise ResolutionFailure(str(exc), domain=self.domain, tool="search_players") from exc
