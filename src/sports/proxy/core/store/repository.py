# sports/proxy/core/store/repository.py
"""
Read-only entity store for one domain.

All matching is done with parameterised SQL against ``entities`` and
``aliases``; result ordering is fully deterministic (rank, display name, id)
so the same query on an unchanged store always returns the same rows.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

from sqlalchemy import Select, case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import aliased

from sports.proxy.contracts.entity import Alias, Entity, EntityKind
from sports.proxy.contracts.errors import StoreError
from sports.proxy.core.store.models import AliasRow, EntityRow

logger = logging.getLogger(__name__)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(col: Any, text: str) -> Any:
    return func.lower(col).like(f"%{_escape_like(text)}%", escape="\\")


def _startswith(col: Any, text: str) -> Any:
    return func.lower(col).like(f"{_escape_like(text)}%", escape="\\")


@dataclass(frozen=True)
class SurfaceForm:
    """Literal text that identifies an entity (name, abbreviation, alias)."""

    text: str
    kind: EntityKind
    entity_id: str


class EntityStore:
    """Domain-scoped read access to the relational entity store."""

    def __init__(
        self,
        *,
        domain: str,
        sessionmaker: async_sessionmaker[AsyncSession],
    ) -> None:
        self._domain = domain
        self._sessionmaker = sessionmaker

    @property
    def domain(self) -> str:
        return self._domain

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessionmaker() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Entity store query failed for domain '%s': %s", self._domain, exc)
            raise StoreError(f"Entity store unavailable for domain '{self._domain}'") from exc

    def _base(self, kind: EntityKind) -> Select[tuple[EntityRow]]:
        return select(EntityRow).where(
            EntityRow.domain == self._domain,
            EntityRow.kind == kind.value,
        )

    @staticmethod
    def _secondary(kind: EntityKind) -> Any:
        return EntityRow.city if kind is EntityKind.TEAM else EntityRow.last_name

    def _team_filter(self, team: str) -> Any:
        """Restrict players to those whose team matches by name, city or abbreviation."""
        t = team.strip().lower()
        team_row = aliased(EntityRow)
        team_ids = select(team_row.entity_id).where(
            team_row.domain == self._domain,
            team_row.kind == EntityKind.TEAM.value,
            or_(
                _contains(team_row.display_name, t),
                func.lower(team_row.abbreviation) == t,
                _contains(team_row.city, t),
            ),
        )
        return EntityRow.team_id.in_(team_ids)

    # -- matching ------------------------------------------------------------

    async def find_exact(
        self, kind: EntityKind, text: str, *, team: str | None = None
    ) -> Entity | None:
        if kind is EntityKind.TEAM:
            cond = or_(
                func.lower(EntityRow.display_name) == text,
                func.lower(EntityRow.abbreviation) == text,
                func.lower(EntityRow.city) == text,
            )
            rank = case(
                (func.lower(EntityRow.display_name) == text, 1),
                (func.lower(EntityRow.abbreviation) == text, 2),
                else_=3,
            )
        else:
            cond = func.lower(EntityRow.display_name) == text
            parts = text.split(" ", 1)
            if len(parts) == 2:
                cond = or_(
                    cond,
                    (func.lower(EntityRow.first_name) == parts[0])
                    & (func.lower(EntityRow.last_name) == parts[1]),
                )
            rank = case((func.lower(EntityRow.display_name) == text, 1), else_=2)

        stmt = self._base(kind).where(cond)
        if team and kind is EntityKind.PLAYER:
            stmt = stmt.where(self._team_filter(team))
        stmt = stmt.order_by(rank, EntityRow.display_name, EntityRow.entity_id).limit(1)

        async with self._session() as session:
            row = (await session.execute(stmt)).scalars().first()
        return row.to_entity() if row else None

    async def find_alias(
        self, kind: EntityKind, text: str, *, team: str | None = None
    ) -> tuple[Entity, str] | None:
        stmt = (
            select(EntityRow, AliasRow.alias_type)
            .join(
                AliasRow,
                (AliasRow.domain == EntityRow.domain)
                & (AliasRow.kind == EntityRow.kind)
                & (AliasRow.entity_id == EntityRow.entity_id),
            )
            .where(
                EntityRow.domain == self._domain,
                EntityRow.kind == kind.value,
                AliasRow.alias_text == text,
            )
        )
        if team and kind is EntityKind.PLAYER:
            stmt = stmt.where(self._team_filter(team))
        stmt = stmt.order_by(EntityRow.display_name, EntityRow.entity_id).limit(1)

        async with self._session() as session:
            first = (await session.execute(stmt)).first()
        if first is None:
            return None
        row, alias_type = first
        return row.to_entity(), alias_type

    async def find_fuzzy(
        self, kind: EntityKind, text: str, *, team: str | None = None
    ) -> Entity | None:
        rows = await self._ranked_containment(kind, text, team=team, limit=1)
        return rows[0].to_entity() if rows else None

    async def suggest(
        self,
        kind: EntityKind,
        text: str,
        *,
        team: str | None = None,
        limit: int = 5,
    ) -> list[Entity]:
        rows = await self._ranked_containment(
            kind, text, team=team, limit=limit, suggestions=True
        )
        return [r.to_entity() for r in rows]

    async def _ranked_containment(
        self,
        kind: EntityKind,
        text: str,
        *,
        team: str | None,
        limit: int,
        suggestions: bool = False,
    ) -> list[EntityRow]:
        """Containment match ranked name-prefix > secondary-prefix > any."""
        secondary = self._secondary(kind)
        fields = [EntityRow.display_name, secondary]
        whens = [
            (_startswith(EntityRow.display_name, text), 1),
            (_startswith(secondary, text), 2),
        ]
        if suggestions and kind is EntityKind.TEAM:
            fields.append(EntityRow.abbreviation)
            whens.append((_startswith(EntityRow.abbreviation, text), 3))
        rank = case(*whens, else_=len(whens) + 1)

        stmt = self._base(kind).where(or_(*(_contains(f, text) for f in fields)))
        if suggestions and kind is EntityKind.PLAYER:
            stmt = stmt.where(EntityRow.active.is_(True))
        if team and kind is EntityKind.PLAYER:
            stmt = stmt.where(self._team_filter(team))
        stmt = stmt.order_by(rank, EntityRow.display_name, EntityRow.entity_id).limit(limit)

        async with self._session() as session:
            return list((await session.execute(stmt)).scalars().all())

    # -- detail --------------------------------------------------------------

    async def aliases_for(self, kind: EntityKind, entity_id: str) -> list[Alias]:
        stmt = (
            select(AliasRow)
            .where(
                AliasRow.domain == self._domain,
                AliasRow.kind == kind.value,
                AliasRow.entity_id == entity_id,
            )
            .order_by(AliasRow.alias_text)
        )
        async with self._session() as session:
            return [r.to_alias() for r in (await session.execute(stmt)).scalars()]

    async def roster_summary(self, team_id: str) -> dict[str, int]:
        stmt = select(
            func.count(EntityRow.entity_id),
            func.count(case((EntityRow.active.is_(True), 1))),
        ).where(
            EntityRow.domain == self._domain,
            EntityRow.kind == EntityKind.PLAYER.value,
            EntityRow.team_id == team_id,
        )
        async with self._session() as session:
            total, active = (await session.execute(stmt)).one()
        return {"total_players": int(total or 0), "active_players": int(active or 0)}

    async def stats_for(self, kind: EntityKind, entity_id: str) -> dict[str, Any] | None:
        stmt = select(EntityRow.stats).where(
            EntityRow.domain == self._domain,
            EntityRow.kind == kind.value,
            EntityRow.entity_id == entity_id,
        )
        async with self._session() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    # -- search --------------------------------------------------------------

    async def search_teams(
        self,
        *,
        query: str | None = None,
        filters: dict[str, str] | None = None,
        limit: int = 10,
    ) -> list[Entity]:
        stmt = self._base(EntityKind.TEAM)
        if query:
            q = query.strip().lower()
            stmt = stmt.where(
                or_(
                    _contains(EntityRow.display_name, q),
                    _contains(EntityRow.city, q),
                    _contains(EntityRow.abbreviation, q),
                )
            )
        stmt = stmt.order_by(EntityRow.display_name, EntityRow.entity_id)

        async with self._session() as session:
            rows = list((await session.execute(stmt)).scalars().all())

        # division / league / conference live in the JSON attributes
        wanted = {k: v.lower() for k, v in (filters or {}).items() if v}
        out: list[Entity] = []
        for row in rows:
            attrs = row.attributes or {}
            if all(str(attrs.get(k, "")).lower() == v for k, v in wanted.items()):
                out.append(row.to_entity())
            if len(out) >= limit:
                break
        return out

    async def search_players(
        self,
        *,
        query: str | None = None,
        team: str | None = None,
        position: str | None = None,
        active: bool | None = True,
        limit: int = 10,
    ) -> list[Entity]:
        stmt = self._base(EntityKind.PLAYER)
        if active is not None:
            stmt = stmt.where(EntityRow.active.is_(active))
        if query:
            q = query.strip().lower()
            stmt = stmt.where(
                or_(
                    _contains(EntityRow.display_name, q),
                    _contains(EntityRow.first_name, q),
                    _contains(EntityRow.last_name, q),
                )
            )
        if team:
            stmt = stmt.where(self._team_filter(team))
        if position:
            stmt = stmt.where(func.upper(EntityRow.position) == position.strip().upper())
        stmt = stmt.order_by(EntityRow.display_name, EntityRow.entity_id).limit(limit)

        async with self._session() as session:
            return [r.to_entity() for r in (await session.execute(stmt)).scalars()]

    # -- extraction support --------------------------------------------------

    async def surface_forms(self) -> list[SurfaceForm]:
        """Every literal that identifies an active entity in this domain."""
        forms: dict[tuple[str, str], SurfaceForm] = {}

        def add(text: str | None, kind: str, entity_id: str) -> None:
            if not text:
                return
            t = text.strip().lower()
            if t and (t, kind) not in forms:
                forms[(t, kind)] = SurfaceForm(t, EntityKind(kind), entity_id)

        entity_stmt = (
            select(EntityRow)
            .where(EntityRow.domain == self._domain, EntityRow.active.is_(True))
            .order_by(EntityRow.kind, EntityRow.entity_id)
        )
        alias_stmt = (
            select(AliasRow)
            .join(
                EntityRow,
                (AliasRow.domain == EntityRow.domain)
                & (AliasRow.kind == EntityRow.kind)
                & (AliasRow.entity_id == EntityRow.entity_id),
            )
            .where(AliasRow.domain == self._domain, EntityRow.active.is_(True))
            .order_by(AliasRow.kind, AliasRow.entity_id, AliasRow.alias_text)
        )

        async with self._session() as session:
            for row in (await session.execute(entity_stmt)).scalars():
                add(row.display_name, row.kind, row.entity_id)
                # two-letter abbreviations ("sf", "tb") collide with ordinary words
                if row.abbreviation and len(row.abbreviation) >= 3:
                    add(row.abbreviation, row.kind, row.entity_id)
            for alias in (await session.execute(alias_stmt)).scalars():
                add(alias.alias_text, alias.kind, alias.entity_id)

        return list(forms.values())

    async def counts(self) -> dict[str, int]:
        stmt = select(
            func.count(case((EntityRow.kind == EntityKind.TEAM.value, 1))),
            func.count(
                case(
                    (
                        (EntityRow.kind == EntityKind.PLAYER.value)
                        & EntityRow.active.is_(True),
                        1,
                    )
                )
            ),
        ).where(EntityRow.domain == self._domain)
        async with self._session() as session:
            teams, players = (await session.execute(stmt)).one()
        return {"teams": int(teams or 0), "active_players": int(players or 0)}
