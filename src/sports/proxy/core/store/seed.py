# sports/proxy/core/store/seed.py
"""
Out-of-band entity loader.

Populates a domain store from a YAML document. Request handling never
writes to the store; this module is used at startup (``create_schema``
domains) and by tests.

Expected YAML::

    domain: baseball
    teams:
      - id: 147
        name: New York Yankees
        abbreviation: NYY
        city: New York
        division: AL East
        league: AL
        aliases:
          - {alias: yankees, type: nickname}
    players:
      - id: 592450
        name: Aaron Judge
        first_name: Aaron
        last_name: Judge
        team_id: 147
        position: OF
        stats: {season: 2024, home_runs: 58}
        aliases:
          - {alias: judge, type: short_name}
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sports.proxy.contracts.entity import ALIAS_TYPES, EntityKind
from sports.proxy.core.store.db import session_scope
from sports.proxy.core.store.models import AliasRow, EntityRow

logger = logging.getLogger(__name__)

# Keys promoted to dedicated columns; everything else goes to ``attributes``.
_COLUMNS = ("abbreviation", "city", "first_name", "last_name", "position")
_RESERVED = {"id", "name", "aliases", "stats", "active", "team_id", *_COLUMNS}


def load_seed_file(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Seed file '{path}' must contain a mapping")
    return data


def _entity_row(domain: str, kind: EntityKind, raw: dict[str, Any]) -> EntityRow:
    if "id" not in raw or not raw.get("name"):
        raise ValueError(f"{kind.value} entry requires 'id' and 'name': {raw!r}")
    team_id = raw.get("team_id")
    return EntityRow(
        domain=domain,
        kind=kind.value,
        entity_id=str(raw["id"]),
        display_name=str(raw["name"]).strip(),
        abbreviation=raw.get("abbreviation"),
        city=raw.get("city"),
        first_name=raw.get("first_name"),
        last_name=raw.get("last_name"),
        team_id=str(team_id) if team_id is not None else None,
        position=raw.get("position"),
        active=bool(raw.get("active", True)),
        attributes={k: v for k, v in raw.items() if k not in _RESERVED},
        stats=raw.get("stats"),
    )


def _alias_rows(domain: str, kind: EntityKind, raw: dict[str, Any]) -> list[AliasRow]:
    rows: dict[str, AliasRow] = {}
    for item in raw.get("aliases") or []:
        if isinstance(item, str):
            text, alias_type = item, "common"
        else:
            text, alias_type = item["alias"], item.get("type", "common")
        if alias_type not in ALIAS_TYPES:
            raise ValueError(f"Unknown alias type '{alias_type}' for {raw.get('name')!r}")
        normalized = str(text).strip().lower()
        if normalized:
            rows[normalized] = AliasRow(
                domain=domain,
                kind=kind.value,
                entity_id=str(raw["id"]),
                alias_text=normalized,
                alias_type=alias_type,
            )
    return list(rows.values())


async def seed_store(
    sessionmaker: async_sessionmaker[AsyncSession],
    data: dict[str, Any],
    *,
    domain: str | None = None,
    replace: bool = True,
) -> dict[str, int]:
    """Write teams, players and aliases for one domain.

    With ``replace`` the domain's existing rows are removed first, so a seed
    run is idempotent.
    """
    domain = domain or data.get("domain")
    if not domain:
        raise ValueError("Seed data does not name a domain")

    entities: list[EntityRow] = []
    aliases: list[AliasRow] = []
    for kind, section in ((EntityKind.TEAM, "teams"), (EntityKind.PLAYER, "players")):
        for raw in data.get(section) or []:
            entities.append(_entity_row(domain, kind, raw))
            aliases.extend(_alias_rows(domain, kind, raw))

    async with session_scope(sessionmaker) as session:
        if replace:
            await session.execute(delete(AliasRow).where(AliasRow.domain == domain))
            await session.execute(delete(EntityRow).where(EntityRow.domain == domain))
        session.add_all(entities)
        await session.flush()
        session.add_all(aliases)

    counts = {"entities": len(entities), "aliases": len(aliases)}
    logger.info("Seeded domain '%s': %s", domain, counts)
    return counts
