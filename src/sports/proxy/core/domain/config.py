# sports/proxy/core/domain/config.py
"""
Domain configuration loading.

A domain is one sport (or fantasy league family). Everything that varies per
domain is declared in YAML, so adding a sport is a configuration change:
where its entity store lives, which backend client serves its tools, and how
each tool is routed on that backend.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from sports.proxy.core.loader import load_named_sections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolRoute:
    """Where a dependent tool lives on the domain backend."""

    path: str = "/"
    endpoint: str | None = None


@dataclass(frozen=True)
class DomainSpec:
    """YAML-declared domain specification."""

    name: str
    aliases: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    database_url: str | None = None
    seed: str | None = None
    create_schema: bool = False
    backend: str | None = None
    tools: dict[str, ToolRoute] = field(default_factory=dict)
    enabled: bool = True

    def route_for(self, tool_name: str) -> ToolRoute:
        """Configured route, else ``/`` with the tool name minus ``get_``."""
        default_endpoint = tool_name.removeprefix("get_")
        route = self.tools.get(tool_name)
        if route is None:
            return ToolRoute(path="/", endpoint=default_endpoint)
        return ToolRoute(path=route.path, endpoint=route.endpoint or default_endpoint)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "aliases": list(self.aliases),
            "keywords": list(self.keywords),
            "backend": self.backend,
            "has_store": self.database_url is not None,
            "tools": {
                name: {"path": r.path, "endpoint": r.endpoint}
                for name, r in self.tools.items()
            },
        }


@dataclass(frozen=True)
class DomainsConfig:
    domains: list[DomainSpec] = field(default_factory=list)


def _parse_routes(raw: Any) -> dict[str, ToolRoute]:
    routes: dict[str, ToolRoute] = {}
    for name, spec in (raw or {}).items():
        if isinstance(spec, str):
            routes[name] = ToolRoute(path=spec)
            continue
        spec = spec or {}
        routes[name] = ToolRoute(
            path=str(spec.get("path") or "/"),
            endpoint=spec.get("endpoint"),
        )
    return routes


def _as_tuple(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw.lower(),)
    return tuple(str(v).lower() for v in raw)


def parse_domain_spec(raw: dict[str, Any]) -> DomainSpec:
    return DomainSpec(
        name=str(raw["name"]).lower(),
        aliases=_as_tuple(raw.get("aliases")),
        keywords=_as_tuple(raw.get("keywords")),
        database_url=raw.get("database_url"),
        seed=raw.get("seed"),
        create_schema=bool(raw.get("create_schema", False)),
        backend=raw.get("backend"),
        tools=_parse_routes(raw.get("tools")),
        enabled=bool(raw.get("enabled", True)),
    )


def load_domains_config(patterns: Iterable[str]) -> DomainsConfig:
    """Load domain declarations from YAML.

    Expected structure::

        domains:
          - name: baseball
            aliases: [mlb]
            keywords: [baseball, inning, home run]
            database_url: "${BASEBALL_DB_URL:-sqlite+aiosqlite:///:memory:}"
            seed: config/seeds/baseball.yaml
            create_schema: true
            backend: baseball_stats
            tools:
              get_player_stats: {path: /, endpoint: player}
    """
    specs = [parse_domain_spec(raw) for raw in load_named_sections(patterns, "domains").values()]
    logger.info("Loaded %d domain spec(s): %s", len(specs), [s.name for s in specs])
    return DomainsConfig(domains=specs)
