# sports/proxy/core/tools/local.py
"""
Local tools: resolution and search served from the domain's entity store.

These never leave the process. Their schemas are merged into every domain
that has an entity store, and calls are routed here instead of the backend.
"""
from __future__ import annotations

import logging
from typing import Any

import jsonschema

from sports.proxy.contracts.errors import InvalidInvocation
from sports.proxy.contracts.tools import ToolSchema
from sports.proxy.core.resolver.base import Resolver

logger = logging.getLogger(__name__)


_RESOLVE_TEAM = ToolSchema(
    name="resolve_team",
    description="Resolve a team name to canonical team information with aliases and statistics",
    parameters={
        "type": "object",
        "properties": {
            "name": {
                "type": "string",
                "description": "Team name, city, or abbreviation (e.g. 'Yankees', 'New York', 'NYY')",
            },
            "fuzzy": {
                "type": "boolean",
                "description": "Enable fuzzy matching for partial names",
                "default": True,
            },
            "includeStats": {
                "type": "boolean",
                "description": "Include aliases and roster statistics",
                "default": False,
            },
        },
        "required": ["name"],
    },
)

_RESOLVE_PLAYER = ToolSchema(
    name="resolve_player",
    description="Resolve a player name to canonical player information with aliases and statistics",
    parameters={
        "type": "object",
        "properties": {
            "name": {
                "type": "string",
                "description": "Player name or nickname (e.g. 'Aaron Judge', 'Judge')",
            },
            "team": {
                "type": "string",
                "description": "Optional team filter to disambiguate common names",
            },
            "fuzzy": {
                "type": "boolean",
                "description": "Enable fuzzy matching for partial names",
                "default": True,
            },
            "includeStats": {
                "type": "boolean",
                "description": "Include aliases and current season statistics",
                "default": False,
            },
        },
        "required": ["name"],
    },
)

_SEARCH_TEAMS = ToolSchema(
    name="search_teams",
    description="Search for teams with filters and return multiple results",
    parameters={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Team name, city, or abbreviation"},
            "division": {"type": "string", "description": "Filter by division (e.g. 'AL East')"},
            "league": {"type": "string", "description": "Filter by league (e.g. 'AL')"},
            "conference": {"type": "string", "description": "Filter by conference"},
            "limit": {
                "type": "integer",
                "minimum": 1,
                "maximum": 100,
                "description": "Maximum number of results",
                "default": 10,
            },
        },
    },
)

_SEARCH_PLAYERS = ToolSchema(
    name="search_players",
    description="Search for players with filters and return multiple results",
    parameters={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Player name"},
            "team": {"type": "string", "description": "Team name, city, or abbreviation"},
            "position": {"type": "string", "description": "Position (e.g. 'P', 'C', 'OF')"},
            "active": {
                "type": "boolean",
                "description": "Filter by active status",
                "default": True,
            },
            "limit": {
                "type": "integer",
                "minimum": 1,
                "maximum": 100,
                "description": "Maximum number of results",
                "default": 10,
            },
        },
    },
)

LOCAL_TOOLS: tuple[ToolSchema, ...] = (
    _RESOLVE_TEAM,
    _RESOLVE_PLAYER,
    _SEARCH_TEAMS,
    _SEARCH_PLAYERS,
)
LOCAL_TOOL_NAMES = frozenset(t.name for t in LOCAL_TOOLS)

_BY_NAME = {t.name: t for t in LOCAL_TOOLS}


def is_local_tool(tool_name: str) -> bool:
    return tool_name in LOCAL_TOOL_NAMES


def validate_arguments(tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Apply schema defaults and validate; raises ``InvalidInvocation``."""
    schema = _BY_NAME[tool_name].parameters

    enriched = dict(arguments)
    for prop_name, prop_schema in schema.get("properties", {}).items():
        if prop_name not in enriched and "default" in prop_schema:
            enriched[prop_name] = prop_schema["default"]

    try:
        jsonschema.validate(enriched, schema)
    except jsonschema.ValidationError as exc:
        logger.warning("Argument validation failed for '%s': %s", tool_name, exc.message)
        missing = [str(p) for p in exc.path] or list(schema.get("required", []))
        raise InvalidInvocation(
            tool_name, missing, f"Invalid arguments for '{tool_name}': {exc.message}"
        ) from exc

    return enriched


async def call_local_tool(
    resolver: Resolver,
    tool_name: str,
    arguments: dict[str, Any],
) -> dict[str, Any]:
    """Run a local tool against ``resolver`` and return a JSON payload."""
    args = validate_arguments(tool_name, arguments)

    if tool_name == "resolve_team":
        result = await resolver.resolve_team(
            args["name"],
            fuzzy=args["fuzzy"],
            include_detail=args["includeStats"],
        )
        return result.to_dict()

    if tool_name == "resolve_player":
        result = await resolver.resolve_player(
            args["name"],
            fuzzy=args["fuzzy"],
            include_detail=args["includeStats"],
            team=args.get("team"),
        )
        return result.to_dict()

    if tool_name == "search_teams":
        teams = await resolver.search_teams(
            query=args.get("query"),
            division=args.get("division"),
            league=args.get("league"),
            conference=args.get("conference"),
            limit=args["limit"],
        )
        return {"teams": [t.to_dict() for t in teams], "count": len(teams)}

    if tool_name == "search_players":
        players = await resolver.search_players(
            query=args.get("query"),
            team=args.get("team"),
            position=args.get("position"),
            active=args["active"],
            limit=args["limit"],
        )
        return {"players": [p.to_dict() for p in players], "count": len(players)}

    raise KeyError(f"Unknown local tool '{tool_name}'")
