# sports/proxy/core/pipeline/enrichment.py
"""
Identifier enrichment of dependent tool invocations.
"""
from __future__ import annotations

from dataclasses import dataclass

from sports.proxy.contracts.entity import EntityKind
from sports.proxy.contracts.tools import ToolInvocation
from sports.proxy.core.pipeline.state import ResolutionTable


@dataclass(frozen=True)
class Requirement:
    argument: str
    kind: EntityKind
    required: bool = True


REQUIREMENTS: dict[str, tuple[Requirement, ...]] = {
    "get_team_info": (Requirement("teamId", EntityKind.TEAM),),
    "get_team_roster": (Requirement("teamId", EntityKind.TEAM),),
    "get_player_stats": (Requirement("playerId", EntityKind.PLAYER),),
    "get_schedule": (Requirement("teamId", EntityKind.TEAM, required=False),),
}


def _is_set(value: object) -> bool:
    return value is not None and value != ""


def enrich(invocation: ToolInvocation, table: ResolutionTable) -> ToolInvocation:
    """Fill identifier arguments from the table without overwriting explicit ones."""
    requirements = REQUIREMENTS.get(invocation.tool_name, ())
    args = dict(invocation.arguments)
    filled = False

    for req in requirements:
        if _is_set(args.get(req.argument)):
            continue
        entity_id = table.id_for(req.kind)
        if entity_id is not None:
            args[req.argument] = entity_id
            filled = True

    if not filled:
        return invocation
    return invocation.with_arguments(args, enriched=True)


def missing_requirements(invocation: ToolInvocation) -> list[str]:
    return [
        req.argument
        for req in REQUIREMENTS.get(invocation.tool_name, ())
        if req.required and not _is_set(invocation.arguments.get(req.argument))
    ]
