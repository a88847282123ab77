# sports/proxy/core/pipeline/state.py
"""
Request-scoped pipeline state passed from the approve step to enrichment.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sports.proxy.contracts.entity import EntityKind
from sports.proxy.contracts.tools import ToolResult


@dataclass(frozen=True)
class ResolvedEntity:
    id: str
    kind: EntityKind
    display_name: str | None = None
    confidence: float | None = None
    source_tool: str | None = None


def resolved_entity(
    payload: Any,
    kind: EntityKind,
    *,
    source_tool: str | None = None,
) -> ResolvedEntity | None:
    """Extract the canonical entity from a resolver tool payload.

    Accepts the local ``ResolutionResult`` shape (``matched_entity``), a bare
    ``{id, name}`` object, or either wrapped in a backend ``data`` envelope.
    """
    if not isinstance(payload, dict):
        return None

    if "matched_entity" in payload:
        entity = payload.get("matched_entity")
        if not isinstance(entity, dict) or entity.get("id") is None:
            return None
        return ResolvedEntity(
            id=str(entity["id"]),
            kind=kind,
            display_name=entity.get("display_name"),
            confidence=payload.get("confidence"),
            source_tool=source_tool,
        )

    if payload.get("id") is not None:
        return ResolvedEntity(
            id=str(payload["id"]),
            kind=kind,
            display_name=payload.get("display_name") or payload.get("name"),
            confidence=payload.get("confidence"),
            source_tool=source_tool,
        )

    if isinstance(payload.get("data"), dict):
        return resolved_entity(payload["data"], kind, source_tool=source_tool)

    return None


@dataclass
class ResolutionTable:
    """Canonical entity per kind; the last successful resolution wins."""

    _entries: dict[EntityKind, ResolvedEntity] = field(default_factory=dict)

    def record(self, entity: ResolvedEntity) -> None:
        self._entries[entity.kind] = entity

    def get(self, kind: EntityKind) -> ResolvedEntity | None:
        return self._entries.get(kind)

    def id_for(self, kind: EntityKind) -> str | None:
        entity = self._entries.get(kind)
        return entity.id if entity else None

    def __contains__(self, kind: EntityKind) -> bool:
        return kind in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {
            kind.value: {
                "id": e.id,
                "display_name": e.display_name,
                "confidence": e.confidence,
                "source_tool": e.source_tool,
            }
            for kind, e in self._entries.items()
        }


@dataclass(frozen=True)
class ApprovalOutcome:
    """Result of the approve step: resolver results plus the table."""

    results: list[ToolResult]
    table: ResolutionTable
