# sports/proxy/contracts/entity.py
"""
Entity contracts for domain-scoped sports data.

An entity is a canonical team or player inside one domain (sport). Entities
are read-only at request time; they are written only by the out-of-band
seed loader.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntityKind(str, Enum):
    TEAM = "team"
    PLAYER = "player"


class MatchType(str, Enum):
    EXACT = "exact"
    ALIAS = "alias"
    FUZZY = "fuzzy"


# Fixed confidence tiers, not a continuous score.
CONFIDENCE: dict[MatchType, float] = {
    MatchType.EXACT: 1.0,
    MatchType.ALIAS: 0.9,
    MatchType.FUZZY: 0.7,
}

ALIAS_TYPES = frozenset(
    {"nickname", "city", "abbreviation", "full_name", "short_name", "common"}
)


@dataclass(frozen=True)
class Entity:
    """Canonical team or player.

    Attributes:
        id: Identifier, unique within ``(domain, kind)``.
        display_name: Canonical name (e.g. ``"New York Yankees"``).
        domain: Owning domain (e.g. ``"baseball"``).
        kind: Team or player.
        attributes: Structured attributes (division, position, city, ...).
        active: Whether the entity is currently active.
    """

    id: str
    display_name: str
    domain: str
    kind: EntityKind
    attributes: dict[str, Any] = field(default_factory=dict)
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "domain": self.domain,
            "kind": self.kind.value,
            "attributes": dict(self.attributes),
            "active": self.active,
        }


@dataclass(frozen=True)
class Alias:
    entity_id: str
    alias_text: str
    alias_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "alias_text": self.alias_text,
            "alias_type": self.alias_type,
        }


@dataclass(frozen=True)
class Suggestion:
    """Ranked candidate offered when a resolution misses."""

    id: str
    display_name: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of a single resolve operation.

    A miss is not an error: ``matched_entity`` is ``None`` and
    ``suggestions`` carries up to N ranked candidates.
    """

    query: str
    matched_entity: Entity | None = None
    match_type: MatchType | None = None
    confidence: float = 0.0
    alias_type: str | None = None
    suggestions: list[Suggestion] = field(default_factory=list)
    detail: dict[str, Any] | None = None

    @property
    def resolved(self) -> bool:
        return self.matched_entity is not None

    @classmethod
    def matched(
        cls,
        query: str,
        entity: Entity,
        match_type: MatchType,
        *,
        alias_type: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> ResolutionResult:
        return cls(
            query=query,
            matched_entity=entity,
            match_type=match_type,
            confidence=CONFIDENCE[match_type],
            alias_type=alias_type,
            detail=detail,
        )

    @classmethod
    def miss(cls, query: str, suggestions: list[Suggestion]) -> ResolutionResult:
        return cls(query=query, suggestions=list(suggestions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "resolved": self.resolved,
            "matched_entity": (
                self.matched_entity.to_dict() if self.matched_entity else None
            ),
            "match_type": self.match_type.value if self.match_type else None,
            "confidence": self.confidence,
            "alias_type": self.alias_type,
            "suggestions": [s.to_dict() for s in self.suggestions],
            "detail": self.detail,
        }
