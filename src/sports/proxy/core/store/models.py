# sports/proxy/core/store/models.py
from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKeyConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from sports.proxy.contracts.entity import Alias, Entity, EntityKind
from sports.proxy.core.store.db import Base


class EntityRow(Base):
    """Canonical team or player, unique per ``(domain, kind, entity_id)``.

    Columns used for matching are promoted; everything else lives in
    ``attributes``. ``stats`` holds denormalised current-season numbers.
    """

    __tablename__ = "entities"

    domain: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(16), primary_key=True)
    entity_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    display_name: Mapped[str] = mapped_column(String(255))
    abbreviation: Mapped[str | None] = mapped_column(String(16), default=None)
    city: Mapped[str | None] = mapped_column(String(128), default=None)
    first_name: Mapped[str | None] = mapped_column(String(128), default=None)
    last_name: Mapped[str | None] = mapped_column(String(128), default=None)
    team_id: Mapped[str | None] = mapped_column(String(64), default=None)
    position: Mapped[str | None] = mapped_column(String(16), default=None)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    attributes: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    stats: Mapped[dict[str, Any] | None] = mapped_column(JSON, default=None)

    __table_args__ = (
        Index("ix_entities_domain_kind_name", "domain", "kind", "display_name"),
        Index("ix_entities_domain_team", "domain", "team_id"),
    )

    def to_entity(self) -> Entity:
        attrs: dict[str, Any] = dict(self.attributes or {})
        for key in ("abbreviation", "city", "first_name", "last_name", "team_id", "position"):
            value = getattr(self, key)
            if value is not None:
                attrs[key] = value
        return Entity(
            id=self.entity_id,
            display_name=self.display_name,
            domain=self.domain,
            kind=EntityKind(self.kind),
            attributes=attrs,
            active=bool(self.active),
        )


class AliasRow(Base):
    __tablename__ = "aliases"

    domain: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(16), primary_key=True)
    entity_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    alias_text: Mapped[str] = mapped_column(String(255), primary_key=True)
    alias_type: Mapped[str] = mapped_column(String(32))

    __table_args__ = (
        ForeignKeyConstraint(
            ["domain", "kind", "entity_id"],
            ["entities.domain", "entities.kind", "entities.entity_id"],
            ondelete="CASCADE",
        ),
        Index("ix_aliases_domain_kind_text", "domain", "kind", "alias_text"),
    )

    def to_alias(self) -> Alias:
        return Alias(
            entity_id=self.entity_id,
            alias_text=self.alias_text,
            alias_type=self.alias_type,
        )
