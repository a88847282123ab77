# sports/proxy/core/domain/registry.py
"""
Domain registry – stores domain specs and normalises domain names.
"""
from __future__ import annotations

import logging
from typing import Iterator

from sports.proxy.core.domain.config import DomainSpec

logger = logging.getLogger(__name__)

# League abbreviations accepted for every deployment.
DEFAULT_ALIASES: dict[str, str] = {
    "mlb": "baseball",
    "nhl": "hockey",
    "nfl": "football",
    "nba": "basketball",
}


class DomainRegistry:
    """Registry of enabled domains, addressable by name or alias."""

    def __init__(self) -> None:
        self._domains: dict[str, DomainSpec] = {}
        self._aliases: dict[str, str] = {}

    def register(self, spec: DomainSpec) -> None:
        if spec.name in self._domains:
            raise ValueError(f"Domain '{spec.name}' is already registered")

        for alias in spec.aliases:
            owner = self._aliases.get(alias)
            if owner is not None and owner != spec.name:
                raise ValueError(
                    f"Domain '{spec.name}' wants alias '{alias}' "
                    f"but '{owner}' already owns it"
                )

        self._domains[spec.name] = spec
        for alias in spec.aliases:
            self._aliases[alias] = spec.name
        logger.info("Registered domain: %s", spec.name)

    def unregister(self, name: str) -> DomainSpec:
        spec = self.get(name)
        del self._domains[spec.name]
        self._aliases = {a: d for a, d in self._aliases.items() if d != spec.name}
        return spec

    def normalize(self, name: str | None) -> str | None:
        """Map a domain name or alias to its canonical name (None if unknown)."""
        if not name:
            return None
        key = name.strip().lower()
        if key in self._domains:
            return key
        target = self._aliases.get(key) or DEFAULT_ALIASES.get(key)
        if target in self._domains:
            return target
        return None

    def get(self, name: str) -> DomainSpec:
        canonical = self.normalize(name)
        if canonical is None:
            raise KeyError(
                f"Domain '{name}' not found. Available: {list(self._domains)}"
            )
        return self._domains[canonical]

    def names(self) -> list[str]:
        return list(self._domains)

    def list(self) -> list[dict]:
        return [d.describe() for d in self._domains.values()]

    def __iter__(self) -> Iterator[DomainSpec]:
        return iter(self._domains.values())

    def __len__(self) -> int:
        return len(self._domains)

    def __contains__(self, name: str) -> bool:
        return self.normalize(name) is not None
