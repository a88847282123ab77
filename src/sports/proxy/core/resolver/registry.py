# sports/proxy/core/resolver/registry.py
"""
Resolver registry – one ``Resolver`` per domain.
"""
from __future__ import annotations

import logging
from typing import Iterator

from sports.proxy.core.resolver.base import Resolver

logger = logging.getLogger(__name__)


class ResolverRegistry:
    def __init__(self) -> None:
        self._resolvers: dict[str, Resolver] = {}

    def register(self, domain: str, resolver: Resolver) -> None:
        if domain in self._resolvers:
            raise ValueError(f"Resolver for domain '{domain}' already registered")
        self._resolvers[domain] = resolver
        logger.info("Registered resolver: %s (%s)", domain, type(resolver).__name__)

    def get(self, domain: str) -> Resolver:
        try:
            return self._resolvers[domain]
        except KeyError:
            raise KeyError(
                f"Resolver for domain '{domain}' not found. Available: {list(self._resolvers)}"
            )

    def has(self, domain: str) -> bool:
        return domain in self._resolvers

    def list(self) -> list[str]:
        return list(self._resolvers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._resolvers)

    def __len__(self) -> int:
        return len(self._resolvers)

    def __contains__(self, domain: str) -> bool:
        return domain in self._resolvers
