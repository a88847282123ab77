# sports/proxy/core/clients/registry.py
"""
Registry of domain backend clients, addressed by the names used in YAML.
"""
from __future__ import annotations

import logging
from typing import Any, Iterator, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ToolBackend(Protocol):
    """What a domain needs from its backend: schemas and tool calls."""

    async def fetch_schema(self) -> list[dict[str, Any]]:
        ...

    async def call_tool(
        self,
        *,
        path: str,
        endpoint: str,
        query: dict[str, Any],
    ) -> Any:
        ...


class ClientsRegistry:
    def __init__(self) -> None:
        self._backends: dict[str, ToolBackend] = {}

    def register(self, name: str, client: ToolBackend) -> None:
        if name in self._backends:
            raise ValueError(f"Client '{name}' already registered")
        if not isinstance(client, ToolBackend):
            raise TypeError(
                f"Client '{name}' ({type(client).__name__}) must provide "
                "fetch_schema() and call_tool()"
            )
        self._backends[name] = client
        logger.info(
            "Registered client: %s (%s -> %s)",
            name, type(client).__name__, getattr(client, "base_url", "?"),
        )

    def get(self, name: str) -> ToolBackend:
        backend = self._backends.get(name)
        if backend is None:
            raise KeyError(f"Client '{name}' not found. Available: {self.list()}")
        return backend

    def has(self, name: str) -> bool:
        return name in self._backends

    def list(self) -> list[str]:
        return sorted(self._backends)

    def describe(self) -> dict[str, dict[str, Any]]:
        """Client name to class and base URL, for the status endpoint."""
        return {
            name: {
                "class": type(backend).__name__,
                "base_url": getattr(backend, "base_url", None),
            }
            for name, backend in sorted(self._backends.items())
        }

    def __iter__(self) -> Iterator[str]:
        return iter(self.list())

    def __contains__(self, name: str) -> bool:
        return name in self._backends
