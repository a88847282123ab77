# sports/proxy/contracts/tools.py
"""
Tool contracts.

Tools follow the function-calling convention::

    {"type": "function",
     "function": {"name": ..., "description": ..., "parameters": {...}}}

A resolver tool maps a free-text name to a canonical identifier; every other
tool is a dependent tool that may need identifiers produced by resolvers.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from sports.proxy.contracts.entity import EntityKind

# resolve_team, resolve_player, resolve_baseball_team, ...
_RESOLVER_NAME = re.compile(r"^resolve_(?:[a-z0-9]+_)*?(team|player)$")


class Phase(str, Enum):
    RESOLVER = "resolver"
    DEPENDENT = "dependent"


def resolver_kind(tool_name: str) -> EntityKind | None:
    """Return the entity kind a resolver tool produces, or None."""
    m = _RESOLVER_NAME.match(tool_name)
    if m is None:
        return None
    return EntityKind(m.group(1))


def is_resolver_tool(tool_name: str) -> bool:
    return resolver_kind(tool_name) is not None


@dataclass(frozen=True)
class ToolSchema:
    """Declarative description of one invocable tool plus registry metadata."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    domain: str | None = None
    fetched_at: datetime | None = None

    @property
    def required(self) -> list[str]:
        return list(self.parameters.get("required") or [])

    @classmethod
    def from_function(
        cls,
        raw: dict[str, Any],
        *,
        domain: str | None = None,
        fetched_at: datetime | None = None,
    ) -> ToolSchema:
        """Parse a function-calling schema (or a bare ``{name, ...}`` dict)."""
        if not isinstance(raw, dict):
            raise ValueError(f"Tool schema must be an object, got {type(raw).__name__}")
        fn = raw.get("function") if raw.get("type") == "function" else raw
        if not isinstance(fn, dict) or not fn.get("name"):
            raise ValueError("Tool schema is missing 'function.name'")
        return cls(
            name=str(fn["name"]),
            description=str(fn.get("description") or ""),
            parameters=fn.get("parameters") or {"type": "object", "properties": {}},
            domain=domain,
            fetched_at=fetched_at,
        )

    def to_function(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def with_meta(self, *, domain: str, fetched_at: datetime | None) -> ToolSchema:
        return replace(self, domain=domain, fetched_at=fetched_at)


@dataclass(frozen=True)
class ToolInvocation:
    """A proposed or executed tool call.

    Enrichment never mutates an invocation; it produces a copy via
    ``with_arguments``.
    """

    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    enriched: bool = False

    @property
    def phase(self) -> Phase:
        return Phase.RESOLVER if is_resolver_tool(self.tool_name) else Phase.DEPENDENT

    @property
    def kind(self) -> EntityKind | None:
        return resolver_kind(self.tool_name)

    def with_arguments(self, arguments: dict[str, Any], *, enriched: bool) -> ToolInvocation:
        return replace(self, arguments=dict(arguments), enriched=enriched)


@dataclass(frozen=True)
class ToolResult:
    """Per-invocation outcome: either a payload or an error entry."""

    tool_name: str
    arguments: dict[str, Any]
    success: bool
    result: Any = None
    error: str | None = None
    error_kind: str | None = None
    enriched: bool = False
    cached: bool = False

    @classmethod
    def ok(
        cls,
        invocation: ToolInvocation,
        result: Any,
        *,
        cached: bool = False,
    ) -> ToolResult:
        return cls(
            tool_name=invocation.tool_name,
            arguments=dict(invocation.arguments),
            success=True,
            result=result,
            enriched=invocation.enriched,
            cached=cached,
        )

    @classmethod
    def failed(
        cls,
        invocation: ToolInvocation,
        error: str,
        *,
        error_kind: str,
    ) -> ToolResult:
        return cls(
            tool_name=invocation.tool_name,
            arguments=dict(invocation.arguments),
            success=False,
            error=error,
            error_kind=error_kind,
            enriched=invocation.enriched,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "tool_name": self.tool_name,
            "arguments": self.arguments,
            "success": self.success,
            "enriched": self.enriched,
            "cached": self.cached,
        }
        if self.success:
            out["result"] = self.result
        else:
            out["error"] = self.error
            out["error_kind"] = self.error_kind
        return out
