"""Public contracts for the sports proxy."""
from sports.proxy.contracts.entity import (
    Alias,
    Entity,
    EntityKind,
    MatchType,
    ResolutionResult,
    Suggestion,
)
from sports.proxy.contracts.errors import (
    BackendUnavailable,
    InvalidInvocation,
    ResolutionFailure,
    SportsProxyError,
    StaleSchema,
    StoreError,
)
from sports.proxy.contracts.infrastructure import Infrastructure
from sports.proxy.contracts.tools import (
    Phase,
    ToolInvocation,
    ToolResult,
    ToolSchema,
    is_resolver_tool,
    resolver_kind,
)

__all__ = [
    "Alias", "Entity", "EntityKind", "MatchType", "ResolutionResult", "Suggestion",
    "BackendUnavailable", "InvalidInvocation", "ResolutionFailure",
    "SportsProxyError", "StaleSchema", "StoreError",
    "Phase", "ToolInvocation", "ToolResult", "ToolSchema",
    "is_resolver_tool", "resolver_kind",
    "Infrastructure",
]
