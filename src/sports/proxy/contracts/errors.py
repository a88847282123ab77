# sports/proxy/contracts/errors.py
"""
Error taxonomy.

A resolution miss is *not* an exception: it is a ``ResolutionResult`` with
no matched entity. Everything here describes a failed call.
"""
from __future__ import annotations

from typing import Any


class SportsProxyError(Exception):
    """Base class for errors surfaced as per-invocation error entries."""

    kind = "internal_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message}

    def __str__(self) -> str:
        return self.message


class BackendUnavailable(SportsProxyError):
    """A domain tool call or schema fetch failed or timed out."""

    kind = "backend_unavailable"

    def __init__(
        self,
        message: str,
        *,
        domain: str | None = None,
        tool: str | None = None,
    ) -> None:
        self.domain = domain
        self.tool = tool
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "domain": self.domain, "tool": self.tool}


class ResolutionFailure(BackendUnavailable):
    """The entity store failed while resolving (distinct from 'not found')."""

    kind = "resolution_failed"


class StoreError(SportsProxyError):
    """Backing relational store error."""

    kind = "store_error"


class InvalidInvocation(SportsProxyError):
    """A dependent tool lacks a required identifier after enrichment."""

    kind = "invalid_invocation"

    def __init__(
        self,
        tool: str,
        missing: list[str],
        message: str | None = None,
    ) -> None:
        self.tool = tool
        self.missing = list(missing)
        super().__init__(
            message
            or f"Tool '{tool}' requires {', '.join(missing)} and no resolver supplied it"
        )

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "tool": self.tool, "missing": self.missing}


class StaleSchema(Warning):
    """Registry served a cached-but-expired schema after a failed refresh.

    Used as a log marker only; never raised to callers.
    """
