# sports/proxy/api/schemas.py
"""
Request and response models of the HTTP surface.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class InvocationIn(BaseModel):
    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class InvokeRequest(BaseModel):
    input: str = ""
    domain: str | None = None
    tools: list[dict[str, Any]] | None = Field(
        default=None,
        description="Function-calling tool schemas; defaults to the registry's tools",
    )
    invocations: list[InvocationIn] | None = Field(
        default=None,
        description="Model-proposed calls; when set, extraction is skipped",
    )


class InvokeResponse(BaseModel):
    domain: str
    tools_available: list[str]
    invocations: list[InvocationIn]
    results: list[dict[str, Any]]


class ResolveTeamRequest(BaseModel):
    domain: str
    name: str
    fuzzy: bool = True
    include_detail: bool = False


class ResolvePlayerRequest(ResolveTeamRequest):
    team: str | None = None


class BatchEntity(BaseModel):
    type: Literal["team", "player"]
    name: str
    team: str | None = None


class ResolveBatchRequest(BaseModel):
    domain: str
    entities: list[BatchEntity] = Field(min_length=1, max_length=50)
    fuzzy: bool = True
    include_detail: bool = False


class SearchTeamsRequest(BaseModel):
    domain: str
    query: str | None = None
    division: str | None = None
    league: str | None = None
    conference: str | None = None
    limit: int = Field(default=10, ge=1, le=100)


class SearchPlayersRequest(BaseModel):
    domain: str
    query: str | None = None
    team: str | None = None
    position: str | None = None
    active: bool | None = True
    limit: int = Field(default=10, ge=1, le=100)
