# sports/proxy/api/invoke.py
"""
Request entry points: orchestrated invocation and direct resolver access.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from sports.proxy.api.dependencies import canonical_domain, get_infra
from sports.proxy.api.schemas import (
    InvocationIn,
    InvokeRequest,
    InvokeResponse,
    ResolveBatchRequest,
    ResolvePlayerRequest,
    ResolveTeamRequest,
    SearchPlayersRequest,
    SearchTeamsRequest,
)
from sports.proxy.contracts.errors import ResolutionFailure
from sports.proxy.contracts.infrastructure import Infrastructure
from sports.proxy.contracts.tools import ToolInvocation, ToolSchema
from sports.proxy.core.resolver.base import Resolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/invoke", response_model=InvokeResponse)
async def invoke(
    body: InvokeRequest,
    infra: Infrastructure = Depends(get_infra),
) -> InvokeResponse:
    domain = await infra.extractor.detect_domain(body.input, body.domain)
    if domain is None:
        if body.domain:
            raise HTTPException(
                status_code=404,
                detail=f"Domain '{body.domain}' not found. Available: {infra.domains.names()}",
            )
        raise HTTPException(
            status_code=400,
            detail="Could not determine the domain of this request; pass 'domain'",
        )

    if body.tools is not None:
        try:
            tools = [ToolSchema.from_function(t, domain=domain) for t in body.tools]
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    else:
        tools = await infra.schemas.tools_for(domain)

    if body.invocations is not None:
        invocations = [ToolInvocation(i.tool_name, dict(i.arguments)) for i in body.invocations]
    else:
        invocations = await infra.extractor.extract(body.input, tools, domain=domain)

    results = await infra.pipeline.execute(invocations, domain=domain)

    failed = sum(1 for r in results if not r.success)
    logger.info(
        "Invoked %d tool(s) in '%s' (%d failed)", len(results), domain, failed
    )
    return InvokeResponse(
        domain=domain,
        tools_available=[t.name for t in tools],
        invocations=[InvocationIn(tool_name=i.tool_name, arguments=i.arguments) for i in invocations],
        results=[r.to_dict() for r in results],
    )


def _resolver(infra: Infrastructure, domain: str) -> Resolver:
    name = canonical_domain(infra, domain)
    try:
        return infra.resolvers.get(name)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


def _store_failed(exc: ResolutionFailure) -> HTTPException:
    logger.warning("Resolution failed: %s", exc)
    return HTTPException(status_code=503, detail=exc.to_dict())


@router.post("/resolve/team")
async def resolve_team(
    body: ResolveTeamRequest,
    infra: Infrastructure = Depends(get_infra),
) -> dict:
    resolver = _resolver(infra, body.domain)
    try:
        result = await resolver.resolve_team(
            body.name, fuzzy=body.fuzzy, include_detail=body.include_detail
        )
    except ResolutionFailure as exc:
        raise _store_failed(exc)
    return result.to_dict()


@router.post("/resolve/player")
async def resolve_player(
    body: ResolvePlayerRequest,
    infra: Infrastructure = Depends(get_infra),
) -> dict:
    resolver = _resolver(infra, body.domain)
    try:
        result = await resolver.resolve_player(
            body.name,
            fuzzy=body.fuzzy,
            include_detail=body.include_detail,
            team=body.team,
        )
    except ResolutionFailure as exc:
        raise _store_failed(exc)
    return result.to_dict()


@router.post("/resolve/batch")
async def resolve_batch(
    body: ResolveBatchRequest,
    infra: Infrastructure = Depends(get_infra),
) -> dict:
    resolver = _resolver(infra, body.domain)
    try:
        return await resolver.resolve_batch(
            [e.model_dump() for e in body.entities],
            fuzzy=body.fuzzy,
            include_detail=body.include_detail,
        )
    except ResolutionFailure as exc:
        raise _store_failed(exc)


@router.post("/search/teams")
async def search_teams(
    body: SearchTeamsRequest,
    infra: Infrastructure = Depends(get_infra),
) -> dict:
    resolver = _resolver(infra, body.domain)
    try:
        teams = await resolver.search_teams(
            query=body.query,
            division=body.division,
            league=body.league,
            conference=body.conference,
            limit=body.limit,
        )
    except ResolutionFailure as exc:
        raise _store_failed(exc)
    return {"teams": [t.to_dict() for t in teams], "count": len(teams)}


@router.post("/search/players")
async def search_players(
    body: SearchPlayersRequest,
    infra: Infrastructure = Depends(get_infra),
) -> dict:
    resolver = _resolver(infra, body.domain)
    try:
        players = await resolver.search_players(
            query=body.query,
            team=body.team,
            position=body.position,
            active=body.active,
            limit=body.limit,
        )
    except ResolutionFailure as exc:
        raise _store_failed(exc)
    return {"players": [p.to_dict() for p in players], "count": len(players)}
