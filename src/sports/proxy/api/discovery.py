# sports/proxy/api/discovery.py
"""
Root-level discovery, health and tool registry endpoints.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from sports.proxy.api.dependencies import canonical_domain, get_infra
from sports.proxy.contracts.errors import SportsProxyError
from sports.proxy.contracts.infrastructure import Infrastructure

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(infra: Infrastructure = Depends(get_infra)) -> dict:
    registry = infra.schemas.status()
    unavailable = [d for d, s in registry.items() if not s["available"]]
    return {
        "status": "degraded" if unavailable else "healthy",
        "domains": len(infra.domains),
        "unavailable": unavailable,
    }


@router.get("/status")
async def status(infra: Infrastructure = Depends(get_infra)) -> dict:
    stores: dict[str, dict | None] = {}
    for domain in infra.resolvers:
        store = getattr(infra.resolvers.get(domain), "store", None)
        if store is None:
            continue
        try:
            stores[domain] = await store.counts()
        except SportsProxyError as exc:
            logger.warning("Store counts unavailable for '%s': %s", domain, exc)
            stores[domain] = None

    return {
        "registry": infra.schemas.status(),
        "cache": infra.cache.stats(),
        "stores": stores,
        "clients": infra.clients.describe(),
    }


@router.get("/domains")
async def list_domains(infra: Infrastructure = Depends(get_infra)) -> list[dict]:
    """Discover all registered domains and their configuration."""
    return infra.domains.list()


@router.get("/tools/search")
async def search_tools(
    q: str = "",
    domain: str | None = None,
    infra: Infrastructure = Depends(get_infra),
) -> dict:
    if domain is not None:
        domain = canonical_domain(infra, domain)
    tools = infra.schemas.search_tools(q, domain)
    return {
        "query": q,
        "count": len(tools),
        "tools": [{"domain": t.domain, **t.to_function()} for t in tools],
    }


@router.get("/tools/{domain}")
async def list_tools(domain: str, infra: Infrastructure = Depends(get_infra)) -> dict:
    name = canonical_domain(infra, domain)
    tools = await infra.schemas.tools_for(name)
    state = infra.schemas.status().get(name, {})
    return {
        "domain": name,
        "available": state.get("available", False),
        "stale": state.get("stale", False),
        "tools": [t.to_function() for t in tools],
    }


@router.post("/tools/{domain}/refresh")
async def refresh_tools(domain: str, infra: Infrastructure = Depends(get_infra)) -> dict:
    name = canonical_domain(infra, domain)
    try:
        await infra.schemas.refresh(name)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    index = infra.indexes.get(name)
    if index is not None:
        await index.refresh()
    return {"domain": name, **infra.schemas.status()[name]}
