# sports/proxy/api/dependencies.py
"""
FastAPI dependencies for request-scoped services.
"""
from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from sports.proxy.contracts.infrastructure import Infrastructure

logger = logging.getLogger(__name__)


def get_infra(request: Request) -> Infrastructure:
    infra = getattr(request.app.state, "infra", None)
    if infra is None:
        raise HTTPException(status_code=503, detail="Application is not initialised")
    return infra


def canonical_domain(infra: Infrastructure, domain: str) -> str:
    """Normalise a domain name or alias; 404 if unknown."""
    name = infra.domains.normalize(domain)
    if name is None:
        raise HTTPException(
            status_code=404,
            detail=f"Domain '{domain}' not found. Available: {infra.domains.names()}",
        )
    return name
