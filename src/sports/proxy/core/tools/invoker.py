# sports/proxy/core/tools/invoker.py
"""
Tool invocation boundary.

Every tool call of a request passes through ``ToolInvoker.invoke``: local
tools go to the domain's resolver, everything else to the domain backend
configured in YAML. Each call is bounded by the tool timeout.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from sports.proxy.contracts.errors import BackendUnavailable
from sports.proxy.contracts.tools import ToolInvocation
from sports.proxy.core.clients.registry import ClientsRegistry
from sports.proxy.core.domain.registry import DomainRegistry
from sports.proxy.core.resolver.registry import ResolverRegistry
from sports.proxy.core.tools.local import call_local_tool, is_local_tool

logger = logging.getLogger(__name__)


class ToolInvoker:
    def __init__(
        self,
        *,
        domains: DomainRegistry,
        resolvers: ResolverRegistry,
        clients: ClientsRegistry,
        timeout: float = 15.0,
    ) -> None:
        self._domains = domains
        self._resolvers = resolvers
        self._clients = clients
        self._timeout = timeout

    async def invoke(self, domain: str, invocation: ToolInvocation) -> Any:
        """Execute one invocation and return its payload.

        Raises:
            BackendUnavailable: backend failure or timeout.
            ResolutionFailure: entity store failure in a local tool.
            InvalidInvocation: arguments rejected by a local tool's schema.
        """
        try:
            return await asyncio.wait_for(
                self._dispatch(domain, invocation), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Tool '%s' in '%s' timed out after %ss",
                invocation.tool_name, domain, self._timeout,
            )
            raise BackendUnavailable(
                f"Tool '{invocation.tool_name}' timed out after {self._timeout}s",
                domain=domain,
                tool=invocation.tool_name,
            ) from exc
        except BackendUnavailable as exc:
            if exc.domain is None:
                exc.domain = domain
            exc.tool = invocation.tool_name
            raise

    async def _dispatch(self, domain: str, invocation: ToolInvocation) -> Any:
        name = invocation.tool_name

        if is_local_tool(name) and self._resolvers.has(domain):
            return await call_local_tool(
                self._resolvers.get(domain), name, invocation.arguments
            )

        spec = self._domains.get(domain)
        if not spec.backend or not self._clients.has(spec.backend):
            raise BackendUnavailable(
                f"No backend configured for domain '{domain}'",
                domain=domain,
                tool=name,
            )

        route = spec.route_for(name)
        client = self._clients.get(spec.backend)
        logger.debug(
            "Calling backend '%s' path=%s endpoint=%s", spec.backend, route.path, route.endpoint
        )
        return await client.call_tool(
            path=route.path,
            endpoint=route.endpoint,
            query=dict(invocation.arguments),
        )
