# sports/proxy/contracts/infrastructure.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from sports.proxy.core.cache.result_cache import ResultCache
    from sports.proxy.core.clients.registry import ClientsRegistry
    from sports.proxy.core.domain.registry import DomainRegistry
    from sports.proxy.core.extraction.extractor import IntentExtractor, SurfaceIndex
    from sports.proxy.core.pipeline.pipeline import OrchestrationPipeline
    from sports.proxy.core.registry.schema_registry import ToolSchemaRegistry
    from sports.proxy.core.resolver.registry import ResolverRegistry
    from sports.proxy.core.tools.invoker import ToolInvoker


@dataclass
class Infrastructure:
    """Application services, held on ``app.state.infra``."""

    # always present after create_app
    domains: DomainRegistry
    clients: ClientsRegistry
    resolvers: ResolverRegistry
    schemas: ToolSchemaRegistry
    cache: ResultCache
    invoker: ToolInvoker
    pipeline: OrchestrationPipeline
    extractor: IntentExtractor

    # populated by the lifespan as domain stores are opened
    indexes: dict[str, SurfaceIndex] = field(default_factory=dict)
    engines: dict[str, AsyncEngine] = field(default_factory=dict)
