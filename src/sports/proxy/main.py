# sports/proxy/main.py
"""
Sports proxy application factory.

Creates a FastAPI application that resolves entity names, orchestrates tool
calls across sports domains and keeps a live registry of each domain's tools.
Domains and backend clients are declared in YAML; entity stores are opened
and seeded in the lifespan.
"""
from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import cast

from fastapi import FastAPI

from sports.proxy.api.discovery import router as discovery_router
from sports.proxy.api.invoke import router as invoke_router
from sports.proxy.contracts.infrastructure import Infrastructure
from sports.proxy.core.cache.result_cache import ResultCache
from sports.proxy.core.cache.volatility import VolatilityTable
from sports.proxy.core.clients.loader import load_and_register_clients
from sports.proxy.core.clients.registry import ClientsRegistry
from sports.proxy.core.config import Settings, settings as default_settings
from sports.proxy.core.domain.config import DomainSpec, load_domains_config
from sports.proxy.core.domain.registry import DomainRegistry
from sports.proxy.core.extraction.extractor import IntentExtractor, SurfaceIndex
from sports.proxy.core.pipeline.pipeline import OrchestrationPipeline
from sports.proxy.core.registry.schema_cache import FileSchemaCache
from sports.proxy.core.registry.schema_registry import ToolSchemaRegistry
from sports.proxy.core.resolver.registry import ResolverRegistry
from sports.proxy.core.resolver.store_resolver import StoreResolver
from sports.proxy.core.store import (
    EntityStore,
    create_schema,
    create_sessionmaker,
    create_store_engine,
    load_seed_file,
    seed_store,
)
from sports.proxy.core.tools.invoker import ToolInvoker
from sports.proxy.core.tools.local import LOCAL_TOOLS

logger = logging.getLogger(__name__)


# -- Helpers -------------------------------------------------------------------


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stdout,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )


async def _open_domain(infra: Infrastructure, spec: DomainSpec, cfg: Settings) -> None:
    """Open the domain's entity store (if any) and register its tool sources."""
    has_store = spec.database_url is not None

    if has_store:
        engine = infra.engines.get(spec.database_url)
        if engine is None:
            engine = create_store_engine(spec.database_url)
            infra.engines[spec.database_url] = engine
        if spec.create_schema:
            await create_schema(engine)

        sessionmaker = create_sessionmaker(engine)
        if spec.seed:
            counts = await seed_store(
                sessionmaker, load_seed_file(spec.seed), domain=spec.name
            )
            logger.info("Domain '%s' store seeded from %s: %s", spec.name, spec.seed, counts)

        store = EntityStore(domain=spec.name, sessionmaker=sessionmaker)
        infra.resolvers.register(
            spec.name, StoreResolver(store, suggestion_limit=cfg.suggestion_limit)
        )
        infra.indexes[spec.name] = SurfaceIndex(store)

    source = None
    if spec.backend:
        if infra.clients.has(spec.backend):
            source = infra.clients.get(spec.backend)
        else:
            logger.warning(
                "Domain '%s' references unknown client '%s'. Available: %s",
                spec.name, spec.backend, infra.clients.list(),
            )

    infra.schemas.add_domain(
        spec.name,
        source,
        local_tools=list(LOCAL_TOOLS) if has_store else None,
    )


# -- Lifespan ------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async finalization: clients, domain stores, schema registry."""
    infra = cast(Infrastructure, app.state.infra)
    cfg = cast(Settings, app.state.settings)

    # 1. Clients
    try:
        load_and_register_clients(
            patterns=cfg.clients_config_paths,
            registry=infra.clients,
            defaults={"timeout": cfg.tool_timeout},
        )
    except Exception:
        logger.exception("Failed to load clients")
        raise

    # 2. Domain stores and schema sources
    for spec in list(infra.domains):
        try:
            await _open_domain(infra, spec, cfg)
            logger.info("Domain '%s' opened", spec.name)
        except Exception:
            logger.exception("Domain '%s' startup failed", spec.name)
            raise

    # 3. Schema registry: initial refresh + periodic task
    await infra.schemas.start()

    yield

    # Shutdown
    await infra.schemas.shutdown()
    for url, engine in infra.engines.items():
        try:
            await engine.dispose()
        except Exception:
            logger.exception("Failed to dispose store engine for %s", url.split("@")[-1])
    infra.engines.clear()


# -- Application factory -------------------------------------------------------


def create_app(cfg: Settings | None = None) -> FastAPI:
    """Build and wire the sports proxy FastAPI application."""
    cfg = cfg or default_settings
    _configure_logging(cfg.log_level)
    logger.info("Creating sports proxy application (env=%s)", cfg.app_env)

    # 1. Domains
    domains = DomainRegistry()
    try:
        for spec in load_domains_config(cfg.domains_config_paths).domains:
            if not spec.enabled:
                logger.info("Skipping disabled domain '%s'", spec.name)
                continue
            domains.register(spec)
    except Exception:
        logger.exception("Failed to load domains")
        raise

    # 2. Core services; surface indexes are filled in by the lifespan
    indexes: dict[str, SurfaceIndex] = {}
    clients = ClientsRegistry()
    resolvers = ResolverRegistry()
    cache = ResultCache(volatility=VolatilityTable.from_settings(cfg))
    schemas = ToolSchemaRegistry(
        cache=FileSchemaCache(cfg.schema_cache_dir),
        normalize=domains.normalize,
        refresh_interval=cfg.schema_refresh_interval,
        timeout=cfg.schema_fetch_timeout,
    )
    invoker = ToolInvoker(
        domains=domains,
        resolvers=resolvers,
        clients=clients,
        timeout=cfg.tool_timeout,
    )

    infra = Infrastructure(
        domains=domains,
        clients=clients,
        resolvers=resolvers,
        schemas=schemas,
        cache=cache,
        invoker=invoker,
        pipeline=OrchestrationPipeline(invoker=invoker, cache=cache),
        extractor=IntentExtractor(domains=domains, indexes=indexes),
        indexes=indexes,
    )

    # 3. FastAPI app
    app = FastAPI(
        title="Sports Proxy",
        version="1.0.0",
        description="Entity resolution and tool orchestration across sports domains",
        lifespan=lifespan,
    )

    app.state.infra = infra
    app.state.settings = cfg

    app.include_router(discovery_router)
    app.include_router(invoke_router)

    logger.info(
        "Sports proxy ready: %d domain(s) %s; stores and clients finalized in lifespan",
        len(domains),
        domains.names(),
    )
    return app
