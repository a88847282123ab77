"""Entity resolution: per-domain resolvers backed by the entity store."""
from sports.proxy.core.resolver.base import Resolver
from sports.proxy.core.resolver.registry import ResolverRegistry
from sports.proxy.core.resolver.store_resolver import StoreResolver

__all__ = ["Resolver", "ResolverRegistry", "StoreResolver"]
