"""Relational entity store: schema, read repository and seed loader."""
from sports.proxy.core.store.db import (
    Base,
    create_schema,
    create_sessionmaker,
    create_store_engine,
)
from sports.proxy.core.store.repository import EntityStore, SurfaceForm
from sports.proxy.core.store.seed import load_seed_file, seed_store

__all__ = [
    "Base", "create_schema", "create_sessionmaker", "create_store_engine",
    "EntityStore", "SurfaceForm",
    "load_seed_file", "seed_store",
]
