from sports.proxy.core.registry.schema_cache import (
    CachedSchemas,
    FileSchemaCache,
    InMemorySchemaCache,
    SchemaCache,
)
from sports.proxy.core.registry.schema_registry import (
    DomainSchemas,
    SchemaSource,
    ToolSchemaRegistry,
)

__all__ = [
    "CachedSchemas",
    "FileSchemaCache",
    "InMemorySchemaCache",
    "SchemaCache",
    "DomainSchemas",
    "SchemaSource",
    "ToolSchemaRegistry",
]
