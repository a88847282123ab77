# sports/proxy/core/registry/schema_cache.py
"""
Durable last-known-good copies of each domain's tool schemas.

The registry falls back to these when a live fetch fails, regardless of
their age.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sports.proxy.contracts.tools import ToolSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedSchemas:
    domain: str
    tools: list[ToolSchema]
    fetched_at: datetime | None


class SchemaCache(ABC):
    @abstractmethod
    def load(self, domain: str) -> CachedSchemas | None:
        """Return the stored copy, or None when absent or unreadable."""

    @abstractmethod
    def save(self, domain: str, tools: list[ToolSchema], fetched_at: datetime) -> None:
        ...

    @abstractmethod
    def delete(self, domain: str) -> None:
        ...


class InMemorySchemaCache(SchemaCache):
    def __init__(self) -> None:
        self._store: dict[str, CachedSchemas] = {}

    def load(self, domain: str) -> CachedSchemas | None:
        return self._store.get(domain)

    def save(self, domain: str, tools: list[ToolSchema], fetched_at: datetime) -> None:
        self._store[domain] = CachedSchemas(domain, list(tools), fetched_at)

    def delete(self, domain: str) -> None:
        self._store.pop(domain, None)

    def __contains__(self, domain: str) -> bool:
        return domain in self._store


class FileSchemaCache(SchemaCache):
    """One JSON document per domain under ``directory``.

    Layout::

        {directory}/{domain}.json
            {"domain": ..., "fetched_at": iso8601, "tools": [function schema, ...]}
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    def _path(self, domain: str) -> Path:
        return self._dir / f"{domain}.json"

    def load(self, domain: str) -> CachedSchemas | None:
        path = self._path(domain)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            fetched_at = raw.get("fetched_at")
            ts = datetime.fromisoformat(fetched_at) if fetched_at else None
            tools = [
                ToolSchema.from_function(t, domain=domain, fetched_at=ts)
                for t in raw.get("tools", [])
            ]
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("Unreadable schema cache for '%s' at %s: %s", domain, path, exc)
            return None
        return CachedSchemas(domain, tools, ts)

    def save(self, domain: str, tools: list[ToolSchema], fetched_at: datetime) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        doc = {
            "domain": domain,
            "fetched_at": fetched_at.isoformat(),
            "tools": [t.to_function() for t in tools],
        }
        # write-then-rename so readers never see a partial file
        fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=f".{domain}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, indent=2)
            os.replace(tmp, self._path(domain))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def delete(self, domain: str) -> None:
        self._path(domain).unlink(missing_ok=True)
