# sports/proxy/core/clients/loader.py
"""
Client loader – reads config/clients.yaml and registers live client instances.
"""
from __future__ import annotations

import inspect
import logging
from typing import Any, Iterable

from sports.proxy.core.clients.registry import ClientsRegistry
from sports.proxy.core.loader import import_attr, load_named_sections

logger = logging.getLogger(__name__)


def load_and_register_clients(
    *,
    patterns: Iterable[str],
    registry: ClientsRegistry,
    defaults: dict[str, Any] | None = None,
) -> None:
    """Load client definitions from YAML and register live instances.

    Expected YAML::

        clients:
          baseball_stats:
            class: sports.proxy.core.clients.backend:DomainBackendClient
            config:
              base_url: "${BASEBALL_STATS_URL:-http://localhost:8782}"
              timeout: 15.0

    ``defaults`` are passed to constructors that accept them and whose
    config does not set them (e.g. ``timeout``).
    """
    specs = load_named_sections(patterns, "clients")
    if not specs:
        logger.debug("No client config files matched: %s", list(patterns))
        return

    for name, spec in specs.items():
        class_path = spec.get("class")
        if not class_path:
            raise ValueError(f"Client '{name}' is missing 'class'")

        cls = import_attr(class_path)
        kwargs = dict(spec.get("config") or {})

        params = inspect.signature(cls.__init__).parameters
        for key, value in (defaults or {}).items():
            if key in params and key not in kwargs:
                kwargs[key] = value

        registry.register(name, cls(**kwargs))

    logger.info("Registered %d client(s): %s", len(registry.list()), registry.list())
