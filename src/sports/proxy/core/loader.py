# sports/proxy/core/loader.py
"""
YAML configuration loading shared by the domain and client loaders.

Config files are matched by glob, read in sorted path order, and merged
section by section; ``${VAR}`` and ``${VAR:-default}`` placeholders are
expanded from the environment once an entry has been picked.
"""
from __future__ import annotations

import importlib
import logging
import os
import re
from glob import glob
from pathlib import Path
from typing import Any, Iterable

import yaml

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{(?P<var>[^}:]+)(?::-(?P<default>[^}]*))?\}")


def import_attr(path: str) -> Any:
    """Resolve ``package.module:attribute`` to the attribute itself."""
    mod_name, sep, attr = path.partition(":")
    if not sep or not mod_name or not attr:
        raise ValueError(f"Invalid import path '{path}', expected 'module:attr'")

    try:
        module = importlib.import_module(mod_name)
    except ImportError as exc:
        logger.error("Failed to import module '%s' for '%s'", mod_name, path)
        raise ImportError(f"Cannot import module '{mod_name}'") from exc

    if not hasattr(module, attr):
        logger.error("Module '%s' has no attribute '%s'", mod_name, attr)
        raise AttributeError(f"Module '{mod_name}' has no attribute '{attr}'")
    return getattr(module, attr)


def _expand_placeholder(match: re.Match[str]) -> str:
    var, default = match.group("var"), match.group("default")
    value = os.environ.get(var, default)
    if value is None:
        raise ValueError(f"Environment variable '{var}' is not set and no default provided")
    return value


def expand_env(value: Any) -> Any:
    """Expand environment placeholders in strings, recursing into containers."""
    if isinstance(value, str):
        return _PLACEHOLDER.sub(_expand_placeholder, value)
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    return value


def matching_files(patterns: Iterable[str]) -> list[Path]:
    found = {Path(m).resolve() for pattern in patterns for m in glob(pattern)}
    return sorted(found)


def load_yaml_files(patterns: Iterable[str]) -> list[dict[str, Any]]:
    """Parse every file matched by ``patterns``; empty files yield ``{}``."""
    patterns = list(patterns)
    files = matching_files(patterns)
    if not files:
        logger.warning("No config files found matching patterns: %s", patterns)
        return []

    logger.info("Loading config files: %s", [str(f) for f in files])
    documents: list[dict[str, Any]] = []
    for path in files:
        try:
            documents.append(yaml.safe_load(path.read_text(encoding="utf-8")) or {})
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load YAML file '%s': %s", path, exc)
            raise
    return documents


def _section_entries(raw: Any, section: str) -> list[dict[str, Any]]:
    if isinstance(raw, dict):
        return [{**(spec or {}), "name": name} for name, spec in raw.items()]
    if isinstance(raw, list):
        return list(raw)
    raise ValueError(
        f"Section '{section}' must be a mapping or a list, got {type(raw).__name__}"
    )


def load_named_sections(patterns: Iterable[str], section: str) -> dict[str, dict[str, Any]]:
    """Merge a named section across YAML files, later files winning by name.

    The section may be a mapping (``clients: {name: {...}}``) or a list of
    objects carrying a ``name`` key (``domains: [{name: ..., ...}]``).
    """
    merged: dict[str, dict[str, Any]] = {}
    for document in load_yaml_files(patterns):
        for entry in _section_entries(document.get(section) or {}, section):
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ValueError(f"Entry in '{section}' is missing a 'name': {entry!r}")
            merged[str(entry["name"])] = entry

    return {name: expand_env(entry) for name, entry in merged.items()}
