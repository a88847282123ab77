# sports/proxy/core/extraction/extractor.py
"""
Intent / entity extractor.

Turns free text plus the set of declared tools into an ordered list of
proposed invocations. Entity surface forms come from each domain's entity
store, so the extractor knows exactly the names its resolvers can resolve.
Arguments are only ever literal substrings of the input.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from sports.proxy.contracts.entity import EntityKind
from sports.proxy.contracts.errors import StoreError
from sports.proxy.contracts.tools import ToolInvocation, ToolSchema, resolver_kind
from sports.proxy.core.domain.registry import DomainRegistry
from sports.proxy.core.extraction.intents import matching_intents, mentions_phrase
from sports.proxy.core.store.repository import EntityStore, SurfaceForm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mention:
    """One entity reference found in the input."""

    literal: str
    kind: EntityKind
    entity_id: str
    start: int
    end: int


class SurfaceIndex:
    """Surface forms of one domain, loaded lazily from its entity store."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._forms: dict[str, list[SurfaceForm]] = {}
        self._patterns: list[tuple[re.Pattern[str], list[SurfaceForm]]] = []
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def domain(self) -> str:
        return self._store.domain

    @property
    def loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return sum(len(v) for v in self._forms.values())

    async def ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._lock:
            if not self._loaded:
                await self._load()

    async def refresh(self) -> None:
        async with self._lock:
            await self._load()

    async def _load(self) -> None:
        forms = await self._store.surface_forms()
        by_text: dict[str, list[SurfaceForm]] = {}
        for form in forms:
            by_text.setdefault(form.text, []).append(form)
        self._forms = by_text
        self._patterns = [
            (re.compile(rf"(?<!\w){re.escape(text)}(?!\w)"), group)
            for text, group in sorted(by_text.items())
        ]
        self._loaded = True
        logger.info(
            "Loaded %d surface form(s) for domain '%s'", len(forms), self.domain
        )

    def scan(self, text: str) -> list[Mention]:
        """Find entity mentions on word boundaries.

        Overlapping candidates keep the longest form; the survivors are
        returned in order of appearance.
        """
        lowered = text.lower()
        # lower() may change length for some code points
        source = text if len(lowered) == len(text) else lowered

        candidates: list[tuple[int, int, list[SurfaceForm]]] = []
        for pattern, group in self._patterns:
            for m in pattern.finditer(lowered):
                candidates.append((m.start(), m.end(), group))

        candidates.sort(key=lambda c: (-(c[1] - c[0]), c[0]))
        taken: list[tuple[int, int, list[SurfaceForm]]] = []
        for start, end, group in candidates:
            if all(end <= s or start >= e for s, e, _ in taken):
                taken.append((start, end, group))

        mentions: list[Mention] = []
        for start, end, group in sorted(taken, key=lambda c: c[0]):
            for form in group:
                mentions.append(
                    Mention(
                        literal=source[start:end],
                        kind=form.kind,
                        entity_id=form.entity_id,
                        start=start,
                        end=end,
                    )
                )
        return mentions


def _tool_names(declared_tools: Iterable[ToolSchema | str]) -> list[str]:
    names: list[str] = []
    for tool in declared_tools:
        name = tool if isinstance(tool, str) else tool.name
        if name not in names:
            names.append(name)
    return names


def _topic(tool_name: str) -> str:
    for prefix in ("get_", "resolve_"):
        if tool_name.startswith(prefix):
            tool_name = tool_name[len(prefix):]
            break
    return tool_name.replace("_", " ")


class IntentExtractor:
    """Proposes tool invocations from free text."""

    def __init__(
        self,
        *,
        domains: DomainRegistry,
        indexes: Mapping[str, SurfaceIndex],
    ) -> None:
        self._domains = domains
        self._indexes = indexes

    async def mentions(self, input_text: str, domain: str | None) -> list[Mention]:
        index = self._indexes.get(domain) if domain else None
        if index is None:
            return []
        try:
            await index.ensure_loaded()
        except StoreError as exc:
            # Without surface forms only intent and fallback proposals remain
            logger.warning("No entity mentions for '%s': %s", domain, exc)
            return []
        return index.scan(input_text)

    async def extract(
        self,
        input_text: str,
        declared_tools: Iterable[ToolSchema | str],
        *,
        domain: str | None = None,
    ) -> list[ToolInvocation]:
        tools = _tool_names(declared_tools)
        if not tools or not input_text or not input_text.strip():
            return []

        mentions = await self.mentions(input_text, domain)
        kinds_seen = {m.kind for m in mentions}

        proposals: list[ToolInvocation] = []
        seen_entities: set[tuple[EntityKind, str]] = set()
        for mention in mentions:
            key = (mention.kind, mention.entity_id)
            if key in seen_entities:
                continue
            seen_entities.add(key)
            tool = self._resolver_tool(tools, mention.kind)
            if tool is not None:
                proposals.append(ToolInvocation(tool, {"name": mention.literal}))

        for intent in matching_intents(input_text):
            if intent.tool not in tools:
                continue
            if intent.requires is not None and intent.requires not in kinds_seen:
                continue
            if any(p.tool_name == intent.tool for p in proposals):
                continue
            proposals.append(ToolInvocation(intent.tool, {}))

        if not proposals:
            proposals = self._fallback(input_text, tools, kinds_seen)

        logger.debug(
            "Extracted %d invocation(s) for domain '%s': %s",
            len(proposals), domain, [p.tool_name for p in proposals],
        )
        return proposals

    @staticmethod
    def _resolver_tool(tools: list[str], kind: EntityKind) -> str | None:
        preferred = f"resolve_{kind.value}"
        if preferred in tools:
            return preferred
        for name in tools:
            if resolver_kind(name) is kind:
                return name
        return None

    @staticmethod
    def _fallback(
        input_text: str,
        tools: list[str],
        kinds_seen: set[EntityKind],
    ) -> list[ToolInvocation]:
        out: list[ToolInvocation] = []
        for name in tools:
            if mentions_phrase(input_text, _topic(name)):
                out.append(ToolInvocation(name, {}))
                continue
            if not name.startswith("resolve_"):
                continue
            kind = resolver_kind(name)
            if kind is not None and (
                kind in kinds_seen or mentions_phrase(input_text, kind.value)
            ):
                out.append(ToolInvocation(name, {}))
        return out

    async def detect_domain(
        self,
        input_text: str,
        hint: str | None = None,
    ) -> str | None:
        """Pick the domain a request is about.

        An explicit hint wins when it names a known domain or alias. Otherwise
        the domain with the most keyword hits, then the one with the most
        entity mentions. Ties keep registration order.
        """
        if hint:
            canonical = self._domains.normalize(hint)
            if canonical is not None:
                return canonical
            logger.warning("Unknown domain hint '%s', detecting from input", hint)

        if not input_text:
            return None

        best: str | None = None
        best_hits = 0
        for spec in self._domains:
            phrases = {spec.name, *spec.aliases, *spec.keywords}
            hits = sum(1 for p in phrases if mentions_phrase(input_text, p))
            if hits > best_hits:
                best, best_hits = spec.name, hits
        if best is not None:
            return best

        for spec in self._domains:
            hits = len({(m.kind, m.entity_id) for m in await self.mentions(input_text, spec.name)})
            if hits > best_hits:
                best, best_hits = spec.name, hits
        return best
