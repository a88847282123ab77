# sports/proxy/core/cache/volatility.py
"""
Volatility classes: how long a tool result stays fresh.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class Volatility(str, Enum):
    LIVE = "live"
    STATS = "stats"
    METADATA = "metadata"
    FANTASY = "fantasy"


DEFAULT_TTLS: dict[Volatility, float] = {
    Volatility.LIVE: 10.0,
    Volatility.STATS: 60.0,
    Volatility.METADATA: 300.0,
    Volatility.FANTASY: 1800.0,
}

_EXACT: dict[str, Volatility] = {
    "get_live_game": Volatility.LIVE,
    "get_schedule": Volatility.LIVE,
    "get_player_stats": Volatility.STATS,
    "get_standings": Volatility.STATS,
    "get_team_info": Volatility.METADATA,
    "get_team_roster": Volatility.METADATA,
}

# First match wins.
_PREFIXES: tuple[tuple[str, Volatility], ...] = (
    ("resolve_", Volatility.METADATA),
    ("search_", Volatility.METADATA),
)
_FRAGMENTS: tuple[tuple[str, Volatility], ...] = (
    ("fantasy", Volatility.FANTASY),
    ("league", Volatility.FANTASY),
    ("live", Volatility.LIVE),
    ("stats", Volatility.STATS),
)


class VolatilityTable:
    """Maps tool names to a volatility class and TTL."""

    def __init__(
        self,
        ttls: dict[Volatility, float] | None = None,
        *,
        default: Volatility = Volatility.STATS,
    ) -> None:
        self._ttls = {**DEFAULT_TTLS, **(ttls or {})}
        self._default = default

    @classmethod
    def from_settings(cls, settings: Any) -> VolatilityTable:
        return cls(
            {
                Volatility.LIVE: settings.cache_ttl_live,
                Volatility.STATS: settings.cache_ttl_stats,
                Volatility.METADATA: settings.cache_ttl_metadata,
                Volatility.FANTASY: settings.cache_ttl_fantasy,
            }
        )

    def classify(self, tool_name: str) -> Volatility:
        if tool_name in _EXACT:
            return _EXACT[tool_name]
        for prefix, volatility in _PREFIXES:
            if tool_name.startswith(prefix):
                return volatility
        for fragment, volatility in _FRAGMENTS:
            if fragment in tool_name:
                return volatility
        return self._default

    def ttl_for(self, tool_name: str) -> float:
        return self._ttls[self.classify(tool_name)]

    def describe(self) -> dict[str, float]:
        return {v.value: ttl for v, ttl in self._ttls.items()}
