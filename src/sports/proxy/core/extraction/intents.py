# sports/proxy/core/extraction/intents.py
"""
Static intent table.

Each intent maps trigger keywords to the one dependent tool it proposes and,
optionally, the entity kind that must be mentioned for the tool to make
sense (a roster needs a team, player stats need a player).
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from sports.proxy.contracts.entity import EntityKind


@dataclass(frozen=True)
class Intent:
    category: str
    keywords: tuple[str, ...]
    tool: str
    requires: EntityKind | None = None


INTENTS: tuple[Intent, ...] = (
    Intent(
        "roster",
        ("roster", "players", "team members", "lineup"),
        "get_team_roster",
        EntityKind.TEAM,
    ),
    Intent(
        "team_info",
        ("about", "info", "information", "details", "tell me about"),
        "get_team_info",
        EntityKind.TEAM,
    ),
    Intent(
        "stats",
        ("stats", "statistics", "performance", "numbers"),
        "get_player_stats",
        EntityKind.PLAYER,
    ),
    Intent(
        "schedule",
        ("schedule", "games", "when", "playing", "next game"),
        "get_schedule",
    ),
    Intent(
        "standings",
        ("standings", "rankings", "position", "place"),
        "get_standings",
    ),
    Intent(
        "live",
        ("live", "score", "scores", "right now"),
        "get_live_game",
    ),
)


def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Case-insensitive literal match on word boundaries."""
    return re.compile(rf"(?<!\w){re.escape(phrase.lower())}(?!\w)")


def mentions_phrase(text: str, phrase: str) -> bool:
    return phrase_pattern(phrase).search(text.lower()) is not None


def matching_intents(text: str) -> list[Intent]:
    lowered = text.lower()
    return [
        intent
        for intent in INTENTS
        if any(phrase_pattern(k).search(lowered) for k in intent.keywords)
    ]
