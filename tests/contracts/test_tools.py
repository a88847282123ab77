# tests/contracts/test_tools.py
from __future__ import annotations

import pytest

from sports.proxy.contracts.entity import EntityKind
from sports.proxy.contracts.errors import InvalidInvocation, ResolutionFailure
from sports.proxy.contracts.tools import (
    Phase,
    ToolInvocation,
    ToolResult,
    ToolSchema,
    resolver_kind,
)


class TestResolverKind:
    @pytest.mark.parametrize(
        "name, kind",
        [
            ("resolve_team", EntityKind.TEAM),
            ("resolve_player", EntityKind.PLAYER),
            ("resolve_baseball_team", EntityKind.TEAM),
            ("resolve_nhl_player", EntityKind.PLAYER),
            ("get_team_info", None),
            ("resolve_game", None),
            ("search_teams", None),
        ],
    )
    def test_classification(self, name, kind):
        assert resolver_kind(name) is kind

    def test_phase(self):
        assert ToolInvocation("resolve_team").phase is Phase.RESOLVER
        assert ToolInvocation("get_team_roster").phase is Phase.DEPENDENT


class TestToolSchema:
    def test_from_function_envelope(self):
        schema = ToolSchema.from_function(
            {
                "type": "function",
                "function": {
                    "name": "get_player_stats",
                    "parameters": {"type": "object", "required": ["playerId"]},
                },
            },
            domain="baseball",
        )
        assert schema.name == "get_player_stats"
        assert schema.required == ["playerId"]
        assert schema.domain == "baseball"
        assert schema.to_function()["function"]["description"] == ""

    def test_bare_object(self):
        assert ToolSchema.from_function({"name": "get_standings"}).name == "get_standings"

    @pytest.mark.parametrize("raw", [[], {"type": "function"}, {"description": "x"}])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            ToolSchema.from_function(raw)


class TestToolResult:
    def test_enrichment_never_mutates(self):
        original = ToolInvocation("get_team_roster", {})
        copy = original.with_arguments({"teamId": "147"}, enriched=True)

        assert original.arguments == {}
        assert copy.arguments == {"teamId": "147"}

    def test_error_entry_shape(self):
        inv = ToolInvocation("get_team_roster", {"teamId": "1"}, enriched=True)
        out = ToolResult.failed(inv, "timed out", error_kind="backend_unavailable").to_dict()

        assert out == {
            "tool_name": "get_team_roster",
            "arguments": {"teamId": "1"},
            "success": False,
            "enriched": True,
            "cached": False,
            "error": "timed out",
            "error_kind": "backend_unavailable",
        }


class TestErrors:
    def test_invalid_invocation_lists_missing(self):
        err = InvalidInvocation("get_player_stats", ["playerId"])
        assert err.to_dict()["missing"] == ["playerId"]
        assert "playerId" in str(err)

    def test_resolution_failure_is_a_backend_failure(self):
        err = ResolutionFailure("db locked", domain="baseball", tool="resolve_team")
        assert err.kind == "resolution_failed"
        assert err.to_dict() == {
            "error": "resolution_failed",
            "message": "db locked",
            "domain": "baseball",
            "tool": "resolve_team",
        }
