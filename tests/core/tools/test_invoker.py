# tests/core/tools/test_invoker.py
from __future__ import annotations

import asyncio

import pytest

from sports.proxy.contracts.errors import BackendUnavailable, InvalidInvocation
from sports.proxy.contracts.tools import ToolInvocation
from sports.proxy.core.clients import ClientsRegistry
from sports.proxy.core.domain import DomainRegistry, DomainSpec, ToolRoute
from sports.proxy.core.resolver import ResolverRegistry, StoreResolver
from sports.proxy.core.tools import ToolInvoker, validate_arguments


class FakeBackend:
    def __init__(self, response=None, *, error=None, delay=0.0):
        self.response = response if response is not None else {"data": {}}
        self.error = error
        self.delay = delay
        self.calls = []

    async def fetch_schema(self):
        return []

    async def call_tool(self, *, path, endpoint, query):
        self.calls.append((path, endpoint, query))
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


def _invoker(backend=None, resolver=None, **kwargs) -> ToolInvoker:
    domains = DomainRegistry()
    domains.register(
        DomainSpec(
            name="baseball",
            backend="baseball_stats",
            tools={"get_team_roster": ToolRoute(path="/", endpoint="roster")},
        )
    )
    domains.register(DomainSpec(name="hockey"))

    clients = ClientsRegistry()
    if backend is not None:
        clients.register("baseball_stats", backend)

    resolvers = ResolverRegistry()
    if resolver is not None:
        resolvers.register("baseball", resolver)

    return ToolInvoker(domains=domains, resolvers=resolvers, clients=clients, **kwargs)


class TestBackendDispatch:
    @pytest.mark.asyncio
    async def test_routes_through_domain_config(self):
        backend = FakeBackend({"data": {"roster": ["Judge"]}})

        out = await _invoker(backend).invoke(
            "baseball", ToolInvocation("get_team_roster", {"teamId": "147"})
        )

        assert out == {"data": {"roster": ["Judge"]}}
        assert backend.calls == [("/", "roster", {"teamId": "147"})]

    @pytest.mark.asyncio
    async def test_alias_domain_is_accepted(self):
        backend = FakeBackend()
        await _invoker(backend).invoke("mlb", ToolInvocation("get_standings", {}))
        assert backend.calls == [("/", "standings", {})]

    @pytest.mark.asyncio
    async def test_no_backend_configured(self):
        with pytest.raises(BackendUnavailable, match="No backend"):
            await _invoker().invoke("hockey", ToolInvocation("get_standings", {}))

    @pytest.mark.asyncio
    async def test_timeout_becomes_backend_unavailable(self):
        invoker = _invoker(FakeBackend(delay=1), timeout=0.01)

        with pytest.raises(BackendUnavailable, match="timed out") as exc_info:
            await invoker.invoke("baseball", ToolInvocation("get_standings", {}))
        assert exc_info.value.domain == "baseball"
        assert exc_info.value.tool == "get_standings"

    @pytest.mark.asyncio
    async def test_backend_error_is_tagged_with_domain_and_tool(self):
        invoker = _invoker(FakeBackend(error=BackendUnavailable("status 500", tool="standings")))

        with pytest.raises(BackendUnavailable) as exc_info:
            await invoker.invoke("baseball", ToolInvocation("get_standings", {}))
        assert exc_info.value.domain == "baseball"
        assert exc_info.value.tool == "get_standings"


class TestLocalDispatch:
    @pytest.mark.asyncio
    async def test_resolver_tools_stay_local(self, baseball_store):
        backend = FakeBackend()
        invoker = _invoker(backend, StoreResolver(baseball_store))

        out = await invoker.invoke("baseball", ToolInvocation("resolve_team", {"name": "Yankees"}))

        assert out["resolved"] is True
        assert out["matched_entity"]["id"] == "147"
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_search_players(self, baseball_store):
        invoker = _invoker(resolver=StoreResolver(baseball_store))

        out = await invoker.invoke(
            "baseball", ToolInvocation("search_players", {"team": "Dodgers", "limit": 2})
        )

        assert out["count"] == 2

    @pytest.mark.asyncio
    async def test_local_name_without_resolver_goes_to_backend(self):
        backend = FakeBackend({"id": 147})
        await _invoker(backend).invoke("baseball", ToolInvocation("resolve_team", {"name": "x"}))
        assert backend.calls == [("/", "resolve_team", {"name": "x"})]

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, baseball_store):
        invoker = _invoker(resolver=StoreResolver(baseball_store))
        with pytest.raises(InvalidInvocation):
            await invoker.invoke("baseball", ToolInvocation("resolve_team", {}))


class TestValidateArguments:
    def test_defaults_applied(self):
        assert validate_arguments("resolve_player", {"name": "Judge"}) == {
            "name": "Judge",
            "fuzzy": True,
            "includeStats": False,
        }

    def test_missing_required(self):
        with pytest.raises(InvalidInvocation) as exc_info:
            validate_arguments("resolve_team", {"fuzzy": False})
        assert exc_info.value.missing == ["name"]

    def test_wrong_type_names_the_argument(self):
        with pytest.raises(InvalidInvocation) as exc_info:
            validate_arguments("search_teams", {"limit": 0})
        assert exc_info.value.missing == ["limit"]
        assert "Invalid arguments" in str(exc_info.value)
