# tests/core/clients/test_backend_client.py
from __future__ import annotations

import json

import httpx
import pytest

from sports.proxy.contracts.errors import BackendUnavailable
from sports.proxy.core.clients import DomainBackendClient


def _mock(monkeypatch, handler):
    transport = httpx.MockTransport(handler)
    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        httpx,
        "AsyncClient",
        lambda **kw: real_client(transport=transport, **kw),
    )


TOOLS = [
    {
        "type": "function",
        "function": {"name": "get_team_roster", "description": "Roster", "parameters": {}},
    }
]


class TestFetchSchema:
    @pytest.mark.asyncio
    async def test_list_payload(self, monkeypatch):
        async def handler(request):
            assert request.method == "GET"
            assert str(request.url) == "http://stats:8782/openai-tools.json"
            return httpx.Response(200, json=TOOLS)

        _mock(monkeypatch, handler)

        assert await DomainBackendClient(base_url="http://stats:8782/").fetch_schema() == TOOLS

    @pytest.mark.asyncio
    async def test_wrapped_payload(self, monkeypatch):
        async def handler(request):
            return httpx.Response(200, json={"tools": TOOLS})

        _mock(monkeypatch, handler)

        assert await DomainBackendClient(base_url="http://stats").fetch_schema() == TOOLS

    @pytest.mark.asyncio
    async def test_http_error_is_backend_unavailable(self, monkeypatch):
        async def handler(request):
            return httpx.Response(503, text="maintenance")

        _mock(monkeypatch, handler)

        with pytest.raises(BackendUnavailable, match="503"):
            await DomainBackendClient(base_url="http://stats").fetch_schema()

    @pytest.mark.asyncio
    async def test_connection_error(self, monkeypatch):
        async def handler(request):
            raise httpx.ConnectError("refused", request=request)

        _mock(monkeypatch, handler)

        with pytest.raises(BackendUnavailable):
            await DomainBackendClient(base_url="http://stats").fetch_schema()

    @pytest.mark.asyncio
    async def test_unexpected_shape(self, monkeypatch):
        async def handler(request):
            return httpx.Response(200, json="nope")

        _mock(monkeypatch, handler)

        with pytest.raises(BackendUnavailable, match="expected a list"):
            await DomainBackendClient(base_url="http://stats").fetch_schema()


class TestCallTool:
    @pytest.mark.asyncio
    async def test_posts_endpoint_and_query(self, monkeypatch):
        seen = {}

        async def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("x-api-key")
            return httpx.Response(200, json={"endpoint": "roster", "data": {"roster": []}})

        _mock(monkeypatch, handler)
        client = DomainBackendClient(base_url="http://stats", headers={"x-api-key": "k"})

        body = await client.call_tool(path="/", endpoint="roster", query={"teamId": "147"})

        assert body["data"] == {"roster": []}
        assert seen == {
            "url": "http://stats/",
            "body": {"endpoint": "roster", "query": {"teamId": "147"}},
            "auth": "k",
        }

    @pytest.mark.asyncio
    async def test_custom_path(self, monkeypatch):
        async def handler(request):
            assert request.url.path == "/fantasy/leagues"
            return httpx.Response(200, json={})

        _mock(monkeypatch, handler)

        await DomainBackendClient(base_url="http://f").call_tool(
            path="/fantasy/leagues", endpoint="leagues", query={}
        )

    @pytest.mark.asyncio
    async def test_error_status_names_the_endpoint(self, monkeypatch):
        async def handler(request):
            return httpx.Response(500, text="boom")

        _mock(monkeypatch, handler)

        with pytest.raises(BackendUnavailable) as exc_info:
            await DomainBackendClient(base_url="http://stats").call_tool(
                path="/", endpoint="standings", query={}
            )
        assert exc_info.value.tool == "standings"
        assert exc_info.value.kind == "backend_unavailable"
