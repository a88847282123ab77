# sports/proxy/core/clients/backend.py
"""
Thin async client for a domain tool backend.

Contract::

    GET  {base_url}/openai-tools.json
         -> [ {type: "function", function: {...}}, ... ]

    POST {base_url}{path}
         body: { endpoint: str, query: {...} }
         -> { endpoint, query, data, meta }
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from sports.proxy.contracts.errors import BackendUnavailable

logger = logging.getLogger(__name__)


class DomainBackendClient:
    """HTTP client for one domain backend (stats, fantasy, news, ...)."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 15.0,
        schema_path: str = "/openai-tools.json",
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._schema_path = schema_path
        self._headers = dict(headers or {})

    @property
    def base_url(self) -> str:
        return self._base

    def _url(self, path: str) -> str:
        if not path or path == "/":
            return f"{self._base}/"
        return f"{self._base}/{path.lstrip('/')}"

    async def fetch_schema(self) -> list[dict[str, Any]]:
        """Fetch the backend's function-calling tool list."""
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                resp = await client.get(self._url(self._schema_path), headers=self._headers)
                resp.raise_for_status()
                payload = resp.json()
            except httpx.HTTPStatusError as ex:
                logger.warning(
                    "Schema fetch failed status=%s url=%s",
                    ex.response.status_code, ex.request.url,
                )
                raise BackendUnavailable(
                    f"Schema fetch failed with status {ex.response.status_code}"
                ) from ex
            except (httpx.HTTPError, ValueError) as ex:
                logger.warning("Schema fetch failed url=%s: %s", self._base, ex)
                raise BackendUnavailable(f"Schema fetch failed: {ex}") from ex

        if isinstance(payload, dict):
            payload = payload.get("tools", [])
        if not isinstance(payload, list):
            raise BackendUnavailable(
                f"Schema endpoint returned {type(payload).__name__}, expected a list"
            )
        return payload

    async def call_tool(
        self,
        *,
        path: str,
        endpoint: str,
        query: dict[str, Any],
    ) -> dict[str, Any]:
        """POST an ``{endpoint, query}`` request and return the response body."""
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                resp = await client.post(
                    self._url(path),
                    json={"endpoint": endpoint, "query": query},
                    headers=self._headers,
                )
                resp.raise_for_status()
                return resp.json()
            except httpx.HTTPStatusError as ex:
                logger.warning(
                    "Tool call failed endpoint=%s status=%s reason=%s",
                    endpoint, ex.response.status_code, ex.response.text[:200],
                )
                raise BackendUnavailable(
                    f"Backend returned status {ex.response.status_code} for '{endpoint}'",
                    tool=endpoint,
                ) from ex
            except (httpx.HTTPError, ValueError) as ex:
                logger.warning("Tool call failed endpoint=%s: %s", endpoint, ex)
                raise BackendUnavailable(
                    f"Backend call '{endpoint}' failed: {ex}", tool=endpoint
                ) from ex
