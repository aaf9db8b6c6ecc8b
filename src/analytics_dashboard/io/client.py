from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol
from urllib.parse import urlencode

import aiohttp

from analytics_dashboard.config import BackendConfig
from analytics_dashboard.filters import FilterState
from analytics_dashboard.io.endpoints import Endpoint

LOGGER = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when an analytics endpoint cannot be fetched or decoded."""

    def __init__(self, endpoint: Endpoint, message: str) -> None:
        super().__init__(f"{endpoint.path}: {message}")
        self.endpoint = endpoint


class Fetcher(Protocol):
    async def fetch_filtered(self, endpoint: Endpoint, filters: FilterState) -> Any: ...


def build_url(base_url: str, endpoint: Endpoint, filters: FilterState | None) -> str:
    url = f"{base_url.rstrip('/')}{endpoint.path}"
    if endpoint.filter_exempt or filters is None:
        return url
    query = urlencode(filters.to_query_parameters())
    return f"{url}?{query}" if query else url


class DashboardClient:
    """Async GET client for the pre-aggregated analytics endpoints."""

    def __init__(
        self,
        config: BackendConfig,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> DashboardClient:
        if self.session is None:
            self.session = aiohttp.ClientSession(
                headers=self.config.headers,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None

    async def fetch_filtered(self, endpoint: Endpoint, filters: FilterState) -> Any:
        if self.session is None:
            raise RuntimeError("DashboardClient must be used as an async context manager")
        url = build_url(self.config.base_url, endpoint, filters)
        LOGGER.debug("GET %s", url)
        try:
            async with self.session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(endpoint, f"HTTP {response.status}")
                body = await response.read()
        except aiohttp.ClientError as exc:
            raise FetchError(endpoint, f"transport error: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise FetchError(endpoint, "request timed out") from exc

        try:
            text = body.decode(response.charset or "utf-8")
            return json.loads(text) if text.strip() else None
        except (UnicodeDecodeError, LookupError, json.JSONDecodeError) as exc:
            raise FetchError(endpoint, f"invalid JSON body: {exc}") from exc


async def fetch_joined(
    fetcher: Fetcher,
    filters: FilterState,
    *endpoints: Endpoint,
) -> list[Any]:
    """Resolve every endpoint before returning; any failure fails the whole join."""
    return list(
        await asyncio.gather(*(fetcher.fetch_filtered(endpoint, filters) for endpoint in endpoints))
    )
