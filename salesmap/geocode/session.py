"""Factories for pooled HTTP sessions used by the geocoder."""
from __future__ import annotations

import contextlib
from typing import AsyncIterator, Optional

import httpx


@contextlib.asynccontextmanager
async def create_geocode_session(
    *,
    user_agent: str,
    timeout: float,
    max_connections: int,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an `httpx.AsyncClient` sized for the worker pool."""
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_connections)
    async with httpx.AsyncClient(headers=headers, limits=limits, timeout=timeout, transport=transport) as client:
        yield client
