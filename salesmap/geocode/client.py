"""Photon geocoding client resolving a city name to a single coordinate."""
from __future__ import annotations

import time
from typing import Any, Optional

import httpx
import orjson

from salesmap.observability.tracing import log_lookup_failure, log_lookup_result, span
from salesmap.storage.models import GeoPoint


class GeocodingError(Exception):
    """Base class for geocoding problems."""


class LookupFailure(GeocodingError):
    """Transport or payload failure while resolving a city."""

    def __init__(self, city: str, reason: str) -> None:
        super().__init__(f"Lookup for {city!r} failed: {reason}")
        self.city = city
        self.reason = reason


def _first_point(payload: Any) -> Optional[GeoPoint]:
    """Return the first feature's coordinate, swapping [lng, lat] into a GeoPoint."""
    if not isinstance(payload, dict):
        raise ValueError("response body is not a JSON object")
    features = payload.get("features") or []
    if not features:
        return None
    try:
        lng, lat = features[0]["geometry"]["coordinates"][:2]
        return GeoPoint(lat=float(lat), lng=float(lng))
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ValueError(f"malformed feature: {exc}") from exc


class PhotonGeocoder:
    """Issues best-match city lookups against a Photon-compatible endpoint.

    Every call is one round trip; results are never cached and failures are
    never retried.
    """

    def __init__(self, client: httpx.AsyncClient, *, endpoint: str) -> None:
        self._client = client
        self._endpoint = endpoint

    async def resolve(self, city: str) -> Optional[GeoPoint]:
        """Return the best match for ``city`` or None when nothing matches.

        Raises `LookupFailure` on network, HTTP status or decoding errors.
        """
        params = {"q": city, "layer": "city", "limit": 1}
        try:
            with span(name="geocode", city=city):
                start = time.perf_counter()
                response = await self._client.get(self._endpoint, params=params)
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            response.raise_for_status()
            point = _first_point(orjson.loads(response.content))
        except (httpx.HTTPError, orjson.JSONDecodeError, ValueError) as exc:
            log_lookup_failure(city=city, reason=str(exc))
            raise LookupFailure(city, str(exc)) from exc
        log_lookup_result(
            city=city,
            status=response.status_code,
            matched=point is not None,
            elapsed_ms=elapsed_ms,
        )
        return point
