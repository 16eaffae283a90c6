import asyncio

import httpx
import pytest

from salesmap.geocode.client import LookupFailure, PhotonGeocoder
from salesmap.geocode.session import create_geocode_session
from salesmap.storage.models import GeoPoint

ENDPOINT = "https://geo.test/api"


def _feature(lng, lat):
    return {"type": "Feature", "geometry": {"type": "Point", "coordinates": [lng, lat]}}


def _resolve(handler, city):
    async def _run():
        async with create_geocode_session(
            user_agent="test-agent",
            timeout=5.0,
            max_connections=2,
            transport=httpx.MockTransport(handler),
        ) as client:
            return await PhotonGeocoder(client, endpoint=ENDPOINT).resolve(city)

    return asyncio.run(_run())


def test_resolve_swaps_coordinates_and_sends_query():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"features": [_feature(17.12253, 49.01018)]})

    point = _resolve(handler, "Kyjov ")
    assert point == GeoPoint(lat=49.01018, lng=17.12253)
    request = seen[0]
    assert request.url.params["q"] == "Kyjov "
    assert request.url.params["layer"] == "city"
    assert request.url.params["limit"] == "1"
    assert request.headers["User-Agent"] == "test-agent"


def test_resolve_returns_none_without_features():
    assert _resolve(lambda request: httpx.Response(200, json={"features": []}), "Nowhere") is None
    assert _resolve(lambda request: httpx.Response(200, json={}), "Nowhere") is None


def test_resolve_raises_lookup_failure_on_http_error():
    with pytest.raises(LookupFailure) as info:
        _resolve(lambda request: httpx.Response(503, text="busy"), "Brno")
    assert info.value.city == "Brno"


def test_resolve_raises_lookup_failure_on_bad_json():
    with pytest.raises(LookupFailure):
        _resolve(lambda request: httpx.Response(200, text="<html>"), "Brno")


def test_resolve_raises_lookup_failure_on_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(LookupFailure) as info:
        _resolve(handler, "Brno")
    assert isinstance(info.value.__cause__, httpx.ConnectError)


def test_identical_cities_are_not_cached():
    calls = []

    def handler(request):
        calls.append(request.url.params["q"])
        return httpx.Response(200, json={"features": [_feature(16.6, 49.2)]})

    async def _run():
        async with create_geocode_session(
            user_agent="t", timeout=5.0, max_connections=1, transport=httpx.MockTransport(handler)
        ) as client:
            geocoder = PhotonGeocoder(client, endpoint=ENDPOINT)
            await geocoder.resolve("Brno")
            await geocoder.resolve("Brno")

    asyncio.run(_run())
    assert calls == ["Brno", "Brno"]
