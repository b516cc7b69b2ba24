import asyncio

import aiohttp
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.config import settings
from features.common.exceptions.upstream_exceptions import GeocodingError
from features.common.services.rate_limiter import RateLimiter
from features.geocoding.routes.geocoding_routes import router
from features.geocoding.services.nominatim_client import NominatimClient

from tests.conftest import FakeResponse, FakeSession

MENTONE = [{"display_name": "Mentone, City of Kingston, Victoria, Australia", "lat": "-37.9820", "lon": "145.0650"}]

def make_geocoder(result):
    geocoder = NominatimClient(RateLimiter(requests_per_minute=6000))
    geocoder._session = FakeSession({settings.geocode_base_url: result})
    return geocoder

# The geocode cache is shared across clients, so each test uses its own query
def test_geocode_best_match():
    geocoder = make_geocoder(MENTONE)
    result = asyncio.run(geocoder.geocode("Mentone best match"))

    assert result.display_name.startswith("Mentone")
    assert result.latitude == pytest.approx(-37.982)
    assert result.longitude == pytest.approx(145.065)
    params = geocoder._session.calls[0]["params"]
    assert params["countrycodes"] == "au"
    assert params["limit"] == "1"

def test_geocode_results_are_cached():
    geocoder = make_geocoder(MENTONE)

    async def twice():
        await geocoder.geocode("Mentone cached")
        return await geocoder.geocode("Mentone cached")

    assert asyncio.run(twice()).latitude == pytest.approx(-37.982)
    assert len(geocoder._session.calls) == 1

def test_geocode_no_match():
    assert asyncio.run(make_geocoder([]).geocode("Nowhere at all")) is None

def test_geocode_blank_query():
    geocoder = make_geocoder(MENTONE)
    assert asyncio.run(geocoder.geocode("   ")) is None
    assert geocoder._session.calls == []

def test_geocode_http_error():
    with pytest.raises(GeocodingError):
        asyncio.run(make_geocoder(FakeResponse([], status=503)).geocode("Mentone outage"))

def test_geocode_connection_error():
    with pytest.raises(GeocodingError):
        asyncio.run(make_geocoder(aiohttp.ClientConnectionError("offline")).geocode("Mentone offline"))

def test_parse_results_malformed():
    with pytest.raises(GeocodingError):
        NominatimClient.parse_results([{"display_name": "Somewhere"}])
    assert NominatimClient.parse_results({"error": "bad"}) is None

def test_rate_limiter_spaces_requests():
    limiter = RateLimiter(requests_per_minute=1200)

    async def two_requests():
        loop = asyncio.get_running_loop()
        await limiter.limit()
        start = loop.time()
        await limiter.limit()
        return loop.time() - start

    assert asyncio.run(two_requests()) >= 0.04

def test_rate_limiter_rejects_zero():
    with pytest.raises(ValueError):
        RateLimiter(requests_per_minute=0)

class FakeGeocoder:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    async def geocode(self, query):
        if self.error:
            raise self.error
        return self.result

def make_app(geocoder):
    app = FastAPI()
    app.include_router(router)
    app.state.geocoder = geocoder
    return TestClient(app)

def test_geocode_route():
    result = NominatimClient.parse_results(MENTONE)
    response = make_app(FakeGeocoder(result)).get("/geocode", params={"q": "Mentone"})
    assert response.status_code == 200
    assert response.json()["latitude"] == pytest.approx(-37.982)

def test_geocode_route_not_found():
    response = make_app(FakeGeocoder(None)).get("/geocode", params={"q": "Nowhere"})
    assert response.status_code == 404

def test_geocode_route_upstream_failure():
    response = make_app(FakeGeocoder(error=GeocodingError("offline"))).get("/geocode", params={"q": "Mentone"})
    assert response.status_code == 503
