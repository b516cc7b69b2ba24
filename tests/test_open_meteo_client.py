import asyncio
import json
from datetime import datetime, timezone

import aiohttp
import pytest

from core.config import settings
from features.common.exceptions.upstream_exceptions import ForecastFetchError
from features.forecast.services.open_meteo_client import OpenMeteoClient

from tests.conftest import FakeResponse, FakeSession

WIND_RESPONSE = {
    "latitude": -37.98,
    "longitude": 145.06,
    "hourly": {
        "time": ["2025-01-15T00:00", "2025-01-15T01:00", "2025-01-15T02:00"],
        "windspeed_10m": [14.2, None, 18.0],
        "winddirection_10m": [190, 200, None]
    }
}

WAVE_RESPONSE = {
    "hourly": {
        "time": ["2025-01-15T00:00", "2025-01-15T01:00"],
        "wave_height": [0.8, None],
        "wind_wave_height": [0.4, 0.5],
        "wave_direction": [210, 215],
        "wind_wave_direction": [190, None]
    }
}

def make_client(routes):
    client = OpenMeteoClient("Australia/Sydney")
    client._session = FakeSession(routes)
    return client

def test_parse_wind_reads_local_times():
    samples = OpenMeteoClient("Australia/Sydney").parse_wind(WIND_RESPONSE)

    # The null speed hour is dropped
    assert len(samples) == 2
    # Midnight AEDT is 13:00 UTC the previous day
    assert samples[0].timestamp == datetime(2025, 1, 14, 13, tzinfo=timezone.utc)
    assert samples[0].wind_speed == 14.2
    assert samples[0].wind_direction_degrees == 190
    assert samples[1].wind_direction_degrees is None

def test_parse_wind_accepts_current_field_names():
    data = {"hourly": {"time": ["2025-01-15T00:00"], "wind_speed_10m": [10], "wind_direction_10m": [90]}}
    samples = OpenMeteoClient().parse_wind(data)
    assert samples[0].wind_speed == 10
    assert samples[0].wind_direction_degrees == 90

@pytest.mark.parametrize("data", [{}, None, {"hourly": {}}, {"hourly": {"time": ["2025-01-15T00:00"]}}])
def test_parse_wind_malformed_is_empty(data):
    assert OpenMeteoClient().parse_wind(data) == []

def test_parse_waves_keeps_missing_values_absent():
    waves = OpenMeteoClient("Australia/Sydney").parse_waves(WAVE_RESPONSE)
    assert len(waves) == 2
    assert waves[0].wave_height == 0.8
    assert waves[1].wave_height is None
    assert waves[1].wind_wave_height == 0.5
    assert waves[1].wind_wave_direction_degrees is None

def test_parse_waves_without_heights_is_empty():
    assert OpenMeteoClient().parse_waves({"hourly": {"time": ["2025-01-15T00:00"]}}) == []

def test_request_params():
    client = OpenMeteoClient("Australia/Sydney")
    params = client.wind_params(-37.98, 145.06, "ecmwf_ifs025")
    assert params["windspeed_unit"] == "kn"
    assert params["models"] == "ecmwf_ifs025"
    assert params["latitude"] == "-37.980000"
    assert params["timezone"] == "Australia/Sydney"

    urls = client.request_urls(-37.98, 145.06, "ecmwf_ifs025")
    assert urls["wind"].startswith(settings.forecast_base_url + "?")
    assert "models=ecmwf_ifs025" in urls["wind"]
    assert urls["wave"].startswith(settings.marine_base_url + "?")

def test_fetch_forecast():
    client = make_client({
        settings.forecast_base_url: WIND_RESPONSE,
        settings.marine_base_url: WAVE_RESPONSE
    })
    series = asyncio.run(client.fetch_forecast(-37.98, 145.06, "gfs_seamless"))

    assert series.model == "gfs_seamless"
    assert len(series.wind) == 2
    assert len(series.waves) == 2
    assert series.raw["wind"] == WIND_RESPONSE
    assert set(series.request_urls) == {"wind", "wave"}

def test_fetch_forecast_error_status():
    client = make_client({
        settings.forecast_base_url: FakeResponse({"error": True}, status=400),
        settings.marine_base_url: WAVE_RESPONSE
    })
    with pytest.raises(ForecastFetchError, match="Wind API error! status: 400"):
        asyncio.run(client.fetch_forecast(-37.98, 145.06, "gfs_seamless"))

def test_fetch_forecast_connection_error():
    client = make_client({
        settings.forecast_base_url: WIND_RESPONSE,
        settings.marine_base_url: aiohttp.ClientConnectionError("Cannot connect")
    })
    with pytest.raises(ForecastFetchError):
        asyncio.run(client.fetch_forecast(-37.98, 145.06, "gfs_seamless"))

def test_close_releases_session():
    client = make_client({})
    session = client._session
    asyncio.run(client.close())
    assert session.closed
    assert client._session is None

def test_requests_ask_for_unix_times():
    client = OpenMeteoClient("Australia/Sydney")
    assert client.wind_params(-37.98, 145.06, "gfs_seamless")["timeformat"] == "unixtime"
    assert client.wave_params(-37.98, 145.06)["timeformat"] == "unixtime"

def test_unix_times_keep_repeated_daylight_saving_hour():
    # 15:00 and 16:00 UTC on 5 April 2025 are both 02:00 in Sydney
    first = int(datetime(2025, 4, 5, 15, tzinfo=timezone.utc).timestamp())
    data = {"hourly": {"time": [first, first + 3600], "windspeed_10m": [12, 13], "winddirection_10m": [180, 190]}}
    samples = OpenMeteoClient("Australia/Sydney").parse_wind(data)

    assert [s.timestamp for s in samples] == [
        datetime(2025, 4, 5, 15, tzinfo=timezone.utc),
        datetime(2025, 4, 5, 16, tzinfo=timezone.utc)
    ]

def test_fetch_forecast_unreadable_body():
    client = make_client({
        settings.forecast_base_url: FakeResponse(json.JSONDecodeError("Expecting value", "<html>", 0)),
        settings.marine_base_url: WAVE_RESPONSE
    })
    with pytest.raises(ForecastFetchError, match="unreadable body"):
        asyncio.run(client.fetch_forecast(-37.98, 145.06, "gfs_seamless"))

@pytest.mark.parametrize("wind_response", [
    {"hourly": {"time": ["yesterday"], "windspeed_10m": [12]}},
    {"hourly": {"time": [True], "windspeed_10m": [12]}},
    {"hourly": {"time": [None], "windspeed_10m": [12]}},
    ["not", "an", "object"],
])
def test_fetch_forecast_malformed_series(wind_response):
    client = make_client({
        settings.forecast_base_url: wind_response,
        settings.marine_base_url: WAVE_RESPONSE
    })
    with pytest.raises(ForecastFetchError, match="Unexpected forecast format"):
        asyncio.run(client.fetch_forecast(-37.98, 145.06, "gfs_seamless"))
