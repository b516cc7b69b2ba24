from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import aiohttp
import pytest

from features.forecast.models.forecast_types import ForecastSample, WaveSample
from features.rating.models.rating_types import Preferences

SYDNEY = ZoneInfo("Australia/Sydney")
DAY = date(2025, 1, 15)

def local(hour: int, minute: int = 0, second: int = 0, day: date = DAY) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=SYDNEY) + timedelta(
        hours=hour, minutes=minute, seconds=second
    )

def wind(hour: int, speed: float, degrees: Optional[float] = 180.0, day: date = DAY, second: int = 0) -> ForecastSample:
    return ForecastSample(timestamp=local(hour, second=second, day=day), wind_speed=speed, wind_direction_degrees=degrees)

def wave(hour: int, height: Optional[float] = 1.0, wind_wave: Optional[float] = 0.5,
         direction: Optional[float] = 200.0, wind_wave_direction: Optional[float] = 190.0,
         day: date = DAY, second: int = 0) -> WaveSample:
    return WaveSample(
        timestamp=local(hour, second=second, day=day),
        wave_height=height,
        wave_direction_degrees=direction,
        wind_wave_height=wind_wave,
        wind_wave_direction_degrees=wind_wave_direction
    )

class FakeResponse:
    def __init__(self, payload: Any = None, status: int = 200):
        self.payload = payload
        self.status = status

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientError(f"HTTP {self.status}")

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

class FakeSession:
    """Stands in for aiohttp.ClientSession; routes by URL prefix."""

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url, params=None, **kwargs):
        self.calls.append({"url": str(url), "params": params})
        for prefix, result in self.routes.items():
            if str(url).startswith(prefix):
                if isinstance(result, Exception):
                    raise result
                if isinstance(result, FakeResponse):
                    return result
                return FakeResponse(result)
        raise aiohttp.ClientConnectionError(f"No route for {url}")

    async def close(self):
        self.closed = True

@pytest.fixture
def south_prefs() -> Preferences:
    return Preferences(min_wind_speed=12, max_wind_speed=35, preferred_directions=["S", "SSW", "SSE"])

@pytest.fixture
def any_direction_prefs() -> Preferences:
    return Preferences(min_wind_speed=12, max_wind_speed=35, preferred_directions=[])
