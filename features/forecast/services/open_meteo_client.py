import asyncio
import logging
import aiohttp
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from zoneinfo import ZoneInfo
from pydantic import ValidationError
from yarl import URL

from core.config import settings
from features.common.exceptions.upstream_exceptions import ForecastFetchError
from features.forecast.models.forecast_types import ForecastSample, ForecastSeries, WaveSample

logger = logging.getLogger(__name__)

class OpenMeteoClient:
    """Fetches hourly wind and marine forecasts from Open-Meteo."""

    def __init__(self, tz_name: str = settings.display_timezone):
        self._session: Optional[aiohttp.ClientSession] = None
        self.tz_name = tz_name
        self.tz = ZoneInfo(tz_name)

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.request["timeout"])
            )
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    def wind_params(self, lat: float, lon: float, model: str) -> Dict[str, str]:
        return {
            "latitude": f"{lat:.6f}",
            "longitude": f"{lon:.6f}",
            "hourly": "windspeed_10m,winddirection_10m",
            "windspeed_unit": "kn",
            "forecast_days": str(settings.forecast_days),
            "timezone": self.tz_name,
            "timeformat": "unixtime",
            "models": model
        }

    def wave_params(self, lat: float, lon: float) -> Dict[str, str]:
        return {
            "latitude": f"{lat:.6f}",
            "longitude": f"{lon:.6f}",
            "hourly": "wave_height,wind_wave_height,wave_direction,wind_wave_direction",
            "timezone": self.tz_name,
            "timeformat": "unixtime"
        }

    def request_urls(self, lat: float, lon: float, model: str) -> Dict[str, str]:
        """Full request URLs, shown to the user as API diagnostics."""
        return {
            "wind": str(URL(settings.forecast_base_url).with_query(self.wind_params(lat, lon, model))),
            "wave": str(URL(settings.marine_base_url).with_query(self.wave_params(lat, lon)))
        }

    async def _get_json(self, name: str, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        session = await self._init_session()
        async with session.get(url, params=params) as response:
            if response.status >= 400:
                raise ForecastFetchError(f"{name} API error! status: {response.status}")
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise ForecastFetchError(f"{name} API returned an unreadable body: {e}") from e

    async def fetch_forecast(self, lat: float, lon: float, model: str) -> ForecastSeries:
        """Fetch and parse both series. Either failing fails the whole fetch."""
        logger.info(f"🌬️ Fetching forecast for {lat:.4f}, {lon:.4f} ({model})")
        results = await asyncio.gather(
            self._get_json("Wind", settings.forecast_base_url, self.wind_params(lat, lon, model)),
            self._get_json("Wave", settings.marine_base_url, self.wave_params(lat, lon)),
            return_exceptions=True
        )
        for result in results:
            if isinstance(result, ForecastFetchError):
                logger.error(f"❌ {result}")
                raise result
            if isinstance(result, (aiohttp.ClientError, asyncio.TimeoutError)):
                logger.error(f"❌ Forecast request failed: {result!r}")
                raise ForecastFetchError(str(result) or type(result).__name__) from result
            if isinstance(result, Exception):
                logger.error(f"❌ Forecast request failed: {result!r}")
                raise ForecastFetchError(f"Unexpected forecast error: {result!r}") from result
            if isinstance(result, BaseException):
                raise result

        wind_data, wave_data = results
        try:
            wind = self.parse_wind(wind_data)
            waves = self.parse_waves(wave_data)
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"❌ Unexpected forecast format: {e!r}")
            raise ForecastFetchError(f"Unexpected forecast format: {e}") from e
        logger.info(f"✅ Parsed {len(wind)} wind and {len(waves)} wave samples")

        return ForecastSeries(
            latitude=lat,
            longitude=lon,
            model=model,
            wind=wind,
            waves=waves,
            request_urls=self.request_urls(lat, lon, model),
            raw={"wind": wind_data, "wave": wave_data}
        )

    def parse_time(self, value: Union[int, float, str]) -> datetime:
        """Unix seconds are UTC instants; ISO strings are wall-clock times in the requested timezone.

        Requests ask for unix times so the repeated hour when daylight saving
        ends stays two distinct instants.
        """
        if isinstance(value, bool):
            raise ValueError(f"Invalid forecast time {value!r}")
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self.tz)
        return parsed

    @staticmethod
    def _value_at(values: Optional[List[Any]], index: int) -> Optional[float]:
        if not values or index >= len(values):
            return None
        value = values[index]
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def parse_wind(self, data: Dict[str, Any]) -> List[ForecastSample]:
        """Hourly wind samples. Hours without a speed are dropped."""
        hourly = (data or {}).get("hourly") or {}
        times = hourly.get("time") or []
        speeds = hourly.get("windspeed_10m", hourly.get("wind_speed_10m"))
        directions = hourly.get("winddirection_10m", hourly.get("wind_direction_10m"))
        if not times or speeds is None:
            logger.warning("Wind response has no hourly speeds")
            return []

        samples = []
        for i, time_value in enumerate(times):
            speed = self._value_at(speeds, i)
            if speed is None or speed < 0:
                continue
            samples.append(ForecastSample(
                timestamp=self.parse_time(time_value),
                wind_speed=speed,
                wind_direction_degrees=self._value_at(directions, i)
            ))
        return samples

    def parse_waves(self, data: Dict[str, Any]) -> List[WaveSample]:
        hourly = (data or {}).get("hourly") or {}
        times = hourly.get("time") or []
        if not times or "wave_height" not in hourly:
            logger.warning("Marine response has no hourly wave heights")
            return []

        samples = []
        for i, time_value in enumerate(times):
            wave_height = self._value_at(hourly.get("wave_height"), i)
            wind_wave_height = self._value_at(hourly.get("wind_wave_height"), i)
            samples.append(WaveSample(
                timestamp=self.parse_time(time_value),
                wave_height=wave_height if wave_height is None or wave_height >= 0 else None,
                wave_direction_degrees=self._value_at(hourly.get("wave_direction"), i),
                wind_wave_height=wind_wave_height if wind_wave_height is None or wind_wave_height >= 0 else None,
                wind_wave_direction_degrees=self._value_at(hourly.get("wind_wave_direction"), i)
            ))
        return samples
