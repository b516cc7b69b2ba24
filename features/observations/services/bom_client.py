import asyncio
import logging
import aiohttp
from typing import Any, Dict, Optional

from core.config import settings
from features.common.exceptions.upstream_exceptions import ObservationFetchError
from features.observations.models.observation_types import StationObservation, StationObservations

logger = logging.getLogger(__name__)

class BOMObservationClient:
    """Fetches latest weather-station observations from the Bureau of Meteorology."""

    def __init__(self, max_observations: int = settings.observations_per_station):
        self._session: Optional[aiohttp.ClientSession] = None
        self.max_observations = max_observations

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session:
            # BOM rejects requests without a browser-like user agent
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.request["timeout"]),
                headers={
                    "User-Agent": settings.request["user_agent"],
                    "Accept": "application/json"
                }
            )
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    def station_url(self, station_id: str) -> str:
        return settings.bom_observation_url.format(station_id=station_id)

    def _parse_value(self, value: Any) -> Optional[float]:
        """Parse a BOM numeric field, handling blanks and nulls."""
        if value in (None, "", "-"):
            return None
        try:
            return float(value)
        except (ValueError, TypeError):
            return None

    async def fetch_station(self, station_id: str) -> Dict[str, Any]:
        """Raw observation JSON for a station."""
        url = self.station_url(station_id)
        try:
            session = await self._init_session()
            async with session.get(url) as response:
                if response.status >= 400:
                    raise ObservationFetchError(
                        f"BOM API error for {url}, status: {response.status}"
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Error fetching observations for station {station_id}: {e!r}")
            raise ObservationFetchError(str(e) or type(e).__name__) from e

    def parse_station(self, station_id: str, data: Dict[str, Any]) -> StationObservations:
        """Station name and the newest readings, newest first as BOM lists them."""
        observations = (data or {}).get("observations") or {}
        header = observations.get("header") or [{}]
        name = (header[0] or {}).get("name") or f"Station {station_id}"

        items = []
        for record in (observations.get("data") or [])[:self.max_observations]:
            items.append(StationObservation(
                local_time_label=record.get("local_date_time") or record.get("aifstime_utc") or "",
                wind_direction_label=record.get("wind_dir") or "",
                wind_speed_knots=self._parse_value(record.get("wind_spd_kt")),
                gust_knots=self._parse_value(record.get("gust_kt"))
            ))

        return StationObservations(station_id=station_id, name=name, observations=items)

    async def get_station(self, station_id: str) -> StationObservations:
        data = await self.fetch_station(station_id)
        try:
            return self.parse_station(station_id, data)
        except (AttributeError, TypeError, IndexError, KeyError, ValueError) as e:
            raise ObservationFetchError(f"Unexpected observation format for {station_id}: {e}") from e
