import asyncio
import logging
import aiohttp
from typing import Any, Optional

from core.cache import cached
from core.config import settings
from features.common.exceptions.upstream_exceptions import GeocodingError
from features.common.services.rate_limiter import RateLimiter
from features.geocoding.models.geocode_types import GeocodeResult

logger = logging.getLogger(__name__)

class NominatimClient:
    """Looks up Australian place names with OpenStreetMap Nominatim."""

    def __init__(self, rate_limiter: Optional[RateLimiter] = None):
        self._session: Optional[aiohttp.ClientSession] = None
        self.rate_limiter = rate_limiter or RateLimiter(settings.geocode_requests_per_minute)

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.request["timeout"]),
                headers={"User-Agent": settings.request["user_agent"]}
            )
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    @cached(namespace="geocode")
    async def geocode(self, query: str) -> Optional[GeocodeResult]:
        """Best match for the query, or None when nothing matches."""
        query = (query or "").strip()
        if not query:
            return None

        params = {
            "q": query,
            "format": "json",
            "countrycodes": settings.geocode_country,
            "limit": "1"
        }

        await self.rate_limiter.limit()
        try:
            session = await self._init_session()
            async with session.get(settings.geocode_base_url, params=params) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Geocoding error for '{query}': {e!r}")
            raise GeocodingError(str(e) or type(e).__name__) from e

        result = self.parse_results(data)
        if result:
            logger.info(f"📍 Geocoded '{query}' to {result.latitude:.4f}, {result.longitude:.4f}")
        else:
            logger.info(f"No geocoding match for '{query}'")
        return result

    @staticmethod
    def parse_results(data: Any) -> Optional[GeocodeResult]:
        if not isinstance(data, list) or not data:
            return None
        first = data[0]
        try:
            return GeocodeResult(
                display_name=first["display_name"],
                latitude=float(first["lat"]),
                longitude=float(first["lon"])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError(f"Malformed geocoder response: {e}") from e
