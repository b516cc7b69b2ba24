import asyncio
import logging
from typing import List, Optional, Sequence

from core.config import settings
from features.common.exceptions.upstream_exceptions import UpstreamError
from features.observations.models.observation_types import StationObservations
from features.observations.services.bom_client import BOMObservationClient

logger = logging.getLogger(__name__)

class ObservationService:
    """Fetches every configured station at once.

    Each station resolves to either its data or a placeholder, so one
    unreachable station never hides the others.
    """

    def __init__(
        self,
        client: BOMObservationClient,
        station_ids: Sequence[str] = tuple(settings.bom_station_ids),
        concurrency: int = settings.station_fetch_concurrency
    ):
        self.client = client
        self.station_ids = list(station_ids)
        self.concurrency = max(1, concurrency)

    async def _get_station(self, station_id: str, semaphore: asyncio.Semaphore) -> StationObservations:
        async with semaphore:
            try:
                return await self.client.get_station(station_id)
            except UpstreamError as e:
                logger.warning(f"⚠️ Station {station_id} unavailable, using placeholder: {e}")
                return StationObservations.placeholder(station_id, str(e))

    async def get_all_stations(self, station_ids: Optional[Sequence[str]] = None) -> List[StationObservations]:
        """One result per station, in the order requested."""
        ids = list(station_ids) if station_ids is not None else self.station_ids
        semaphore = asyncio.Semaphore(self.concurrency)
        results = await asyncio.gather(*(self._get_station(sid, semaphore) for sid in ids))

        failed = [r.station_id for r in results if r.error]
        logger.info(f"🛰️ Fetched {len(results) - len(failed)}/{len(results)} stations")
        if failed:
            logger.warning(f"Failed stations: {', '.join(failed)}")
        return list(results)
