from typing import List
from fastapi import APIRouter, Depends, Request

from features.dashboard.models.view_types import StationTable
from features.dashboard.services.presentation import build_station_tables
from features.observations.services.observation_service import ObservationService
from features.rating.models.rating_types import Preferences
from features.rating.routes.dependencies import get_preferences

router = APIRouter(
    prefix="/observations",
    tags=["Observations"]
)

def get_observation_service(request: Request) -> ObservationService:
    """Dependency to get the ObservationService instance."""
    return request.app.state.observation_service

@router.get(
    "",
    response_model=List[StationTable],
    summary="Get rated station observations",
    description="Returns the latest BOM observations for every configured station, rated against the given preferences. Unreachable stations appear with no rows and an error"
)
async def get_observations(
    preferences: Preferences = Depends(get_preferences),
    service: ObservationService = Depends(get_observation_service)
) -> List[StationTable]:
    stations = await service.get_all_stations()
    return build_station_tables(stations, service.station_ids, preferences)
