from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request

from features.dashboard.models.view_types import ForecastCard
from features.forecast.models.forecast_types import DailySummary, WindModel
from features.forecast.services.forecast_service import ForecastService
from features.rating.models.rating_types import Preferences
from features.rating.routes.dependencies import get_preferences

router = APIRouter(
    prefix="/forecast",
    tags=["Forecast"],
    responses={
        400: {"description": "Unknown forecast model"},
        503: {"description": "Forecast provider unavailable"}
    }
)

def get_forecast_service(request: Request) -> ForecastService:
    """Dependency to get the ForecastService instance."""
    return request.app.state.forecast_service

@router.get(
    "/models",
    response_model=List[WindModel],
    summary="List forecast models",
    description="Returns the wind models a forecast can be requested from"
)
async def get_models(
    service: ForecastService = Depends(get_forecast_service)
) -> List[WindModel]:
    return service.get_models()

@router.get(
    "/summary",
    response_model=Optional[DailySummary],
    summary="Get a day's rated 3-hour blocks",
    description="Averages the hourly wind and wave forecast into 3-hour blocks for one day and rates each block"
)
async def get_daily_summary(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    model: Optional[str] = None,
    day: Optional[date] = Query(None, description="Day to summarize, defaults to today"),
    preferences: Preferences = Depends(get_preferences),
    service: ForecastService = Depends(get_forecast_service)
) -> Optional[DailySummary]:
    """Daily summary for a location, or null when the forecast has no data for the day."""
    return await service.get_daily_summary(lat, lon, preferences, model, day)

@router.get(
    "/hourly",
    response_model=List[ForecastCard],
    summary="Get rated hourly forecast",
    description="Returns every forecast hour with its rating, display color and matching wave data"
)
async def get_hourly_forecast(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    model: Optional[str] = None,
    hide_unsuitable: bool = False,
    preferences: Preferences = Depends(get_preferences),
    service: ForecastService = Depends(get_forecast_service)
) -> List[ForecastCard]:
    return await service.get_hourly_cards(lat, lon, preferences, model, hide_unsuitable)
