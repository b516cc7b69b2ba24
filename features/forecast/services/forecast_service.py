import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo
from fastapi import HTTPException

from core.config import settings
from features.common.exceptions.upstream_exceptions import ForecastFetchError
from features.dashboard.models.view_types import ForecastCard
from features.dashboard.services.presentation import build_forecast_cards
from features.forecast.models.forecast_types import DailySummary, ForecastSeries, WindModel
from features.forecast.services.bucket_aggregator import BucketAggregator, default_aggregator
from features.forecast.services.open_meteo_client import OpenMeteoClient
from features.rating.models.rating_types import Preferences

logger = logging.getLogger(__name__)

class ForecastService:
    """Stateless forecast lookups for API consumers."""

    def __init__(self, client: OpenMeteoClient, aggregator: BucketAggregator = default_aggregator):
        self.client = client
        self.aggregator = aggregator

    def get_models(self) -> List[WindModel]:
        return [WindModel(value=k, label=v) for k, v in settings.wind_models.items()]

    def resolve_model(self, model: Optional[str]) -> str:
        model = model or settings.default_wind_model
        if model not in settings.wind_models:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown forecast model {model}. Must be one of {list(settings.wind_models)}"
            )
        return model

    async def get_series(self, lat: float, lon: float, model: Optional[str] = None) -> ForecastSeries:
        model = self.resolve_model(model)
        try:
            return await self.client.fetch_forecast(lat, lon, model)
        except ForecastFetchError as e:
            logger.error(f"❌ Forecast unavailable for {lat:.4f}, {lon:.4f}: {e}")
            raise HTTPException(status_code=503, detail=f"Error fetching forecast: {e}")

    async def get_daily_summary(
        self,
        lat: float,
        lon: float,
        preferences: Preferences,
        model: Optional[str] = None,
        reference_date: Optional[date] = None
    ) -> Optional[DailySummary]:
        series = await self.get_series(lat, lon, model)
        reference = reference_date or datetime.now(ZoneInfo(settings.display_timezone))
        return self.aggregator.summarize(series.wind, series.waves, preferences, reference)

    async def get_hourly_cards(
        self,
        lat: float,
        lon: float,
        preferences: Preferences,
        model: Optional[str] = None,
        hide_unsuitable: bool = False
    ) -> List[ForecastCard]:
        series = await self.get_series(lat, lon, model)
        return build_forecast_cards(
            series.wind,
            series.waves,
            preferences,
            hide_unsuitable,
            self.aggregator.rater
        )
