import logging
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from core.config import settings
from features.common.exceptions.upstream_exceptions import ForecastFetchError, GeocodingError
from features.dashboard.models.view_types import (
    DashboardView,
    Diagnostics,
    DisplayOptions,
    LocationView
)
from features.dashboard.services import presentation
from features.forecast.models.forecast_types import ForecastSample, WaveSample, WindModel
from features.forecast.services.bucket_aggregator import BucketAggregator, default_aggregator
from features.forecast.services.open_meteo_client import OpenMeteoClient
from features.geocoding.services.nominatim_client import NominatimClient
from features.observations.models.observation_types import StationObservations
from features.observations.services.observation_service import ObservationService
from features.rating.models.rating_types import Preferences

logger = logging.getLogger(__name__)

LOCATION_NOT_FOUND = "Location not found. Please try again."
LOCATION_FETCH_FAILED = "Failed to fetch location. Check connection."

class RequestGeneration:
    """Monotonic request counter; only the newest request may write state."""

    def __init__(self):
        self._current = 0

    def next(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current

    @property
    def current(self) -> int:
        return self._current

class DashboardSession:
    """State behind the single-user dashboard.

    Fetches write raw series here; every view is derived from the current
    state on read, so preference changes never need a refetch.
    """

    def __init__(
        self,
        geocoder: NominatimClient,
        forecast_client: OpenMeteoClient,
        observation_service: ObservationService,
        aggregator: BucketAggregator = default_aggregator
    ):
        self.geocoder = geocoder
        self.forecast_client = forecast_client
        self.observation_service = observation_service
        self.aggregator = aggregator
        self.rater = aggregator.rater

        self.location = LocationView(query=settings.default_location)
        self.latitude: Optional[float] = None
        self.longitude: Optional[float] = None
        self.model = settings.default_wind_model
        self.preferences = Preferences(
            min_wind_speed=settings.default_min_wind,
            max_wind_speed=settings.default_max_wind,
            preferred_directions=settings.default_directions
        )
        self.display = DisplayOptions()

        self.forecast: List[ForecastSample] = []
        self.waves: List[WaveSample] = []
        self.diagnostics = Diagnostics()

        self.stations: List[StationObservations] = []
        self.selected_station_ids: List[str] = list(observation_service.station_ids)

        self.geocode_generation = RequestGeneration()
        self.forecast_generation = RequestGeneration()
        self.observation_generation = RequestGeneration()

    async def initialize(self):
        """Load the default location and station observations."""
        await self.refresh_observations()
        await self.update_location(self.location.query)

    async def update_location(self, query: str) -> bool:
        """Geocode a place name and, on success, refetch the forecast.

        Failures leave the previous coordinates and forecast in place.
        """
        query = (query or "").strip()
        if not query:
            return False

        token = self.geocode_generation.next()
        self.location.query = query
        self.location.error = ""
        self.location.is_loading = True

        try:
            result = await self.geocoder.geocode(query)
        except GeocodingError as e:
            if self.geocode_generation.is_current(token):
                logger.warning(f"Geocoding failed for '{query}': {e}")
                self.location.error = LOCATION_FETCH_FAILED
                self.location.is_loading = False
            return False

        if not self.geocode_generation.is_current(token):
            logger.info(f"Discarding stale geocode result for '{query}'")
            return False

        self.location.is_loading = False
        if result is None:
            self.location.error = LOCATION_NOT_FOUND
            return False

        self.latitude = result.latitude
        self.longitude = result.longitude
        self.location.resolved_name = result.display_name
        return await self.refresh_forecast()

    async def refresh_forecast(self) -> bool:
        """Fetch wind and waves for the current coordinates and model."""
        if self.latitude is None or self.longitude is None:
            return False

        token = self.forecast_generation.next()
        lat, lon, model = self.latitude, self.longitude, self.model
        request_urls = self.forecast_client.request_urls(lat, lon, model)
        self.diagnostics = Diagnostics(request_urls=request_urls)

        try:
            series = await self.forecast_client.fetch_forecast(lat, lon, model)
        except ForecastFetchError as e:
            if not self.forecast_generation.is_current(token):
                return False
            logger.error(f"❌ Error fetching forecast: {e}")
            self.forecast = []
            self.waves = []
            self.diagnostics = Diagnostics(
                request_urls=request_urls,
                error=f"Error fetching forecast: {e}"
            )
            return False

        if not self.forecast_generation.is_current(token):
            logger.info(f"Discarding stale forecast for {lat:.4f}, {lon:.4f} ({model})")
            return False

        self.forecast = series.wind
        self.waves = series.waves
        self.diagnostics = Diagnostics(request_urls=series.request_urls, responses=series.raw)
        return True

    async def refresh_observations(self) -> bool:
        token = self.observation_generation.next()
        stations = await self.observation_service.get_all_stations()
        if not self.observation_generation.is_current(token):
            logger.info("Discarding stale station observations")
            return False
        self.stations = stations
        return True

    async def set_model(self, model: str) -> bool:
        if model not in settings.wind_models:
            raise ValueError(f"Unknown forecast model {model}. Must be one of {list(settings.wind_models)}")
        self.model = model
        return await self.refresh_forecast()

    def set_preferences(self, preferences: Preferences):
        self.preferences = preferences

    def toggle_direction(self, label: str) -> Preferences:
        """Add or remove one preferred direction."""
        label = label.strip().upper()
        if not self.rater.codec.is_label(label):
            raise ValueError(f"Unknown compass label {label}")
        current = set(self.preferences.preferred_directions)
        current.symmetric_difference_update({label})
        self.preferences = Preferences(
            min_wind_speed=self.preferences.min_wind_speed,
            max_wind_speed=self.preferences.max_wind_speed,
            preferred_directions=list(current)
        )
        return self.preferences

    def toggle_station(self, station_id: str) -> List[str]:
        if station_id not in self.observation_service.station_ids:
            raise KeyError(station_id)
        if station_id in self.selected_station_ids:
            self.selected_station_ids.remove(station_id)
        else:
            self.selected_station_ids.append(station_id)
        return self.selected_station_ids

    def set_display(self, **options) -> DisplayOptions:
        updates = {k: v for k, v in options.items() if v is not None}
        self.display = self.display.model_copy(update=updates)
        return self.display

    def view(self, now: Optional[datetime] = None) -> DashboardView:
        """Build the dashboard from current state."""
        now = now or datetime.now(ZoneInfo(settings.display_timezone))
        hide = self.display.hide_unsuitable

        daily = self.aggregator.summarize(self.forecast, self.waves, self.preferences, now)
        summary = presentation.build_summary_view(daily, hide)

        location = self.location.model_copy()
        if self.display.show_coordinates and location.resolved_name:
            location.latitude = self.latitude
            location.longitude = self.longitude

        return DashboardView(
            location=location,
            model=self.model,
            models=[WindModel(value=k, label=v) for k, v in settings.wind_models.items()],
            preferences=self.preferences,
            direction_columns=presentation.direction_columns(self.rater),
            display=self.display,
            summary=summary,
            summary_message=None if summary else presentation.NO_SUITABLE_MESSAGE,
            forecast_cards=presentation.build_forecast_cards(
                self.forecast, self.waves, self.preferences, hide, self.rater
            ),
            stations=presentation.build_station_choices(self.stations, self.selected_station_ids),
            station_tables=presentation.build_station_tables(
                self.stations, self.selected_station_ids, self.preferences, self.rater
            ),
            diagnostics=self.diagnostics if self.display.show_api_data else None,
            generated_at=now
        )
