from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from features.forecast.models.forecast_types import BucketSummary, WaveSample, WindModel
from features.observations.models.observation_types import StationObservation
from features.rating.models.rating_types import Preferences, Rating

class ForecastCard(BaseModel):
    """One forecast hour, rated and colored for display."""
    time: datetime
    display_date: str
    display_time: str
    wind_speed: float
    wind_direction_label: Optional[str] = None
    wind_direction_degrees: Optional[float] = None
    rating: Rating
    color: str
    wave: Optional[WaveSample] = None

class BucketCard(BucketSummary):
    start_label: str
    end_label: str
    color: str

class SummaryView(BaseModel):
    date: date
    display_date: str
    buckets: List[BucketCard]

class ObservationRow(StationObservation):
    rating: Rating
    color: str

class StationTable(BaseModel):
    station_id: str
    name: str
    rows: List[ObservationRow] = []
    error: Optional[str] = None

class StationChoice(BaseModel):
    station_id: str
    name: str
    selected: bool

class DirectionColumn(BaseModel):
    label: str
    directions: List[str]

class DisplayOptions(BaseModel):
    hide_unsuitable: bool = True
    show_coordinates: bool = False
    show_api_data: bool = False

class Diagnostics(BaseModel):
    request_urls: Dict[str, str] = {}
    responses: Optional[Dict] = None
    error: Optional[str] = None

class LocationView(BaseModel):
    query: str
    resolved_name: str = ""
    error: str = ""
    is_loading: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None

class DashboardView(BaseModel):
    """Everything the browser needs to draw the dashboard."""
    location: LocationView
    model: str
    models: List[WindModel]
    preferences: Preferences
    direction_columns: List[DirectionColumn]
    display: DisplayOptions
    summary: Optional[SummaryView] = None
    summary_message: Optional[str] = None
    forecast_cards: List[ForecastCard] = []
    stations: List[StationChoice] = []
    station_tables: List[StationTable] = []
    diagnostics: Optional[Diagnostics] = None
    generated_at: datetime

class LocationRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Town name or postcode")

class ModelRequest(BaseModel):
    model: str

class DisplayRequest(BaseModel):
    hide_unsuitable: Optional[bool] = None
    show_coordinates: Optional[bool] = None
    show_api_data: Optional[bool] = None
