from datetime import date, datetime, timezone
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from features.common.utils.compass import normalize_degrees
from features.rating.models.rating_types import Rating

def _to_utc(v: datetime) -> datetime:
    if v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)

def _normalize_optional_degrees(v: Optional[float]) -> Optional[float]:
    return None if v is None else normalize_degrees(v)

class ForecastSample(BaseModel):
    """One hour of modelled wind at a location."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    wind_speed: float = Field(..., ge=0, description="Wind speed in knots")
    wind_direction_degrees: Optional[float] = Field(None, description="Degrees clockwise from true N")

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _to_utc(v)

    @field_validator("wind_direction_degrees")
    @classmethod
    def normalize_direction(cls, v: Optional[float]) -> Optional[float]:
        return _normalize_optional_degrees(v)

class WaveSample(BaseModel):
    """One hour of modelled sea state at a location."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    wave_height: Optional[float] = Field(None, ge=0, description="Combined wave height in meters")
    wave_direction_degrees: Optional[float] = None
    wind_wave_height: Optional[float] = Field(None, ge=0, description="Wind wave height in meters")
    wind_wave_direction_degrees: Optional[float] = None

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return _to_utc(v)

    @field_validator("wave_direction_degrees", "wind_wave_direction_degrees")
    @classmethod
    def normalize_direction(cls, v: Optional[float]) -> Optional[float]:
        return _normalize_optional_degrees(v)

class BucketSummary(BaseModel):
    """Averaged conditions for one 3-hour block."""
    start_time: datetime
    end_time: datetime
    average_wind_speed: float
    average_wind_direction_degrees: Optional[float] = None
    average_wind_direction_label: Optional[str] = None
    rating: Rating
    sample_count: int
    average_wave_height: Optional[float] = None
    average_wind_wave_height: Optional[float] = None
    average_wave_direction_degrees: Optional[float] = None
    average_wind_wave_direction_degrees: Optional[float] = None

class DailySummary(BaseModel):
    date: date
    display_date: str
    buckets: List[BucketSummary]

class ForecastSeries(BaseModel):
    """Parsed wind and wave series for one location and model."""
    latitude: float
    longitude: float
    model: str
    wind: List[ForecastSample] = []
    waves: List[WaveSample] = []
    request_urls: Dict[str, str] = {}
    raw: Dict[str, Dict] = {}

class WindModel(BaseModel):
    value: str
    label: str
