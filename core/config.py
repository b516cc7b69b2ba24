from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List, Literal, Optional

class Settings(BaseSettings):
    """Application settings."""

    # Times from the forecast provider and the daily buckets are in this zone
    display_timezone: str = "Australia/Sydney"

    # Direction handling, shared by the rater and the labeler
    compass_points: Literal[8, 16] = 16
    direction_tolerance_deg: Optional[float] = None  # None means one compass step
    direction_mean: Literal["arithmetic", "vector"] = "arithmetic"
    bucket_hours: int = 3

    # Open-Meteo
    forecast_base_url: str = "https://api.open-meteo.com/v1/forecast"
    marine_base_url: str = "https://marine-api.open-meteo.com/v1/marine"
    forecast_days: int = 7
    wind_models: Dict[str, str] = {
        "ecmwf_ifs025": "ECMWF",
        "gfs_seamless": "NOAA US (GFS)",
        "bom_access_global": "BOM Australia",
        "meteofrance_seamless": "Meteo France",
        "ukmo_seamless": "UK Met Office",
        "metno_seamless": "MET Norway",
        "icon_seamless": "DWD Germany"
    }
    default_wind_model: str = "gfs_seamless"

    # Nominatim
    geocode_base_url: str = "https://nominatim.openstreetmap.org/search"
    geocode_country: str = "au"
    geocode_requests_per_minute: int = 60

    # BOM station observations
    bom_observation_url: str = "https://www.bom.gov.au/fwo/IDV60701/IDV60701.{station_id}.json"
    bom_station_ids: List[str] = ["95872", "94870", "95864", "94853", "94871", "94847"]
    observations_per_station: int = 4
    station_fetch_concurrency: int = 6

    # Relay
    relay_allowed_prefix: str = "https://www.bom.gov.au/"

    # Session defaults
    default_location: str = "Mentone"
    default_min_wind: float = 12
    default_max_wind: float = 35
    default_directions: List[str] = ["S", "SSW", "SSE", "SW", "SE"]
    prime_on_startup: bool = True  # load default location and stations at startup

    request: Dict = {
        "timeout": 30,
        "user_agent": "foil-window-api/1.0"
    }

    cache: Dict = {
        "enabled": True,
        "prefix": "foil_window"
    }

    def get_cache_ttl(self) -> Dict[str, Optional[int]]:
        """Get cache TTL values in seconds."""
        return {
            "geocode": 86400,  # place names do not move
        }

    model_config = SettingsConfigDict(
        env_prefix="foil_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
