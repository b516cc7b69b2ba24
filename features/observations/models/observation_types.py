from typing import List, Optional
from pydantic import BaseModel, Field

class StationObservation(BaseModel):
    """One reading from a weather station, as reported."""
    local_time_label: str = ""
    wind_direction_label: str = ""
    wind_speed_knots: Optional[float] = Field(None, description="Mean wind speed in knots")
    gust_knots: Optional[float] = Field(None, description="Gust speed in knots")

class StationObservations(BaseModel):
    """The most recent readings for one station."""
    station_id: str
    name: str
    observations: List[StationObservation] = []
    error: Optional[str] = None

    @classmethod
    def placeholder(cls, station_id: str, error: Optional[str] = None) -> "StationObservations":
        """Stand-in for a station whose data could not be fetched."""
        return cls(
            station_id=station_id,
            name=f"Station {station_id}",
            observations=[],
            error=error
        )
