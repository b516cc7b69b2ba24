from pydantic import BaseModel, Field

class GeocodeResult(BaseModel):
    """Best match for a free-text place name."""
    display_name: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
