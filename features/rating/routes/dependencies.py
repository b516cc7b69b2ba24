from typing import List, Optional
from fastapi import HTTPException, Query
from pydantic import ValidationError

from core.config import settings
from features.rating.models.rating_types import Preferences

def get_preferences(
    min_wind: float = Query(settings.default_min_wind, ge=0, description="Lowest rideable speed in knots"),
    max_wind: float = Query(settings.default_max_wind, ge=0, description="Highest rideable speed in knots"),
    directions: Optional[List[str]] = Query(
        None,
        description="Preferred compass labels; repeat the parameter or comma separate. Omit for the defaults, pass an empty value for any direction"
    )
) -> Preferences:
    """Build Preferences from query parameters."""
    if directions is None:
        labels = list(settings.default_directions)
    else:
        labels = [d for item in directions for d in item.split(",") if d.strip()]
    try:
        return Preferences(
            min_wind_speed=min_wind,
            max_wind_speed=max_wind,
            preferred_directions=labels
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
