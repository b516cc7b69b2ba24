from typing import Iterable, Optional

from core.config import settings
from features.common.utils.compass import CompassCodec, Direction, angular_distance, default_codec
from features.rating.models.rating_types import Preferences, Rating

class SuitabilityRater:
    """Rates a wind sample against a rider's speed range and directions."""

    def __init__(self, codec: CompassCodec = default_codec, tolerance: Optional[float] = None):
        self.codec = codec
        # One compass step either side unless configured otherwise
        self.tolerance = tolerance if tolerance is not None else codec.step

    def rate(
        self,
        speed: Optional[float],
        direction: Direction,
        min_speed: float,
        max_speed: float,
        preferred_directions: Iterable[str]
    ) -> Rating:
        if speed is None or speed < min_speed or speed > max_speed:
            return Rating.BAD

        degrees = self.codec.resolve(direction)
        if degrees is None:
            return Rating.OK

        preferred = list(preferred_directions or [])
        if not preferred:
            return Rating.GOOD

        for label in preferred:
            preferred_deg = self.codec.to_degrees(label)
            if preferred_deg is None:
                continue
            if angular_distance(degrees, preferred_deg) <= self.tolerance:
                return Rating.GOOD
        return Rating.OK

    def rate_for(self, speed: Optional[float], direction: Direction, preferences: Preferences) -> Rating:
        return self.rate(
            speed,
            direction,
            preferences.min_wind_speed,
            preferences.max_wind_speed,
            preferences.preferred_directions
        )

default_rater = SuitabilityRater(default_codec, settings.direction_tolerance_deg)

def rate(
    speed: Optional[float],
    direction: Direction,
    min_speed: float,
    max_speed: float,
    preferred_directions: Iterable[str]
) -> Rating:
    """Rate with the service-wide codec and tolerance."""
    return default_rater.rate(speed, direction, min_speed, max_speed, preferred_directions)
