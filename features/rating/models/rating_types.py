from enum import Enum
from typing import List
from pydantic import BaseModel, Field, field_validator, model_validator

from features.common.utils.compass import default_codec

class Rating(str, Enum):
    GOOD = "good"
    OK = "ok"
    BAD = "bad"

# BAD always renders as its own red state, never as an unstyled row
RATING_COLORS = {
    Rating.GOOD: "#a5d6a7",
    Rating.OK: "#fff59d",
    Rating.BAD: "#ef9a9a",
}

class Preferences(BaseModel):
    """User wind preferences for one dashboard session."""
    min_wind_speed: float = Field(..., ge=0, description="Lowest rideable speed in knots")
    max_wind_speed: float = Field(..., ge=0, description="Highest rideable speed in knots")
    preferred_directions: List[str] = Field(
        default_factory=list,
        description="Compass labels; empty means any direction"
    )

    @field_validator("preferred_directions")
    @classmethod
    def normalize_directions(cls, v: List[str]) -> List[str]:
        """Upper-case, validate and de-duplicate labels, keeping compass order."""
        labels = {label.strip().upper() for label in v}
        unknown = sorted(label for label in labels if not default_codec.is_label(label))
        if unknown:
            raise ValueError(
                f"Unknown compass labels {unknown}. Must be one of {default_codec.labels}"
            )
        return [label for label in default_codec.labels if label in labels]

    @model_validator(mode="after")
    def check_bounds(self) -> "Preferences":
        if self.min_wind_speed > self.max_wind_speed:
            raise ValueError(
                f"min_wind_speed {self.min_wind_speed} is above max_wind_speed {self.max_wind_speed}"
            )
        return self
