import math
from typing import Dict, List, Optional, Union

from core.config import settings

COMPASS_16 = ["N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
              "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW"]
COMPASS_8 = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]

Direction = Union[str, float, int, None]

def normalize_degrees(degrees: float) -> float:
    """Wrap any angle into [0, 360)."""
    value = degrees % 360.0
    # -1e-15 % 360 rounds to 360.0
    return 0.0 if value >= 360.0 else value

def angular_distance(a: float, b: float) -> float:
    """Smallest angle between two bearings."""
    diff = abs(normalize_degrees(a) - normalize_degrees(b))
    return min(diff, 360.0 - diff)

class CompassCodec:
    """Converts between compass labels and degrees at a fixed resolution.

    One instance is used for both rating and labelling so the two never
    disagree about what "SSW" means.
    """

    def __init__(self, points: int = 16):
        if points not in (8, 16):
            raise ValueError(f"Unsupported compass resolution {points}. Must be 8 or 16")
        self.points = points
        self.labels: List[str] = COMPASS_16 if points == 16 else COMPASS_8
        self.step = 360.0 / points
        self._degrees: Dict[str, float] = {
            label: i * self.step for i, label in enumerate(self.labels)
        }

    def to_degrees(self, label: Optional[str]) -> Optional[float]:
        """Degrees for a compass label, or None when the label is unknown."""
        if not isinstance(label, str):
            return None
        return self._degrees.get(label.strip().upper())

    def to_label(self, degrees: float) -> str:
        """Nearest compass point, rounding half up like a bearing table."""
        index = math.floor(normalize_degrees(degrees) / self.step + 0.5) % self.points
        return self.labels[index]

    def resolve(self, direction: Direction) -> Optional[float]:
        """Degrees for either a label or a numeric bearing."""
        if direction is None or isinstance(direction, bool):
            return None
        if isinstance(direction, (int, float)):
            if math.isnan(direction):
                return None
            return normalize_degrees(float(direction))
        return self.to_degrees(direction)

    def is_label(self, label: str) -> bool:
        return self.to_degrees(label) is not None

def mean_direction(degrees: List[float], method: str = "arithmetic") -> Optional[float]:
    """Average a list of bearings.

    "arithmetic" is the plain mean, which is wrong near north (350 and 10
    average to 180). "vector" averages unit vectors instead.
    """
    if not degrees:
        return None
    if method == "vector":
        sin_sum = sum(math.sin(math.radians(d)) for d in degrees)
        cos_sum = sum(math.cos(math.radians(d)) for d in degrees)
        if math.isclose(sin_sum, 0.0, abs_tol=1e-9) and math.isclose(cos_sum, 0.0, abs_tol=1e-9):
            # Opposing bearings cancel out; fall back to the plain mean
            return normalize_degrees(sum(degrees) / len(degrees))
        return normalize_degrees(math.degrees(math.atan2(sin_sum, cos_sum)))
    if method != "arithmetic":
        raise ValueError(f"Unknown direction mean method {method}")
    return normalize_degrees(sum(degrees) / len(degrees))

default_codec = CompassCodec(settings.compass_points)
