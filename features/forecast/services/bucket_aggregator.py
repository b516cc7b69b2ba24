import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo

from core.config import settings
from features.common.utils.compass import mean_direction
from features.forecast.models.forecast_types import (
    BucketSummary,
    DailySummary,
    ForecastSample,
    WaveSample
)
from features.forecast.services.forecast_join import index_waves, matched_waves
from features.rating.models.rating_types import Preferences
from features.rating.services.suitability_rater import SuitabilityRater, default_rater

logger = logging.getLogger(__name__)

def format_display_date(day: Union[date, datetime]) -> str:
    """Short Australian style date, e.g. "Sat 18 Oct"."""
    return f"{day:%a} {day.day} {day:%b}"

def _mean(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)

class BucketAggregator:
    """Groups hourly samples into fixed calendar blocks for one day."""

    def __init__(
        self,
        rater: SuitabilityRater = default_rater,
        tz_name: str = settings.display_timezone,
        bucket_hours: int = settings.bucket_hours,
        direction_mean: str = settings.direction_mean
    ):
        if bucket_hours <= 0 or bucket_hours > 24:
            raise ValueError(f"Invalid bucket width {bucket_hours}h. Must be between 1 and 24")
        self.rater = rater
        self.tz = ZoneInfo(tz_name)
        self.bucket_hours = bucket_hours
        self.direction_mean = direction_mean

    def _local_wall_time(self, day: date, hour: int) -> datetime:
        """Wall-clock hour on a day, rolling past midnight into the next day."""
        return datetime.combine(day + timedelta(days=hour // 24), time(hour % 24), tzinfo=self.tz)

    def _mean_bearing(self, values: Iterable[Optional[float]]) -> Optional[float]:
        return mean_direction([v for v in values if v is not None], self.direction_mean)

    def bucket_bounds(self, reference_date: date) -> List[tuple]:
        """(start, end) pairs in local time for every bucket of the day."""
        return [
            (
                self._local_wall_time(reference_date, hour),
                self._local_wall_time(reference_date, min(hour + self.bucket_hours, 24))
            )
            for hour in range(0, 24, self.bucket_hours)
        ]

    def summarize(
        self,
        forecast_samples: Sequence[ForecastSample],
        wave_samples: Sequence[WaveSample],
        preferences: Preferences,
        reference_date: Union[date, datetime]
    ) -> Optional[DailySummary]:
        """Average and rate each block of the reference day.

        Returns None when there is nothing to summarize for that day. Empty
        blocks are left out rather than reported as zeros.
        """
        if not forecast_samples:
            return None

        if isinstance(reference_date, datetime):
            if reference_date.tzinfo is not None:
                reference_date = reference_date.astimezone(self.tz)
            reference_date = reference_date.date()

        midnight = self._local_wall_time(reference_date, 0).astimezone(timezone.utc)
        window_end = self._local_wall_time(reference_date, 24).astimezone(timezone.utc)
        day_samples = [
            s for s in forecast_samples
            if midnight <= s.timestamp < window_end
        ]
        if not day_samples:
            return None

        wave_index = index_waves(wave_samples)
        buckets: List[BucketSummary] = []

        for start, end in self.bucket_bounds(reference_date):
            start_utc = start.astimezone(timezone.utc)
            end_utc = end.astimezone(timezone.utc)
            in_bucket = [s for s in day_samples if start_utc <= s.timestamp < end_utc]
            if not in_bucket:
                continue

            average_speed = sum(s.wind_speed for s in in_bucket) / len(in_bucket)
            average_degrees = self._mean_bearing(s.wind_direction_degrees for s in in_bucket)
            label = self.rater.codec.to_label(average_degrees) if average_degrees is not None else None
            rating = self.rater.rate_for(average_speed, label, preferences)

            waves = matched_waves(in_bucket, wave_index)

            buckets.append(BucketSummary(
                start_time=start,
                end_time=end,
                average_wind_speed=average_speed,
                average_wind_direction_degrees=average_degrees,
                average_wind_direction_label=label,
                rating=rating,
                sample_count=len(in_bucket),
                average_wave_height=_mean(w.wave_height for w in waves),
                average_wind_wave_height=_mean(w.wind_wave_height for w in waves),
                average_wave_direction_degrees=self._mean_bearing(w.wave_direction_degrees for w in waves),
                average_wind_wave_direction_degrees=self._mean_bearing(w.wind_wave_direction_degrees for w in waves)
            ))

        if not buckets:
            logger.debug(f"No samples fell inside the buckets for {reference_date}")
            return None

        return DailySummary(
            date=reference_date,
            display_date=format_display_date(reference_date),
            buckets=buckets
        )

default_aggregator = BucketAggregator()

def summarize(
    forecast_samples: Sequence[ForecastSample],
    wave_samples: Sequence[WaveSample],
    preferences: Preferences,
    reference_date: Union[date, datetime]
) -> Optional[DailySummary]:
    return default_aggregator.summarize(forecast_samples, wave_samples, preferences, reference_date)
