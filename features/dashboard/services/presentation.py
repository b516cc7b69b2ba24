from datetime import datetime
from typing import Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from core.config import settings
from features.dashboard.models.view_types import (
    BucketCard,
    DirectionColumn,
    ForecastCard,
    ObservationRow,
    StationChoice,
    StationTable,
    SummaryView
)
from features.forecast.models.forecast_types import DailySummary, ForecastSample, WaveSample
from features.forecast.services.bucket_aggregator import format_display_date
from features.forecast.services.forecast_join import index_waves
from features.observations.models.observation_types import StationObservations
from features.rating.models.rating_types import RATING_COLORS, Preferences, Rating
from features.rating.services.suitability_rater import SuitabilityRater, default_rater

NO_SUITABLE_MESSAGE = (
    "No suitable wind forecasts found. "
    "Try adjusting your preferred wind directions, wind speed range, or forecast model."
)

# Picker layout: each cardinal column also offers its neighbours
DIRECTION_COLUMNS = [
    ("N", ["N", "NNE", "NNW", "NE", "NW"]),
    ("E", ["E", "ENE", "ESE", "NE", "SE"]),
    ("S", ["S", "SSE", "SSW", "SE", "SW"]),
    ("W", ["W", "WNW", "WSW", "NW", "SW"]),
]

def rating_color(rating: Rating) -> str:
    return RATING_COLORS[rating]

def format_display_time(value: datetime) -> str:
    return value.strftime("%H:%M")

def direction_columns(rater: SuitabilityRater = default_rater) -> List[DirectionColumn]:
    """Picker columns limited to labels the active compass understands."""
    return [
        DirectionColumn(label=label, directions=[d for d in dirs if rater.codec.is_label(d)])
        for label, dirs in DIRECTION_COLUMNS
    ]

def build_forecast_cards(
    forecast: Sequence[ForecastSample],
    waves: Sequence[WaveSample],
    preferences: Preferences,
    hide_unsuitable: bool = True,
    rater: SuitabilityRater = default_rater,
    tz_name: str = settings.display_timezone
) -> List[ForecastCard]:
    tz = ZoneInfo(tz_name)
    wave_index = index_waves(waves)
    cards = []
    for sample in forecast:
        label = None
        if sample.wind_direction_degrees is not None:
            label = rater.codec.to_label(sample.wind_direction_degrees)
        rating = rater.rate_for(sample.wind_speed, label, preferences)
        if hide_unsuitable and rating == Rating.BAD:
            continue

        local_time = sample.timestamp.astimezone(tz)
        cards.append(ForecastCard(
            time=local_time,
            display_date=format_display_date(local_time),
            display_time=format_display_time(local_time),
            wind_speed=round(sample.wind_speed, 1),
            wind_direction_label=label,
            wind_direction_degrees=(
                round(sample.wind_direction_degrees)
                if sample.wind_direction_degrees is not None else None
            ),
            rating=rating,
            color=rating_color(rating),
            wave=wave_index.get(sample.timestamp)
        ))
    return cards

def build_summary_view(summary: Optional[DailySummary], hide_unsuitable: bool = True) -> Optional[SummaryView]:
    """Bucket cards for the day, or None when there is nothing to show."""
    if summary is None:
        return None
    cards = [
        BucketCard(
            **bucket.model_dump(),
            start_label=format_display_time(bucket.start_time),
            end_label=format_display_time(bucket.end_time),
            color=rating_color(bucket.rating)
        )
        for bucket in summary.buckets
        if not (hide_unsuitable and bucket.rating == Rating.BAD)
    ]
    if not cards:
        return None
    return SummaryView(date=summary.date, display_date=summary.display_date, buckets=cards)

def build_station_tables(
    stations: Iterable[StationObservations],
    selected_ids: Iterable[str],
    preferences: Preferences,
    rater: SuitabilityRater = default_rater
) -> List[StationTable]:
    """Rated observation tables for the selected stations only."""
    selected = set(selected_ids)
    tables = []
    for station in stations:
        if station.station_id not in selected:
            continue
        rows = []
        for observation in station.observations:
            rating = rater.rate_for(
                observation.wind_speed_knots,
                observation.wind_direction_label,
                preferences
            )
            rows.append(ObservationRow(
                **observation.model_dump(),
                rating=rating,
                color=rating_color(rating)
            ))
        tables.append(StationTable(
            station_id=station.station_id,
            name=station.name,
            rows=rows,
            error=station.error
        ))
    return tables

def build_station_choices(
    stations: Iterable[StationObservations],
    selected_ids: Iterable[str]
) -> List[StationChoice]:
    selected = set(selected_ids)
    return [
        StationChoice(station_id=s.station_id, name=s.name, selected=s.station_id in selected)
        for s in stations
    ]
