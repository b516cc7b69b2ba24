from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from features.forecast.models.forecast_types import ForecastSample, WaveSample

def find_wave_for(forecast_sample: ForecastSample, wave_samples: Iterable[WaveSample]) -> Optional[WaveSample]:
    """Return the wave sample at exactly the same instant, if any.

    No tolerance window: a series sampled on a different cadence or shifted
    by a second simply has no match.
    """
    for wave in wave_samples:
        if wave.timestamp == forecast_sample.timestamp:
            return wave
    return None

def index_waves(wave_samples: Iterable[WaveSample]) -> Dict[datetime, WaveSample]:
    """Map instant -> wave sample, first occurrence wins like a linear scan."""
    index: Dict[datetime, WaveSample] = {}
    for wave in wave_samples:
        index.setdefault(wave.timestamp, wave)
    return index

def matched_waves(
    forecast_samples: Sequence[ForecastSample],
    wave_index: Dict[datetime, WaveSample]
) -> List[WaveSample]:
    """Wave samples for each forecast sample that has one, in forecast order."""
    return [
        wave_index[sample.timestamp]
        for sample in forecast_samples
        if sample.timestamp in wave_index
    ]
