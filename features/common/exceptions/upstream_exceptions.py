class UpstreamError(Exception):
    """Base exception for third-party data provider errors."""
    pass

class ForecastFetchError(UpstreamError):
    """Raised when the wind or marine forecast cannot be fetched."""
    pass

class GeocodingError(UpstreamError):
    """Raised when the geocoder cannot be reached."""
    pass

class ObservationFetchError(UpstreamError):
    """Raised when a station's observations cannot be fetched or parsed."""
    pass

class RelayTargetError(UpstreamError):
    """Raised when a relay target is missing or outside the allowed domain."""
    pass
