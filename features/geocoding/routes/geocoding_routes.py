import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from features.common.exceptions.upstream_exceptions import GeocodingError
from features.geocoding.models.geocode_types import GeocodeResult
from features.geocoding.services.nominatim_client import NominatimClient

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/geocode",
    tags=["Geocoding"],
    responses={
        404: {"description": "Location not found"},
        503: {"description": "Geocoder unavailable"}
    }
)

def get_geocoder(request: Request) -> NominatimClient:
    """Dependency to get the NominatimClient instance."""
    return request.app.state.geocoder

@router.get(
    "",
    response_model=GeocodeResult,
    summary="Find an Australian location",
    description="Returns the best match for a town name or postcode"
)
async def geocode(
    q: str = Query(..., min_length=1, description="Town name or postcode"),
    geocoder: NominatimClient = Depends(get_geocoder)
) -> GeocodeResult:
    try:
        result = await geocoder.geocode(q)
    except GeocodingError as e:
        raise HTTPException(status_code=503, detail=f"Failed to fetch location: {e}")
    if result is None:
        raise HTTPException(status_code=404, detail=f"Location {q} not found")
    return result
