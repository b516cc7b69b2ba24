from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request

from features.dashboard.models.view_types import (
    DashboardView,
    DisplayOptions,
    DisplayRequest,
    LocationRequest,
    ModelRequest
)
from features.dashboard.services.dashboard_session import DashboardSession
from features.rating.models.rating_types import Preferences

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"]
)

def get_session(request: Request) -> DashboardSession:
    """Dependency to get the DashboardSession instance."""
    return request.app.state.dashboard_session

@router.get(
    "",
    response_model=DashboardView,
    summary="Get the dashboard",
    description="Returns today's rated 3-hour blocks, hourly cards, station observations and the current inputs"
)
async def get_dashboard(
    session: DashboardSession = Depends(get_session)
) -> DashboardView:
    return session.view()

@router.post(
    "/location",
    response_model=DashboardView,
    summary="Change location",
    description="Geocodes a town name or postcode and refetches the forecast. On failure the previous location is kept and the error is shown"
)
async def update_location(
    body: LocationRequest,
    session: DashboardSession = Depends(get_session)
) -> DashboardView:
    await session.update_location(body.query)
    return session.view()

@router.put(
    "/model",
    response_model=DashboardView,
    summary="Change forecast model"
)
async def update_model(
    body: ModelRequest,
    session: DashboardSession = Depends(get_session)
) -> DashboardView:
    try:
        await session.set_model(body.model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.view()

@router.put(
    "/preferences",
    response_model=DashboardView,
    summary="Replace wind preferences"
)
async def update_preferences(
    body: Preferences,
    session: DashboardSession = Depends(get_session)
) -> DashboardView:
    session.set_preferences(body)
    return session.view()

@router.post(
    "/preferences/directions/{label}/toggle",
    response_model=Preferences,
    summary="Toggle a preferred direction"
)
async def toggle_direction(
    label: str,
    session: DashboardSession = Depends(get_session)
) -> Preferences:
    try:
        return session.toggle_direction(label)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post(
    "/stations/{station_id}/toggle",
    response_model=List[str],
    summary="Show or hide a station's observations"
)
async def toggle_station(
    station_id: str,
    session: DashboardSession = Depends(get_session)
) -> List[str]:
    try:
        return session.toggle_station(station_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Station {station_id} not found")

@router.post(
    "/observations/refresh",
    response_model=DashboardView,
    summary="Refetch station observations"
)
async def refresh_observations(
    session: DashboardSession = Depends(get_session)
) -> DashboardView:
    await session.refresh_observations()
    return session.view()

@router.put(
    "/display",
    response_model=DisplayOptions,
    summary="Change display options"
)
async def update_display(
    body: DisplayRequest,
    session: DashboardSession = Depends(get_session)
) -> DisplayOptions:
    return session.set_display(**body.model_dump())
