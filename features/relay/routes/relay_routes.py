import logging
from typing import Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from features.common.exceptions.upstream_exceptions import RelayTargetError
from features.relay.services.relay_client import RelayClient

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/relay",
    tags=["Relay"]
)

def get_relay_client(request: Request) -> RelayClient:
    """Dependency to get the RelayClient instance."""
    return request.app.state.relay_client

@router.get(
    "",
    summary="Relay a JSON request to the Bureau of Meteorology",
    description="Fetches a whitelisted BOM URL server-side and returns its JSON with permissive CORS headers"
)
async def relay(
    url: Optional[str] = None,
    client: RelayClient = Depends(get_relay_client)
):
    """Proxy a single BOM JSON document."""
    try:
        target = client.validate_target(url)
    except RelayTargetError as e:
        logger.warning(f"Rejected relay target: {e}")
        return JSONResponse(status_code=400, content={"error": "Invalid or missing URL parameter"})

    try:
        status, data = await client.fetch(target)
        if not 200 <= status < 300:
            return JSONResponse(status_code=status, content={"error": "Failed to fetch weather data"})
        return JSONResponse(
            status_code=200,
            content=data,
            headers={"Access-Control-Allow-Origin": "*"}
        )
    except Exception as e:
        logger.error(f"❌ Relay failed for {target}: {e!r}")
        return JSONResponse(status_code=500, content={"error": str(e)})
