from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
import asyncio

from core.config import settings
from core.logging_config import setup_logging

# Feature routes
from features.dashboard.routes.dashboard_routes import router as dashboard_router
from features.forecast.routes.forecast_routes import router as forecast_router
from features.geocoding.routes.geocoding_routes import router as geocoding_router
from features.observations.routes.observation_routes import router as observation_router
from features.relay.routes.relay_routes import router as relay_router

# Services and clients
from features.dashboard.services.dashboard_session import DashboardSession
from features.forecast.services.forecast_service import ForecastService
from features.forecast.services.open_meteo_client import OpenMeteoClient
from features.geocoding.services.nominatim_client import NominatimClient
from features.observations.services.bom_client import BOMObservationClient
from features.observations.services.observation_service import ObservationService
from features.relay.services.relay_client import RelayClient

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        logger.info("🚀 Starting Foil Window API...")

        forecast_client = OpenMeteoClient()
        geocoder = NominatimClient()
        bom_client = BOMObservationClient()
        relay_client = RelayClient()
        app.state.clients = [forecast_client, geocoder, bom_client, relay_client]

        app.state.forecast_service = ForecastService(forecast_client)
        app.state.observation_service = ObservationService(bom_client)
        app.state.geocoder = geocoder
        app.state.relay_client = relay_client
        app.state.dashboard_session = DashboardSession(
            geocoder=geocoder,
            forecast_client=forecast_client,
            observation_service=app.state.observation_service
        )

        if settings.prime_on_startup:
            # Load the default location without holding up startup
            app.state.prime_task = asyncio.create_task(app.state.dashboard_session.initialize())

        logger.info(
            f"✨ API startup complete - {settings.compass_points}-point compass, "
            f"{settings.direction_mean} direction mean, times in {settings.display_timezone}"
        )
        yield

    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")
        raise
    finally:
        logger.info("🔄 Shutting down API...")
        if hasattr(app.state, "prime_task"):
            app.state.prime_task.cancel()
            try:
                await app.state.prime_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"❌ Initial dashboard load failed: {str(e)}")

        for client in getattr(app.state, "clients", []):
            await client.close()

        logger.info("👋 API shutdown complete")

app = FastAPI(
    title="Foil Window API",
    description="Wind and wave forecasts rated for wing-foiling, with live BOM station observations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include feature routers
app.include_router(dashboard_router)
app.include_router(forecast_router)
app.include_router(observation_router)
app.include_router(geocoding_router)
app.include_router(relay_router)

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "time": datetime.now().isoformat()
    }

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 5010))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info",
        workers=1
    )
