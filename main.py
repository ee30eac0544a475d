"""
Machine Fleet Monitor API v1.2.0

FastAPI entrypoint. The lifespan builds the service container (seeded
fleet, alert engine, collaborators, scheduler), starts the 5-second tick,
and stops it on shutdown.

Run:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from logger_config import configure_from_settings
from routers import include_all_routers
from service_container import ServiceContainer, get_container
from settings import APP, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown tasks.

    A container already placed on app.state (tests) is used as-is and
    is not started.
    """
    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        configure_from_settings()

    logger.info(f"Machine Fleet Monitor API v{APP.version} starting...")
    for warning in get_settings().validate():
        logger.warning(warning)

    if owns_container:
        app.state.container = ServiceContainer.build()
        app.state.container.start()

    logger.info(f"Monitoring {len(app.state.container.fleet)} machines")
    logger.info("API ready for connections")

    yield  # App runs here

    logger.info("Shutting down Machine Fleet Monitor API")
    if owns_container:
        app.state.container.shutdown()
        app.state.container = None


app = FastAPI(
    title="Machine Fleet Monitor API",
    description="Telemetry, failure risk, cost projection and alerts for an industrial machine fleet.",
    version=APP.version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=APP.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

include_all_routers(app)


@app.get("/api/health", tags=["Health"])
def health(container: ServiceContainer = Depends(get_container)):
    """Scheduler status and non-secret configuration"""
    return {
        "status": "ok",
        "scheduler": container.scheduler.status(),
        "alerts": len(container.alerts),
        "settings": get_settings().to_dict(),
    }
