"""
Main FastAPI application entry point.

This module creates and configures the AR payment API, wires the core
services and runs the AR code expiry tick for the application's lifetime.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables from .env file
load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arpay.arcodes.routes import router as codes_router
from arpay.config import ArPaySettings, settings
from arpay.networks.routes import router as networks_router
from arpay.payment.routes import router as descriptors_router
from arpay.routing.routes import router as routes_router
from arpay.services import ArPayServices, build_services

logger = logging.getLogger(__name__)

# Configuration constants
API_VERSION = "0.1.0"
SERVICE_NAME = "arpay-api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the AR code tick while the app is serving."""
    services: ArPayServices = app.state.services
    services.manager.start()
    try:
        yield
    finally:
        await services.manager.stop()
        close = getattr(services.gateway, "aclose", None)
        if close is not None:
            await close()


def create_app(
    app_settings: Optional[ArPaySettings] = None,
    services: Optional[ArPayServices] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build services from (defaults to the
            environment-loaded settings)
        services: Prebuilt services, e.g. with a test gateway or clock

    Returns:
        Configured FastAPI application instance
    """
    services = services or build_services(app_settings or settings)

    app = FastAPI(
        title="AR Agent Payments API",
        description="Payment descriptors, cross-chain routes and AR payment codes",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint for monitoring and load balancers."""
        return JSONResponse(
            content={
                "status": "healthy",
                "service": SERVICE_NAME,
                "version": API_VERSION,
                "networks": len(services.registry),
                "tick_running": services.manager.running,
            }
        )

    app.include_router(networks_router)
    app.include_router(routes_router)
    app.include_router(descriptors_router)
    app.include_router(codes_router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=settings.api_port)
