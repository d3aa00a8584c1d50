"""
FastAPI application entry point for the Greenhouse Hub.

This is the backend for:
- Telemetry and attribute reads through ThingsBoard
- Control commands with confirmation tracking
- Device reachability and sensor threshold monitoring
"""
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .domain.exceptions import DomainException
from .hub import GreenhouseHub
from .infrastructure.database.connection import DatabaseManager, get_unit_of_work, init_db

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger(__name__)

# HTTP status per domain error code; unknown codes answer 400
ERROR_STATUS = {
    'TENANT_NOT_FOUND': status.HTTP_404_NOT_FOUND,
    'DEVICE_NOT_FOUND': status.HTTP_404_NOT_FOUND,
    'DEVICE_UNREACHABLE': status.HTTP_503_SERVICE_UNAVAILABLE,
    'PLATFORM_AUTH_ERROR': status.HTTP_502_BAD_GATEWAY,
    'PLATFORM_CONNECTION_ERROR': status.HTTP_502_BAD_GATEWAY,
    'PLATFORM_TIMEOUT': status.HTTP_504_GATEWAY_TIMEOUT,
    'RULE_EVALUATION_ERROR': status.HTTP_422_UNPROCESSABLE_ENTITY,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Starts the hub unless one was installed on ``app.state`` already.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    hub: Optional[GreenhouseHub] = getattr(app.state, "hub", None)
    owns_hub = hub is None

    if owns_hub:
        try:
            await init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

        hub = GreenhouseHub(get_unit_of_work, settings=settings)
        app.state.hub = hub

    if not hub.is_running:
        await hub.start()

    yield

    logger.info("Shutting down application...")
    await hub.stop()
    if owns_hub:
        await DatabaseManager.close()
    logger.info("Shutdown complete")


def create_app(hub: Optional[GreenhouseHub] = None) -> FastAPI:
    """
    Application factory.

    Args:
        hub: Pre-built hub; the lifespan creates one from settings otherwise.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Greenhouse Hub API - ThingsBoard access, commands and monitoring",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    if hub is not None:
        app.state.hub = hub

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        status_code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
        if status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")

        if settings.debug:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    'error': 'INTERNAL_ERROR',
                    'message': str(exc),
                    'type': type(exc).__name__,
                },
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                'error': 'INTERNAL_ERROR',
                'message': 'An internal error occurred',
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes."""

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Check application health."""
        hub: Optional[GreenhouseHub] = getattr(request.app.state, "hub", None)
        running = hub is not None and hub.is_running

        return {
            'status': 'healthy' if running else 'unhealthy',
            'services': {
                'hub': 'up' if running else 'down',
                'device_monitor': 'up' if running and hub.device_monitor.is_running else 'down',
                'sensor_monitor': 'up' if running and hub.sensor_monitor.is_running else 'down',
            },
            'version': settings.app_version,
            'environment': settings.environment,
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            'name': settings.app_name,
            'version': settings.app_version,
            'api_docs': '/docs' if settings.debug else None,
        }

    from .api.v1 import api_router

    app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        create_app(),
        host=settings.host,
        port=settings.port,
    )
