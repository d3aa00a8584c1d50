"""
API Version 1 routes.

Includes telemetry, device, command and tenant endpoints.
"""
from fastapi import APIRouter

from .telemetry import router as telemetry_router
from .devices import router as devices_router
from .commands import router as commands_router
from .tenants import router as tenants_router

# Main API router that includes all sub-routers
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(telemetry_router)
api_router.include_router(devices_router)
api_router.include_router(commands_router)
api_router.include_router(tenants_router)

__all__ = [
    "api_router",
    "telemetry_router",
    "devices_router",
    "commands_router",
    "tenants_router",
]
