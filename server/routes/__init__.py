"""Router aggregation."""

from __future__ import annotations

from fastapi import APIRouter

from relay.routers import health as health_router_module
from relay.routers import relay as relay_router_module

# Create aggregated router. Relay routes sit at the root because the paths
# are part of the public contract.
api_router = APIRouter()

# Include routers; health checks are exempt from admission control
api_router.include_router(health_router_module.router)
api_router.include_router(relay_router_module.router)

__all__ = ["api_router"]
