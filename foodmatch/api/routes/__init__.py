"""API routes package."""

from .health_routes import router as health_router
from .matching_routes import (
    get_orchestrator,
    get_retriever,
    router as matching_router,
    shutdown_matching_clients,
)

__all__ = ["health_router", "matching_router", "get_orchestrator", "get_retriever", "shutdown_matching_clients"]
