"""API 엔드포인트 패키지 - export only."""

from .routes import health_router, matching_router, get_orchestrator, get_retriever, shutdown_matching_clients

__all__ = ["health_router", "matching_router", "get_orchestrator", "get_retriever", "shutdown_matching_clients"]
