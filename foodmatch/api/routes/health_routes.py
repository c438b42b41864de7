"""헬스 체크 엔드포인트"""
from fastapi import APIRouter
from datetime import datetime

from foodmatch.schemas.matching_schema import HealthResponse
from foodmatch.core.config import settings
from foodmatch import __version__

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    헬스 체크 엔드포인트

    - 서버 상태
    - 검색 백엔드 설정 여부
    - 검색 모드
    """
    backend_ok = bool(settings.supabase_url and settings.supabase_service_key)
    embedder_ok = settings.search_mode != "semantic" or bool(settings.openai_api_key)

    status = "ok" if backend_ok and embedder_ok else "degraded"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(),
        version=__version__,
        search_mode=settings.search_mode,
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "식자재 품목 매칭 서비스",
        "version": __version__,
        "docs": "/docs"
    }
