"""FastAPI 앱 팩토리"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from foodmatch.core.config import settings
from foodmatch.core.exceptions import ConfigurationException, FoodMatchException
from foodmatch.core.logging import logger
from foodmatch.api import health_router, matching_router, shutdown_matching_clients


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기"""
    logger.info(f"Starting application... (search_mode={settings.search_mode})")
    yield
    logger.info("Shutting down application...")
    try:
        await shutdown_matching_clients()
    except Exception as e:
        # 종료 훅에서의 예외는 앱 종료를 막지 않음
        logger.warning(f"Client shutdown failed: {type(e).__name__}")


async def foodmatch_exception_handler(request: Request, exc: FoodMatchException) -> JSONResponse:
    """도메인 예외 → status="error" 응답"""
    status_code = 503 if isinstance(exc, ConfigurationException) else 500
    logger.error(f"[API] {request.url.path} failed: {exc.error_code}")
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "data": None,
            "message": exc.message,
            "error_code": exc.error_code,
        },
    )


def create_app() -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Returns:
        FastAPI 앱 인스턴스
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FoodMatchException, foodmatch_exception_handler)

    # 라우터 등록
    app.include_router(health_router)
    app.include_router(matching_router)

    return app

# 앱 인스턴스 생성 (uvicorn이 로드할 수 있도록)
app = create_app()
