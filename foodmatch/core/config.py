"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 검색 모드 (trigram | bm25 | hybrid | semantic)
    # NOTE: 모드는 CandidateRetriever 생성 시 한 번만 주입됩니다.
    search_mode: Literal["trigram", "bm25", "hybrid", "semantic"] = "hybrid"
    search_limit: int = 5

    # Hybrid(RRF) 가중치
    hybrid_bm25_weight: float = 0.5
    hybrid_semantic_weight: float = 0.5

    # Vector 검색 최소 유사도
    vector_similarity_threshold: float = 0.2

    # 검색 백엔드 (Supabase PostgREST RPC)
    supabase_url: str = ""
    supabase_service_key: str = ""
    backend_timeout_s: float = 10.0

    # 임베딩 (semantic 모드 전용)
    openai_api_key: str = ""
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 384

    # API
    api_title: str = "식자재 단가 매칭 서비스"
    api_version: str = "1.0.0"
    api_description: str = "거래명세서 품목을 공급사 카탈로그와 매칭하고 단가를 비교합니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator("search_limit", "embedding_dimensions")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("search_limit and embedding_dimensions must be positive")
        return v

    @field_validator("hybrid_bm25_weight", "hybrid_semantic_weight", "vector_similarity_threshold")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("weights and thresholds must be within [0, 1]")
        return v

    @field_validator("backend_timeout_s")
    @classmethod
    def validate_backend_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("backend_timeout_s must be positive")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
