"""Search Strategy - Retrieval Mode and Backend Protocols

Defines the four retrieval modes and the interfaces the dispatcher depends on.
"""

from enum import Enum
from typing import Any, Protocol


class SearchMode(str, Enum):
    """검색 모드

    설정값(``settings.search_mode``)으로 하나만 선택되며,
    CandidateRetriever 생성 시 주입됩니다.
    """

    TRIGRAM = "trigram"  # 문자 n-gram 유사도 (의미 보존 정규화)
    BM25 = "bm25"  # 키워드 관련도 (공격적 정규화)
    HYBRID = "hybrid"  # BM25 + 유사도 RRF
    SEMANTIC = "semantic"  # 임베딩 최근접 이웃

    @property
    def score_field(self) -> str:
        """백엔드 결과 행에서 점수를 담은 필드명"""
        return "similarity" if self is SearchMode.SEMANTIC else "match_score"


class SearchBackend(Protocol):
    """검색 백엔드 인터페이스

    모드별 함수 하나씩. 결과는 점수 내림차순의 dict 행 목록이며
    코어는 내용을 해석하지 않고 경계에서 MatchCandidate 로 정규화합니다.
    """

    async def search_trigram(self, raw: str, clean: str, limit: int) -> list[dict[str, Any]]:
        ...

    async def search_bm25(self, query: str, limit: int) -> list[dict[str, Any]]:
        ...

    async def search_hybrid(
        self, raw: str, clean: str, limit: int, bm25_weight: float, semantic_weight: float
    ) -> list[dict[str, Any]]:
        ...

    async def search_vector(
        self, embedding: list[float], limit: int, similarity_threshold: float
    ) -> list[dict[str, Any]]:
        ...


class EmbeddingProvider(Protocol):
    """임베딩 생성 인터페이스 (semantic 모드 전용)"""

    async def embed(self, text: str) -> list[float]:
        """텍스트 임베딩 생성

        Raises:
            EmbeddingException: 임베딩 생성 실패 ('결과 없음'과 구분)
        """
        ...
