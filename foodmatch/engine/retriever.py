"""Candidate Retriever - Search-Mode Dispatcher

검색 모드는 생성 시 주입되며 호출마다 바뀌지 않습니다.
쿼리 준비와 백엔드 선택만 하고 자체 점수 계산은 하지 않습니다.

| 모드     | 백엔드 입력                           |
|----------|---------------------------------------|
| trigram  | 원문 + 의미 보존 정규화               |
| bm25     | 키워드 정규화                         |
| hybrid   | 원문(노이즈 제거) + 키워드 정규화     |
| semantic | 의미 보존 정규화의 임베딩             |
"""

from __future__ import annotations

from typing import Optional

from foodmatch.core.config import settings
from foodmatch.core.exceptions import (
    ConfigurationException,
    EmbeddingException,
    InvalidQueryException,
    RetrievalException,
)
from foodmatch.core.logging import logger, sanitize_for_log
from foodmatch.schemas.matching_schema import MatchCandidate
from foodmatch.utils.text.core.cleaning import clean_item_name
from foodmatch.utils.text.normalization import normalize

from .backends import to_candidates
from .classifier import classify
from .result import MatchResult
from .strategy import EmbeddingProvider, SearchBackend, SearchMode


class CandidateRetriever:
    """후보 검색기

    Usage:
        retriever = CandidateRetriever(SearchMode.HYBRID, backend)
        candidates = await retriever.retrieve("국산 양파 1kg")
        result = await retriever.find_matches("국산 양파 1kg")
    """

    def __init__(
        self,
        mode: SearchMode,
        backend: SearchBackend,
        embedder: Optional[EmbeddingProvider] = None,
        limit: Optional[int] = None,
        bm25_weight: Optional[float] = None,
        semantic_weight: Optional[float] = None,
        similarity_threshold: Optional[float] = None,
    ):
        """
        Args:
            mode: 검색 모드
            backend: 검색 백엔드 (모드별 RPC 구현)
            embedder: 임베딩 생성기 (semantic 모드 필수)
            limit: 결과 개수 (기본값: settings.search_limit)
            bm25_weight / semantic_weight: hybrid RRF 가중치
            similarity_threshold: semantic 최소 유사도
        """
        if not backend:
            raise ValueError("backend must not be None")

        self.mode = SearchMode(mode)
        if self.mode is SearchMode.SEMANTIC and embedder is None:
            raise ConfigurationException("embedder", "semantic mode requires an embedding provider")

        self.backend = backend
        self.embedder = embedder
        self.limit = limit if limit is not None else settings.search_limit
        self.bm25_weight = bm25_weight if bm25_weight is not None else settings.hybrid_bm25_weight
        self.semantic_weight = (
            semantic_weight if semantic_weight is not None else settings.hybrid_semantic_weight
        )
        self.similarity_threshold = (
            similarity_threshold if similarity_threshold is not None else settings.vector_similarity_threshold
        )

    async def retrieve(self, item_name: str, limit: Optional[int] = None) -> list[MatchCandidate]:
        """모드에 맞게 쿼리를 준비해 백엔드 호출

        Returns:
            list[MatchCandidate]: match_score 내림차순 후보

        Raises:
            InvalidQueryException: 빈 품목명
            RetrievalException: 백엔드 호출 실패
            EmbeddingException: 임베딩 생성 실패 (semantic)
        """
        if not item_name or not item_name.strip():
            raise InvalidQueryException("item name is empty")

        limit = limit or self.limit
        query = normalize(item_name)

        if self.mode is SearchMode.TRIGRAM:
            rows = await self.backend.search_trigram(item_name, query.for_semantic, limit)
        elif self.mode is SearchMode.BM25:
            rows = await self.backend.search_bm25(query.for_keyword or clean_item_name(item_name), limit)
        elif self.mode is SearchMode.HYBRID:
            rows = await self.backend.search_hybrid(
                clean_item_name(item_name),
                query.for_keyword,
                limit,
                self.bm25_weight,
                self.semantic_weight,
            )
        else:
            embedding = await self.embedder.embed(query.for_semantic or item_name)
            rows = await self.backend.search_vector(embedding, limit, self.similarity_threshold)

        candidates = to_candidates(rows or [], self.mode)
        logger.debug(
            f"Retrieved {len(candidates)} candidates: mode={self.mode.value}, "
            f"query='{sanitize_for_log(item_name)}'"
        )
        return candidates

    async def search(self, item_name: str) -> tuple[list[MatchCandidate], MatchResult]:
        """검색 + 분류 (후보 목록과 분류 결과를 함께 반환)

        검색/임베딩 실패는 재시도 없이 빈 후보와 unmatched 결과(에러 코드 포함)가 됩니다.
        """
        try:
            candidates = await self.retrieve(item_name)
        except EmbeddingException as e:
            logger.error(f"Embedding failed: query='{sanitize_for_log(item_name)}', error={e.error_code}")
            return [], MatchResult.embedding_failed(query=item_name, error=e.message)
        except RetrievalException as e:
            logger.warning(f"Retrieval failed: query='{sanitize_for_log(item_name)}', error={e.error_code}")
            return [], MatchResult.retrieval_failed(query=item_name, error=e.message)
        except InvalidQueryException:
            raise
        except Exception as e:
            # 백엔드 구현이 RetrievalException 으로 감싸지 않은 오류
            logger.error(
                f"Retrieval failed: query='{sanitize_for_log(item_name)}', error={type(e).__name__}",
                exc_info=True,
            )
            return [], MatchResult.retrieval_failed(query=item_name, error=str(e))

        return candidates, classify(candidates, query=item_name)

    async def find_matches(self, item_name: str) -> MatchResult:
        """검색 + 분류 결과만 반환"""
        _, result = await self.search(item_name)
        return result
