"""Search Backends - Supabase PostgREST RPC client + row normalization

네 가지 검색 모드는 DB 측 RPC 함수로 구현되어 있으며, 여기서는 호출만 합니다.

- search_products_fuzzy(search_term_raw, search_term_clean, limit_count)
- search_products_bm25(search_term, limit_count)
- search_products_hybrid(search_term_raw, search_term_clean, limit_count, bm25_weight, semantic_weight)
- search_products_vector(query_embedding, limit_count, similarity_threshold)

HTTP 클라이언트는 프로세스 단위로 재사용하고 앱 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Optional

import httpx
from pydantic import ValidationError

from foodmatch.core.config import settings
from foodmatch.core.exceptions import ConfigurationException, RetrievalException
from foodmatch.core.logging import logger
from foodmatch.schemas.matching_schema import MatchCandidate

from .strategy import SearchMode


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def to_candidate(row: dict[str, Any], mode: SearchMode) -> MatchCandidate:
    """백엔드 결과 행 하나를 MatchCandidate 로 정규화

    semantic 모드는 ``similarity``, 나머지는 ``match_score`` 를 점수로 사용하며 [0, 1]로 자릅니다.
    """
    raw_score = row.get(mode.score_field)
    if raw_score is None:
        # 다른 모드의 필드명으로 오는 경우도 허용
        raw_score = row.get("match_score", row.get("similarity", 0.0))

    return MatchCandidate(
        id=row.get("id"),
        name=row.get("product_name") or row.get("name") or "",
        standard_price=row.get("standard_price") or 0,
        spec_quantity=row.get("spec_quantity"),
        spec_unit=row.get("spec_unit"),
        supplier=row.get("supplier") or "",
        category=row.get("category"),
        tax_type=row.get("tax_type"),
        unit_normalized=row.get("unit_normalized"),
        match_score=_clamp(float(raw_score or 0.0)),
    )


def to_candidates(rows: Iterable[dict[str, Any]], mode: SearchMode) -> list[MatchCandidate]:
    """결과 행 목록 정규화 (점수 내림차순, 동점은 백엔드 순서 유지)

    Raises:
        RetrievalException: 행 형식이 올바르지 않은 경우
    """
    try:
        candidates = [to_candidate(row, mode) for row in rows]
    except (ValidationError, TypeError, ValueError) as e:
        raise RetrievalException(mode.value, f"malformed backend row: {type(e).__name__}") from e

    return sorted(candidates, key=lambda c: c.match_score, reverse=True)


class SupabaseSearchBackend:
    """Supabase PostgREST RPC 검색 백엔드 (httpx)"""

    def __init__(
        self,
        url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.url = (url if url is not None else settings.supabase_url).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.supabase_service_key
        self.timeout_s = timeout_s if timeout_s is not None else settings.backend_timeout_s

        if not self.url:
            raise ConfigurationException("supabase_url", "search backend URL is not set")
        if not self.service_key:
            raise ConfigurationException("supabase_service_key", "search backend key is not set")

        self._lock = asyncio.Lock()
        self._client: Optional[httpx.AsyncClient] = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is not None:
                return self._client
            self._client = httpx.AsyncClient(
                base_url=f"{self.url}/rest/v1",
                headers=self.default_headers(),
                timeout=self.timeout_s,
            )
            return self._client

    def default_headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _rpc(self, mode: SearchMode, function: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        client = await self._ensure_client()
        try:
            resp = await client.post(f"/rpc/{function}", json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"[BACKEND] {function} returned HTTP {e.response.status_code}")
            raise RetrievalException(mode.value, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning(f"[BACKEND] {function} failed: {type(e).__name__}")
            raise RetrievalException(mode.value, type(e).__name__) from e
        except ValueError as e:
            raise RetrievalException(mode.value, "invalid JSON response") from e

        if not isinstance(data, list):
            raise RetrievalException(mode.value, "unexpected response shape")
        return data

    async def search_trigram(self, raw: str, clean: str, limit: int) -> list[dict[str, Any]]:
        return await self._rpc(
            SearchMode.TRIGRAM,
            "search_products_fuzzy",
            {"search_term_raw": raw, "search_term_clean": clean, "limit_count": limit},
        )

    async def search_bm25(self, query: str, limit: int) -> list[dict[str, Any]]:
        return await self._rpc(
            SearchMode.BM25,
            "search_products_bm25",
            {"search_term": query, "limit_count": limit},
        )

    async def search_hybrid(
        self, raw: str, clean: str, limit: int, bm25_weight: float, semantic_weight: float
    ) -> list[dict[str, Any]]:
        return await self._rpc(
            SearchMode.HYBRID,
            "search_products_hybrid",
            {
                "search_term_raw": raw,
                "search_term_clean": clean,
                "limit_count": limit,
                "bm25_weight": bm25_weight,
                "semantic_weight": semantic_weight,
            },
        )

    async def search_vector(
        self, embedding: list[float], limit: int, similarity_threshold: float
    ) -> list[dict[str, Any]]:
        return await self._rpc(
            SearchMode.SEMANTIC,
            "search_products_vector",
            {
                "query_embedding": embedding,
                "limit_count": limit,
                "similarity_threshold": similarity_threshold,
            },
        )

    async def close(self) -> None:
        async with self._lock:
            if self._client is None:
                return
            await self._client.aclose()
            self._client = None
