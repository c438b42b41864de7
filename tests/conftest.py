"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake 백엔드/임베딩 주입
- 품목/상품 생성 헬퍼

금지:
- 실제 네트워크 호출 (Supabase/OpenAI)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Iterable, Optional

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from foodmatch.core.exceptions import EmbeddingException, RetrievalException  # noqa: E402
from foodmatch.schemas.matching_schema import CatalogProduct, InvoiceLineItem, MatchCandidate  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


# ============================================================================
# 생성 헬퍼
# ============================================================================

def make_item(
    name: str,
    spec: Optional[str] = None,
    unit_price: float = 0,
    quantity: float = 1,
    row_number: int = 1,
) -> InvoiceLineItem:
    return InvoiceLineItem(
        row_number=row_number,
        item_name=name,
        spec=spec,
        quantity=quantity,
        unit_price=unit_price,
        total_price=unit_price * quantity,
    )


def make_product(
    id: str,
    name: str,
    price: float,
    spec_quantity: Optional[float] = None,
    spec_unit: Optional[str] = None,
    category: Optional[str] = "농산물",
    supplier: str = "CJ",
) -> CatalogProduct:
    return CatalogProduct(
        id=id,
        name=name,
        standard_price=price,
        spec_quantity=spec_quantity,
        spec_unit=spec_unit,
        category=category,
        supplier=supplier,
    )


def make_candidate(id: str, score: float, name: str = "양파", **kwargs: Any) -> MatchCandidate:
    product = make_product(id, name, kwargs.pop("price", 5000), **kwargs)
    return MatchCandidate(**product.model_dump(), match_score=score)


def make_row(
    id: str,
    name: str,
    price: float = 5000,
    spec_quantity: Optional[float] = 1,
    spec_unit: Optional[str] = "KG",
    score: float = 0.9,
    supplier: str = "CJ",
    category: Optional[str] = "농산물",
    score_field: str = "match_score",
) -> dict[str, Any]:
    """검색 백엔드 RPC 결과 행"""
    return {
        "id": id,
        "product_name": name,
        "standard_price": price,
        "unit_normalized": spec_unit,
        "spec_quantity": spec_quantity,
        "spec_unit": spec_unit,
        "supplier": supplier,
        "category": category,
        "tax_type": "면세",
        score_field: score,
    }


# ============================================================================
# Fake 외부 협력자
# ============================================================================

class FakeSearchBackend:
    """검색 백엔드 Fake

    - 모드별 호출 인자를 calls 에 기록
    - rows_by_query 로 검색어별 결과 지정, fail_on 검색어는 RetrievalException
    """

    def __init__(
        self,
        rows: Optional[list[dict[str, Any]]] = None,
        error: Optional[Exception] = None,
        rows_by_query: Optional[dict[str, list[dict[str, Any]]]] = None,
        fail_on: Iterable[str] = (),
    ):
        self.rows = rows or []
        self.error = error
        self.rows_by_query = rows_by_query or {}
        self.fail_on = set(fail_on)
        self.calls: list[tuple[str, tuple]] = []

    async def _respond(self, key: str) -> list[dict[str, Any]]:
        if self.error:
            raise self.error
        if key in self.fail_on:
            raise RetrievalException("fake", f"failed for {key}")
        return [dict(row) for row in self.rows_by_query.get(key, self.rows)]

    async def search_trigram(self, raw: str, clean: str, limit: int) -> list[dict[str, Any]]:
        self.calls.append(("trigram", (raw, clean, limit)))
        return await self._respond(raw)

    async def search_bm25(self, query: str, limit: int) -> list[dict[str, Any]]:
        self.calls.append(("bm25", (query, limit)))
        return await self._respond(query)

    async def search_hybrid(
        self, raw: str, clean: str, limit: int, bm25_weight: float, semantic_weight: float
    ) -> list[dict[str, Any]]:
        self.calls.append(("hybrid", (raw, clean, limit, bm25_weight, semantic_weight)))
        return await self._respond(raw)

    async def search_vector(
        self, embedding: list[float], limit: int, similarity_threshold: float
    ) -> list[dict[str, Any]]:
        self.calls.append(("semantic", (len(embedding), limit, similarity_threshold)))
        return await self._respond("<vector>")


class FakeEmbedder:
    """임베딩 Fake (384차원 고정 벡터)"""

    def __init__(self, error: Optional[Exception] = None, dimensions: int = 384):
        self.error = error
        self.dimensions = dimensions
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error:
            raise self.error
        return [0.1] * self.dimensions


@pytest.fixture
def fake_backend() -> FakeSearchBackend:
    return FakeSearchBackend(rows=[make_row("p1", "양파 국내산", score=0.9)])


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def failing_embedder() -> FakeEmbedder:
    return FakeEmbedder(error=EmbeddingException("rate limit exceeded"))
