"""Matching Routes (Engine Layer)

HTTP Layer가 Engine Layer로 요청을 위임하는 단순한 Translator 역할만 수행합니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from foodmatch.core.config import settings
from foodmatch.core.exceptions import FoodMatchException
from foodmatch.core.logging import logger, sanitize_for_log
from foodmatch.engine import (
    CandidateRetriever,
    ItemMatchOutcome,
    MatchingOrchestrator,
    MatchStatus,
    OpenAIEmbeddingProvider,
    SearchMode,
    SupabaseSearchBackend,
)
from foodmatch.funnel.funnel_matcher import FunnelResult, ScoredCandidate
from foodmatch.schemas.matching_schema import (
    ComparisonData,
    FunnelData,
    InvoiceLineItem,
    ItemMatchData,
    MatchBatchRequest,
    MatchBatchResponse,
    MatchResponse,
    PriceRangeData,
    ProductSearchResponse,
    ScoredCandidateData,
    SupplierSavingData,
)
from foodmatch.services.comparison import SupplierComparison

router = APIRouter(prefix="/api/v1", tags=["matching"])

# 싱글톤
_search_backend: Optional[SupabaseSearchBackend] = None
_embedder: Optional[OpenAIEmbeddingProvider] = None
_orchestrator: Optional[MatchingOrchestrator] = None


def get_search_backend() -> SupabaseSearchBackend:
    """SupabaseSearchBackend 싱글톤"""
    global _search_backend
    if _search_backend is None:
        _search_backend = SupabaseSearchBackend()
    return _search_backend


def get_embedder() -> Optional[OpenAIEmbeddingProvider]:
    """임베딩 생성기 싱글톤 (semantic 모드에서만 생성)"""
    global _embedder
    if SearchMode(settings.search_mode) is not SearchMode.SEMANTIC:
        return None
    if _embedder is None:
        _embedder = OpenAIEmbeddingProvider()
    return _embedder


def get_retriever(
    backend: SupabaseSearchBackend = Depends(get_search_backend),
    embedder: Optional[OpenAIEmbeddingProvider] = Depends(get_embedder),
) -> CandidateRetriever:
    """설정된 검색 모드로 CandidateRetriever 생성"""
    return CandidateRetriever(SearchMode(settings.search_mode), backend, embedder)


def get_orchestrator(
    retriever: CandidateRetriever = Depends(get_retriever),
) -> MatchingOrchestrator:
    """MatchingOrchestrator 싱글톤

    Engine Layer의 진입점을 제공합니다.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = MatchingOrchestrator(retriever)
    return _orchestrator


async def shutdown_matching_clients() -> None:
    """앱 종료 시 외부 클라이언트 정리"""
    global _search_backend, _embedder, _orchestrator
    if _search_backend is not None:
        await _search_backend.close()
    if _embedder is not None:
        await _embedder.close()
    _search_backend = None
    _embedder = None
    _orchestrator = None


def _scored_data(scored: ScoredCandidate) -> ScoredCandidateData:
    return ScoredCandidateData(
        product=scored.product,
        text_score=scored.text_score,
        attribute_score=scored.attribute_score,
        price_in_range=scored.price_in_range,
        final_score=scored.final_score,
        mismatch_reasons=scored.mismatch_reasons,
    )


def _funnel_data(funnel: FunnelResult) -> FunnelData:
    match = funnel.result
    price_range = None
    if funnel.success:
        price_range = PriceRangeData(
            min=match.price_range.min,
            max=match.price_range.max,
            base=match.price_range.base,
            tolerance_percent=match.price_range.tolerance_percent,
        )
    return FunnelData(
        success=funnel.success,
        primary=[_scored_data(s) for s in match.primary],
        secondary=[_scored_data(s) for s in match.secondary],
        price_range=price_range,
        invoice_ppu=match.invoice_ppu.value if match.invoice_ppu else None,
        ppu_unit=match.invoice_ppu.unit if match.invoice_ppu else None,
        error=funnel.error,
    )


def _comparison_data(comparison: Optional[SupplierComparison]) -> Optional[ComparisonData]:
    if comparison is None:
        return None
    return ComparisonData(
        suppliers=[
            SupplierSavingData(
                supplier=s.supplier,
                product=s.product,
                standard_price=s.standard_price,
                comparable_price=s.comparable_price,
                savings=s.savings,
                loss=s.loss,
            )
            for s in comparison.suppliers
        ],
        best_supplier=comparison.best_supplier,
        max_savings=comparison.max_savings,
    )


def to_item_data(outcome: ItemMatchOutcome) -> ItemMatchData:
    """ItemMatchOutcome → API 응답 모델"""
    return ItemMatchData(
        row_number=outcome.item.row_number,
        item_name=outcome.item.item_name,
        match_status=outcome.result.status.value,
        best_match=outcome.result.best_match,
        candidates=outcome.result.candidates,
        funnel=_funnel_data(outcome.funnel),
        comparison=_comparison_data(outcome.comparison),
        error_code=outcome.result.error_code,
    )


@router.post("/match", response_model=MatchResponse)
async def match_item(
    item: InvoiceLineItem,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """품목 하나 매칭

    Flow:
        1. HTTP Request 수신 (스키마 검증)
        2. Engine에 위임 (검색 → 분류 → 깔때기 → 공급사 비교)
        3. 결과를 HTTP Response로 변환
    """
    logger.info(f"[API] Match request: item (length: {len(item.item_name)})")

    outcome = await orchestrator.match_item(item)
    data = to_item_data(outcome)

    if outcome.result.is_error:
        return MatchResponse(
            status="error",
            data=data,
            message=outcome.result.error_message or "검색에 실패했습니다.",
            error_code=outcome.result.error_code,
        )

    return MatchResponse(
        status="success",
        data=data,
        message=_status_message(outcome.result.status),
        error_code=None,
    )


@router.post("/match/batch", response_model=MatchBatchResponse)
async def match_batch(
    request: MatchBatchRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """여러 품목 일괄 매칭 (일부 실패해도 나머지 결과는 반환)"""
    logger.info(f"[API] Batch match request: items={len(request.items)}")

    outcomes = await orchestrator.match_batch(request.items)

    summary = {status.value: 0 for status in MatchStatus}
    failed = 0
    for outcome in outcomes:
        summary[outcome.result.status.value] += 1
        if outcome.result.is_error:
            failed += 1
    summary["failed"] = failed

    return MatchBatchResponse(
        status="success",
        data=[to_item_data(o) for o in outcomes],
        summary=summary,
        message=f"{len(outcomes)}개 품목 매칭 완료",
        error_code=None,
    )


@router.get("/products/search", response_model=ProductSearchResponse)
async def search_products(
    q: str = Query(..., min_length=1, max_length=200, description="검색어"),
    supplier: Optional[str] = Query(None, max_length=50, description="공급사 필터"),
    limit: int = Query(10, ge=1, le=50, description="결과 개수 (최대 50)"),
    retriever: CandidateRetriever = Depends(get_retriever),
):
    """수동 검색용 상품 검색"""
    if not q.strip():
        return ProductSearchResponse(
            status="error",
            data=[],
            message="검색어는 공백만으로 구성될 수 없습니다",
            error_code="VALIDATION_ERROR",
        )

    try:
        candidates = await retriever.retrieve(q.strip(), limit=limit)
    except FoodMatchException as e:
        logger.warning(f"[API] Product search failed: q='{sanitize_for_log(q)}', error={e.error_code}")
        return ProductSearchResponse(
            status="error",
            data=[],
            message=e.message,
            error_code=e.error_code,
        )

    if supplier:
        wanted = supplier.strip().lower()
        candidates = [c for c in candidates if c.supplier.lower() == wanted]

    return ProductSearchResponse(
        status="success",
        data=candidates,
        message=f"{len(candidates)}개 상품을 찾았습니다.",
        error_code=None,
    )


def _status_message(status: MatchStatus) -> str:
    if status is MatchStatus.AUTO_MATCHED:
        return "자동 매칭되었습니다."
    if status is MatchStatus.PENDING:
        return "검토가 필요한 후보가 있습니다."
    return "매칭되는 상품이 없습니다."
