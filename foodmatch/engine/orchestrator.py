"""Matching Orchestrator - Main Engine Entry Point

Coordinates the per-item matching pipeline:
1. Candidate retrieval (configured search mode)
2. Tier classification on the backend score
3. Funnel refinement (price cluster + attribute filter)
4. Supplier comparison

Batches fan out with asyncio.gather and wait for every item. A retrieval or
embedding failure only affects its own item.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence

from foodmatch.core.logging import logger, sanitize_for_log
from foodmatch.funnel.funnel_matcher import FunnelResult, get_funnel_recommendations
from foodmatch.schemas.matching_schema import InvoiceLineItem, MatchCandidate
from foodmatch.services.comparison import SupplierComparison, compare_suppliers

from .result import MatchResult, MatchStatus
from .retriever import CandidateRetriever


@dataclass
class ItemMatchOutcome:
    """품목 하나의 최종 매칭 결과

    Attributes:
        item: 입력 품목
        result: 백엔드 점수 기준 매칭 단계
        funnel: 깔때기 추천 (가격/속성 재정렬)
        comparison: 공급사 비교 (깔때기 성공 시에만)
    """

    item: InvoiceLineItem
    result: MatchResult
    funnel: FunnelResult
    comparison: Optional[SupplierComparison] = None


class MatchingOrchestrator:
    """매칭 엔진 오케스트레이터

    재시도/타임아웃/취소는 하지 않습니다. 지연 제한은 호출자(요청/배치 단위)의 몫입니다.
    """

    def __init__(self, retriever: CandidateRetriever):
        """
        Args:
            retriever: 후보 검색기 (검색 모드 주입 완료)
        """
        if not retriever:
            raise ValueError("retriever must not be None")

        self.retriever = retriever

    async def match_item(self, item: InvoiceLineItem) -> ItemMatchOutcome:
        """품목 하나 매칭

        Args:
            item: 거래명세서 품목

        Returns:
            ItemMatchOutcome: 분류 결과 + 깔때기 추천 + 공급사 비교
        """
        logger.info(f"Match started: row={item.row_number}, item='{sanitize_for_log(item.item_name)}'")

        candidates, result = await self.retriever.search(item.item_name)

        if result.is_error:
            funnel = FunnelResult(
                success=False,
                error=result.error_message,
                meta={"error_code": result.error_code},
            )
            return ItemMatchOutcome(item=item, result=result, funnel=funnel)

        async def already_retrieved(_: str) -> list[MatchCandidate]:
            return candidates

        funnel = await get_funnel_recommendations(item, already_retrieved)
        comparison = compare_suppliers(item, funnel.result) if funnel.success else None

        logger.info(
            f"Match completed: row={item.row_number}, status={result.status.value}, "
            f"candidates={len(candidates)}, primary={len(funnel.result.primary)}"
        )
        return ItemMatchOutcome(item=item, result=result, funnel=funnel, comparison=comparison)

    async def match_batch(self, items: Sequence[InvoiceLineItem]) -> list[ItemMatchOutcome]:
        """여러 품목 동시 매칭 (입력 순서대로 반환)"""
        if not items:
            return []

        outcomes = await asyncio.gather(*(self.match_item(item) for item in items))

        summary = {status.value: 0 for status in MatchStatus}
        for outcome in outcomes:
            summary[outcome.result.status.value] += 1
        logger.info(f"Batch completed: items={len(items)}, summary={summary}")

        return list(outcomes)
