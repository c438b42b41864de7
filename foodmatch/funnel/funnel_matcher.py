"""깔때기(Funnel) 최종 단계: 가격 군집화 + 속성 소거 + 가중 점수

1. 가격 군집화로 후보를 범위 내/외로 분리
2. 각 그룹에 속성 필터(90점 기준) 적용
3. final = 0.4×가격 + 0.4×속성 + 0.2×텍스트
4. 1차 추천 = 범위 내 ∧ 속성 90점 이상, 최대 3개
5. 2차 추천 = 나머지 전부
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Mapping, Optional, Sequence, TypeVar

from foodmatch.core.logging import logger
from foodmatch.schemas.matching_schema import CatalogProduct, InvoiceLineItem
from foodmatch.utils.text.matching.similarity import fuzzy_score

from .attribute_filter import BASE_SCORE, DEFAULT_THRESHOLD, AttributeMatch, filter_by_attributes
from .price_cluster import PriceRange, cluster_by_price
from .price_normalizer import PricePerUnit

PRICE_WEIGHT = 0.4
ATTRIBUTE_WEIGHT = 0.4
TEXT_WEIGHT = 0.2

IN_RANGE_PRICE_SCORE = 100
OUT_OF_RANGE_PRICE_SCORE = 50

PRIMARY_LIMIT = 3

NO_RESULTS_MESSAGE = "검색 결과가 없습니다"

P = TypeVar("P", bound=CatalogProduct)

SearchFn = Callable[[str], Awaitable[Sequence[CatalogProduct]]]


@dataclass
class ScoredCandidate(Generic[P]):
    """깔때기 점수가 붙은 후보 (요청마다 새로 만들고 저장하지 않음)"""

    product: P
    text_score: float
    attribute_score: int
    price_in_range: bool
    final_score: float
    mismatch_reasons: list[str] = field(default_factory=list)


@dataclass
class FunnelMatch:
    """깔때기 매칭 결과

    Attributes:
        primary: 1차 추천 (최대 3개, final_score 내림차순)
        secondary: 2차 추천 (final_score 내림차순)
        scores: 상품 ID → final_score
        reasons: 상품 ID → 감점 사유 (감점이 있는 후보만)
        price_range: 적용된 단가 범위
        invoice_ppu: 거래명세서 품목의 단위당 가격
    """

    primary: list[ScoredCandidate] = field(default_factory=list)
    secondary: list[ScoredCandidate] = field(default_factory=list)
    scores: dict[str, float] = field(default_factory=dict)
    reasons: dict[str, list[str]] = field(default_factory=dict)
    price_range: PriceRange = field(default_factory=PriceRange.degenerate)
    invoice_ppu: Optional[PricePerUnit] = None

    @property
    def ranked(self) -> list[ScoredCandidate]:
        return [*self.primary, *self.secondary]


@dataclass
class FunnelResult:
    """깔때기 추천 결과 (검색 포함)"""

    success: bool
    result: FunnelMatch = field(default_factory=FunnelMatch)
    error: Optional[str] = None
    meta: dict[str, Any] = field(default_factory=dict)


def calculate_final_score(price_score: float, attribute_score: float, text_score: float = 0.0) -> float:
    """가중 평균 (가격 40%, 속성 40%, 텍스트 20%)

    예: calculate_final_score(100, 100, 80) -> 96.0
    """
    return price_score * PRICE_WEIGHT + attribute_score * ATTRIBUTE_WEIGHT + text_score * TEXT_WEIGHT


def _score(match: AttributeMatch, in_range: bool, text_scores: Mapping[str, float]) -> ScoredCandidate:
    price_score = IN_RANGE_PRICE_SCORE if in_range else OUT_OF_RANGE_PRICE_SCORE
    text_score = float(text_scores.get(match.product.id, 0.0))

    reasons: list[str] = []
    if not in_range:
        reasons.append("가격 범위 외")
    if match.attribute_score < BASE_SCORE:
        reasons.append(f"속성 불일치 ({BASE_SCORE - match.attribute_score}점 감점)")
        reasons.extend(match.comparison.mismatches)

    return ScoredCandidate(
        product=match.product,
        text_score=text_score,
        attribute_score=match.attribute_score,
        price_in_range=in_range,
        final_score=calculate_final_score(price_score, match.attribute_score, text_score),
        mismatch_reasons=reasons,
    )


def _by_final_score(candidate: ScoredCandidate) -> float:
    return candidate.final_score


def match_with_funnel(
    item: InvoiceLineItem,
    candidates: Sequence[P],
    text_scores: Optional[Mapping[str, float]] = None,
) -> FunnelMatch:
    """깔때기 알고리즘 적용

    Args:
        item: 거래명세서 품목
        candidates: 검색 후보 전체
        text_scores: 상품 ID → 텍스트 유사도(0~100). 없으면 0

    Returns:
        FunnelMatch: 1차(최대 3개)/2차 추천과 점수, 감점 사유
    """
    text_scores = text_scores or {}

    cluster = cluster_by_price(item, candidates)
    in_range = filter_by_attributes(item, cluster.in_range, DEFAULT_THRESHOLD)
    out_range = filter_by_attributes(item, cluster.out_range, DEFAULT_THRESHOLD)

    qualified = sorted(
        (_score(m, True, text_scores) for m in in_range.primary),
        key=_by_final_score,
        reverse=True,
    )
    rest = [_score(m, True, text_scores) for m in in_range.secondary]
    rest += [_score(m, False, text_scores) for m in (*out_range.primary, *out_range.secondary)]

    primary = qualified[:PRIMARY_LIMIT]
    secondary = sorted(qualified[PRIMARY_LIMIT:] + rest, key=_by_final_score, reverse=True)

    scores: dict[str, float] = {}
    reasons: dict[str, list[str]] = {}
    for scored in (*primary, *secondary):
        scores[scored.product.id] = scored.final_score
        if scored.mismatch_reasons:
            reasons[scored.product.id] = scored.mismatch_reasons

    logger.debug(
        f"Funnel: item='{item.item_name}', candidates={len(candidates)}, "
        f"in_range={len(cluster.in_range)}, primary={len(primary)}, secondary={len(secondary)}"
    )

    return FunnelMatch(
        primary=primary,
        secondary=secondary,
        scores=scores,
        reasons=reasons,
        price_range=cluster.price_range,
        invoice_ppu=cluster.invoice_ppu,
    )


def text_scores_for(item_name: str, candidates: Sequence[CatalogProduct]) -> dict[str, float]:
    """후보별 텍스트 점수(0~100): 백엔드 match_score 우선, 없으면 fuzzy 유사도"""
    scores: dict[str, float] = {}
    for candidate in candidates:
        match_score = getattr(candidate, "match_score", None)
        if match_score is not None:
            scores[candidate.id] = float(match_score) * 100
        else:
            scores[candidate.id] = fuzzy_score(item_name, candidate.name)
    return scores


async def get_funnel_recommendations(item: InvoiceLineItem, search_fn: SearchFn) -> FunnelResult:
    """검색까지 포함한 깔때기 추천

    - 후보 0개: success=False, error="검색 결과가 없습니다"
    - 검색 실패: 재시도 없이 오류 메시지를 그대로 전달
    """
    try:
        candidates = await search_fn(item.item_name)
    except Exception as e:
        logger.warning(f"Funnel search failed: item='{item.item_name}', error={type(e).__name__}")
        return FunnelResult(
            success=False,
            error=getattr(e, "message", None) or str(e),
            meta={"error_code": getattr(e, "error_code", None)},
        )

    if not candidates:
        return FunnelResult(success=False, error=NO_RESULTS_MESSAGE)

    match = match_with_funnel(item, candidates, text_scores_for(item.item_name, candidates))
    return FunnelResult(
        success=True,
        result=match,
        meta={
            "price_range": match.price_range,
            "invoice_ppu": match.invoice_ppu.value if match.invoice_ppu else None,
            "unit": match.invoice_ppu.unit if match.invoice_ppu else None,
            "candidate_count": len(candidates),
        },
    )
