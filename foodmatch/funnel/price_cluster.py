"""깔때기(Funnel) 2단계: 가격 군집화 필터

거래명세서 품목의 단위당 가격을 기준으로 허용 범위를 만들고,
후보를 범위 내(in_range)/범위 외(out_range)로 나눕니다.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, TypeVar

from foodmatch.schemas.matching_schema import CatalogProduct, InvoiceLineItem
from foodmatch.utils.resource_loader import load_category_tolerances

from .price_normalizer import PricePerUnit, price_per_unit

P = TypeVar("P", bound=CatalogProduct)


@dataclass(frozen=True)
class PriceRange:
    """단가 허용 범위 (min ≤ base ≤ max)"""

    min: float
    max: float
    base: float
    tolerance_percent: float

    def __post_init__(self) -> None:
        if not (self.min <= self.base <= self.max):
            raise ValueError(f"Invalid price range: min={self.min}, base={self.base}, max={self.max}")

    @classmethod
    def degenerate(cls) -> "PriceRange":
        """단가를 계산할 수 없을 때의 0 범위"""
        return cls(min=0.0, max=0.0, base=0.0, tolerance_percent=0.0)

    @property
    def is_degenerate(self) -> bool:
        return self.tolerance_percent == 0 and self.base == 0

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass
class ClusterResult:
    """가격 군집화 결과"""

    in_range: list = field(default_factory=list)
    out_range: list = field(default_factory=list)
    price_range: PriceRange = field(default_factory=PriceRange.degenerate)
    invoice_ppu: Optional[PricePerUnit] = None


def get_category_tolerance(category: Optional[str]) -> float:
    """카테고리별 허용 오차(%)

    정확히 일치 → 부분 일치 → 기본값(기타) 순서로 찾습니다.
    예: get_category_tolerance("농산물") -> 40, get_category_tolerance("알 수 없음") -> 30
    """
    table = load_category_tolerances()
    tolerances: dict[str, float] = table["tolerances"]
    default = tolerances.get(table["default"], 30.0)

    normalized = (category or "").strip()
    if not normalized:
        return default

    normalized = table["aliases"].get(normalized.lower(), normalized)
    if normalized in tolerances:
        return tolerances[normalized]

    for key, value in tolerances.items():
        if key in normalized or normalized in key:
            return value

    return default


def calculate_price_range(base: float, category: Optional[str] = None) -> PriceRange:
    """기준 단가와 카테고리로 허용 범위 계산

    예: calculate_price_range(100, "축산물") -> PriceRange(75, 125, 100, 25)
    """
    tolerance = get_category_tolerance(category)
    rate = tolerance / 100
    return PriceRange(
        min=base * (1 - rate),
        max=base * (1 + rate),
        base=base,
        tolerance_percent=tolerance,
    )


def representative_category(candidates: Sequence[CatalogProduct]) -> str:
    """후보들 중 가장 많이 등장한 카테고리 (동률이면 먼저 나온 것)"""
    default = load_category_tolerances()["default"]
    counts = Counter((c.category or default) for c in candidates)
    if not counts:
        return default
    return counts.most_common(1)[0][0]


def cluster_by_price(item: InvoiceLineItem, candidates: Sequence[P]) -> ClusterResult:
    """가격 기준 군집화

    - 품목 단가를 계산할 수 없으면 모든 후보가 out_range, 범위는 0 범위
    - 규격을 파싱할 수 없는 후보는 항상 out_range
    - 단가 기준 단위(g/ml/ea)가 다른 후보도 out_range
    """
    invoice_ppu = price_per_unit(item.unit_price, item.spec_text)
    if invoice_ppu is None:
        return ClusterResult(
            in_range=[],
            out_range=list(candidates),
            price_range=PriceRange.degenerate(),
            invoice_ppu=None,
        )

    price_range = calculate_price_range(invoice_ppu.value, representative_category(candidates))

    in_range: list[P] = []
    out_range: list[P] = []
    for candidate in candidates:
        candidate_ppu = price_per_unit(candidate.standard_price, candidate.spec_text)
        if (
            candidate_ppu is not None
            and candidate_ppu.unit == invoice_ppu.unit
            and price_range.contains(candidate_ppu.value)
        ):
            in_range.append(candidate)
        else:
            out_range.append(candidate)

    return ClusterResult(
        in_range=in_range,
        out_range=out_range,
        price_range=price_range,
        invoice_ppu=invoice_ppu,
    )


def cluster_batch(
    items: Sequence[InvoiceLineItem],
    candidates_map: Mapping[str, Sequence[CatalogProduct]],
) -> dict[str, ClusterResult]:
    """여러 품목 일괄 군집화 (품목명 → 결과)"""
    return {
        item.item_name: cluster_by_price(item, candidates_map.get(item.item_name, []))
        for item in items
    }


def merge_clusters(result: ClusterResult) -> list:
    """범위 내 → 범위 외 순서로 합친 목록"""
    return [*result.in_range, *result.out_range]


def calculate_price_deviation(invoice_price: float, candidate_price: float) -> float:
    """가격 편차(%) - 양수면 후보가 비쌈

    예: calculate_price_deviation(100, 120) -> 20.0
    """
    if invoice_price == 0:
        return 0.0
    return (candidate_price - invoice_price) / invoice_price * 100
