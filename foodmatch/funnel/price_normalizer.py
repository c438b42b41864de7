"""깔때기(Funnel) 1단계: 단위당 가격(PPU) 계산

규격에서 중량/용량/개수를 추출해 g, ml, ea 기준으로 정규화하고 단가를 나눕니다.
계산할 수 없는 경우(파싱 실패, 포장 단위만 있음, 수량 0, 음수 가격)에는 예외 대신 None 을 반환합니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Union

from .spec_parser import BASE_UNITS, ParsedSpec, normalize_unit, parse_spec

SpecInput = Union[str, ParsedSpec, None]

# 정규 단위 -> Weight 단위 표기
_WEIGHT_UNITS = {"KG": "kg", "G": "g", "L": "L", "ML": "ml", "EA": "ea"}

# Weight 단위 -> (PPU 단위, 배율)
_TO_BASE = {
    "kg": ("g", 1000.0),
    "g": ("g", 1.0),
    "L": ("ml", 1000.0),
    "ml": ("ml", 1.0),
    "ea": ("ea", 1.0),
}


@dataclass(frozen=True)
class Weight:
    """중량/용량/개수 (value > 0)"""

    value: float
    unit: str  # g | kg | ml | L | ea


@dataclass(frozen=True)
class PricePerUnit:
    """단위당 가격

    Attributes:
        value: 원/단위
        unit: g | ml | ea
        normalized_quantity: 기준 단위로 환산한 수량
    """

    value: float
    unit: str
    normalized_quantity: float


def _as_parsed(spec: SpecInput) -> ParsedSpec:
    if isinstance(spec, ParsedSpec):
        return spec
    return parse_spec(spec)


def extract_weight(spec: SpecInput) -> Optional[Weight]:
    """규격에서 중량 추출

    예:
        extract_weight("2KG") -> Weight(2, "kg")
        extract_weight("1박스(10kg)") -> Weight(10, "kg")
        extract_weight("20개입") -> Weight(20, "ea")
        extract_weight("1BOX") -> None (포장 단위만 있음)
    """
    parsed = _as_parsed(spec)
    if not parsed.is_valid or parsed.quantity is None:
        return None

    unit = _WEIGHT_UNITS.get(parsed.unit or "")
    if unit is None or parsed.quantity <= 0:
        return None
    return Weight(value=parsed.quantity, unit=unit)


def normalize_to_base(weight: Weight) -> float:
    """kg→g, L→ml 는 ×1000, 나머지는 그대로"""
    _, factor = _TO_BASE[weight.unit]
    return weight.value * factor


def price_per_unit(price: Optional[float], spec: SpecInput) -> Optional[PricePerUnit]:
    """단위당 가격 계산

    예:
        price_per_unit(10000, "2KG") -> PricePerUnit(5.0, "g", 2000)
        price_per_unit(8000, "2L") -> PricePerUnit(4.0, "ml", 2000)
    """
    if price is None or price < 0:
        return None

    weight = extract_weight(spec)
    if weight is None:
        return None

    normalized_quantity = normalize_to_base(weight)
    if normalized_quantity <= 0:
        return None

    base_unit, _ = _TO_BASE[weight.unit]
    return PricePerUnit(
        value=price / normalized_quantity,
        unit=base_unit,
        normalized_quantity=normalized_quantity,
    )


@lru_cache(maxsize=1024)
def convert_price(price: float, from_unit: str, to_unit: str, quantity: float = 1.0) -> Optional[float]:
    """`quantity` × from_unit 가격을 1 to_unit 가격으로 환산

    같은 카테고리(무게/부피/개수) 안에서만 환산하며, 그 외에는 None.
    예: convert_price(10000, "KG", "G", 2) -> 5.0
    """
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if source not in BASE_UNITS or target not in BASE_UNITS or quantity <= 0:
        return None

    source_base, source_factor = BASE_UNITS[source]
    target_base, target_factor = BASE_UNITS[target]
    if source_base != target_base:
        return None

    per_base = price / (quantity * source_factor)
    return per_base * target_factor
