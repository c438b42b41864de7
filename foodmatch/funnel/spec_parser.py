"""규격(Spec) 파싱 및 단위 정규화

규격 문자열에서 '수량+단위'를 추출하고 단위를 정규 표기(KG, G, ML, L, EA, BOX ...)로 바꿉니다.
파싱 실패는 예외가 아니라 ``ParsedSpec.is_valid=False`` 로 표현합니다.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from foodmatch.utils.resource_loader import load_unit_categories, load_unit_mapping

_NUMBER = r"\d+(?:[.,]\d+)?"

# 정규 단위 -> (기준 단위, 배율)
BASE_UNITS: dict[str, tuple[str, float]] = {
    "KG": ("G", 1000.0),
    "G": ("G", 1.0),
    "L": ("ML", 1000.0),
    "ML": ("ML", 1.0),
    "EA": ("EA", 1.0),
}


@dataclass
class ParsedSpec:
    """규격 파싱 결과

    Attributes:
        original: 원본 규격 문자열
        quantity: 정규 단위 기준 총 수량 (합성/범위/내포장 계산 반영)
        unit: 정규 단위 (KG, G, ML, L, EA, BOX ...)
        primary_quantity / primary_unit: 내포장 표기의 바깥 포장 (예: 1, 박스)
        inner_quantity / inner_unit: 내포장 표기의 안쪽 수량 (예: 20, 개)
        pattern: 매칭된 패턴 이름
        is_valid: 파싱 성공 여부
        parse_error: 실패 사유
    """

    original: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    primary_quantity: Optional[float] = None
    primary_unit: Optional[str] = None
    inner_quantity: Optional[float] = None
    inner_unit: Optional[str] = None
    pattern: Optional[str] = None
    is_valid: bool = False
    parse_error: Optional[str] = None

    @classmethod
    def failed(cls, original: str, reason: str) -> "ParsedSpec":
        return cls(original=original, is_valid=False, parse_error=reason)


def normalize_unit(raw: Optional[str]) -> Optional[str]:
    """원본 단위 토큰을 정규 단위로 변환 (모르는 단위는 None)

    예: "kg" -> "KG", "키로" -> "KG", "개입" -> "EA", "PAC" -> "PACK"
    """
    if not raw or not raw.strip():
        return None

    token = raw.strip()
    mapping = load_unit_mapping()
    for candidate in (token, token.upper(), token.lower()):
        if candidate in mapping:
            return mapping[candidate]
    return None


def get_unit_category(unit: Optional[str]) -> str:
    """정규 단위의 카테고리 (COUNT, WEIGHT, VOLUME, PACKAGE, OTHER)"""
    if not unit:
        return "OTHER"
    for category, units in load_unit_categories().items():
        if unit in units:
            return category
    return "OTHER"


def format_number(value: float) -> str:
    """정수면 소수점 없이, 아니면 불필요한 0 없이 표기"""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def _to_number(token: str) -> float:
    # "1,000"은 천 단위 구분, "1,5"는 소수점
    if re.fullmatch(r"\d{1,3}(?:,\d{3})+", token):
        return float(token.replace(",", ""))
    return float(token.replace(",", "."))


@lru_cache(maxsize=1)
def _unit_alternation() -> str:
    # 긴 토큰 우선 ("개입" > "개", "ML" > "L")
    tokens = sorted(load_unit_mapping().keys(), key=len, reverse=True)
    return "|".join(re.escape(t) for t in tokens)


@lru_cache(maxsize=1)
def _spec_patterns() -> list[tuple[str, re.Pattern[str]]]:
    unit = f"(?:{_unit_alternation()})"
    flags = re.IGNORECASE
    return [
        # 1. 단순 수량+단위 ("500G", "1.5KG", "1.5KG/PAC")
        ("plain", re.compile(
            rf"^(?P<qty>{_NUMBER})\s*(?P<unit>{unit})(?:\s*/\s*[A-Za-z가-힣]+)?$", flags)),
        # 2. 곱셈 합성 ("45G*20개*6팩")
        ("composite", re.compile(
            rf"^(?P<qty>{_NUMBER})\s*(?P<unit>{unit})"
            rf"(?P<rest>(?:\s*[*×xX]\s*{_NUMBER}\s*(?:{unit})?)+)$", flags)),
        # 3. 범위 ("0.8~1.2KG")
        ("range", re.compile(
            rf"^(?P<low>{_NUMBER})\s*(?:{unit})?\s*[~∼\-]\s*(?P<high>{_NUMBER})\s*(?P<unit>{unit})$", flags)),
        # 4. 내포장 ("1박스(20개)", "박스(10kg)")
        ("inner_pack", re.compile(
            rf"^(?P<qty>{_NUMBER})?\s*(?P<unit>{unit})\s*\(\s*(?P<inner_qty>{_NUMBER})\s*(?P<inner_unit>{unit})\s*\)$",
            flags)),
        # 5. 개수 접미사 ("x10", "×10")
        ("count_suffix", re.compile(rf"^[xX×]\s*(?P<qty>\d+)\s*(?:EA|개)?$", flags)),
        # 6. 숫자만 ("500" -> EA)
        ("bare_number", re.compile(rf"^(?P<qty>{_NUMBER})$")),
    ]


_MULTIPLIER_RE = re.compile(rf"[*×xX]\s*({_NUMBER})")


def _build(text: str, pattern: str, match: re.Match[str]) -> ParsedSpec:
    groups = match.groupdict()

    if pattern == "plain":
        return ParsedSpec(original=text, quantity=_to_number(groups["qty"]),
                          unit=normalize_unit(groups["unit"]), pattern=pattern, is_valid=True)

    if pattern == "composite":
        quantity = _to_number(groups["qty"])
        for factor in _MULTIPLIER_RE.findall(groups["rest"]):
            quantity *= _to_number(factor)
        return ParsedSpec(original=text, quantity=quantity,
                          unit=normalize_unit(groups["unit"]), pattern=pattern, is_valid=True)

    if pattern == "range":
        low, high = _to_number(groups["low"]), _to_number(groups["high"])
        return ParsedSpec(original=text, quantity=(low + high) / 2,
                          unit=normalize_unit(groups["unit"]), pattern=pattern, is_valid=True)

    if pattern == "inner_pack":
        primary_qty = _to_number(groups["qty"]) if groups.get("qty") else 1.0
        inner_qty = _to_number(groups["inner_qty"])
        return ParsedSpec(
            original=text,
            quantity=primary_qty * inner_qty,
            unit=normalize_unit(groups["inner_unit"]),
            primary_quantity=primary_qty,
            primary_unit=groups["unit"],
            inner_quantity=inner_qty,
            inner_unit=groups["inner_unit"],
            pattern=pattern,
            is_valid=True,
        )

    # count_suffix / bare_number
    return ParsedSpec(original=text, quantity=_to_number(groups["qty"]), unit="EA",
                      pattern=pattern, is_valid=True)


def parse_spec(text: Optional[str]) -> ParsedSpec:
    """규격 문자열 파싱 (구체적인 패턴부터, 첫 매칭 우선)

    📋 지원 패턴:
    1. "500G", "1.5KG", "10개"
    2. "45G*20개*6팩" -> 5400 G
    3. "0.8~1.2KG" -> 1.0 KG (평균)
    4. "1박스(20개)" -> 20 EA (바깥 1박스, 안쪽 20개)
    5. "x10" -> 10 EA
    6. "500" -> 500 EA

    어떤 패턴에도 맞지 않으면 추측하지 않고 실패를 반환합니다.
    """
    original = text or ""
    spec = original.strip()
    if not spec:
        return ParsedSpec.failed(original, "empty spec")

    for name, regex in _spec_patterns():
        match = regex.match(spec)
        if not match:
            continue

        parsed = _build(original, name, match)
        if parsed.quantity is None or parsed.quantity <= 0:
            return ParsedSpec.failed(original, f"non-positive quantity: {spec}")
        return parsed

    return ParsedSpec.failed(original, f"unrecognized spec: {spec}")


@lru_cache(maxsize=1)
def _name_patterns() -> list[re.Pattern[str]]:
    unit = f"(?:{_unit_alternation()})"
    flags = re.IGNORECASE
    return [
        # "옛날당면(1.5KG/PAC)"
        re.compile(rf"(?P<qty>{_NUMBER})\s*(?P<unit>{unit})\s*/\s*[A-Za-z]+\)?$", flags),
        # "옛날당면 1.5KG PAC"
        re.compile(rf"(?P<qty>{_NUMBER})\s*(?P<unit>{unit})\s+[A-Za-z]+\)?$", flags),
        # "참치캔(200G)", "참치캔 200G"
        re.compile(rf"(?P<qty>{_NUMBER})\s*(?P<unit>{unit})\)?$", flags),
    ]


_NAME_COUNT_RE = re.compile(r"[xX×]\s*(\d+)\s*(?:EA|개)?\)?$", re.IGNORECASE)


def extract_spec_from_name(name: Optional[str]) -> ParsedSpec:
    """규격 컬럼이 없는 상품명 끝에서 규격 추출

    예: "옛날당면(1.5KG/PAC)" -> 1.5 KG
    """
    original = name or ""
    text = original.strip()
    if not text:
        return ParsedSpec.failed(original, "empty name")

    for regex in _name_patterns():
        match = regex.search(text)
        if match:
            quantity = _to_number(match.group("qty"))
            if quantity <= 0:
                break
            return ParsedSpec(original=original, quantity=quantity,
                              unit=normalize_unit(match.group("unit")),
                              pattern="name_suffix", is_valid=True)

    match = _NAME_COUNT_RE.search(text)
    if match and int(match.group(1)) > 0:
        return ParsedSpec(original=original, quantity=float(match.group(1)), unit="EA",
                          pattern="name_count", is_valid=True)

    return ParsedSpec.failed(original, "no trailing spec in name")


def format_spec(parsed: ParsedSpec) -> str:
    """파싱 결과를 정규 표기로 (실패 시 원본 그대로)"""
    if not parsed.is_valid or parsed.quantity is None or parsed.unit is None:
        return parsed.original
    return f"{format_number(parsed.quantity)}{parsed.unit}"


def to_base_quantity(parsed: ParsedSpec) -> Optional[tuple[float, str]]:
    """기준 단위(G/ML/EA) 수량으로 변환. 포장 단위만 있으면 None"""
    if not parsed.is_valid or parsed.quantity is None or parsed.unit not in BASE_UNITS:
        return None
    base_unit, factor = BASE_UNITS[parsed.unit]
    return parsed.quantity * factor, base_unit


def are_specs_compatible(a: ParsedSpec, b: ParsedSpec) -> bool:
    """두 규격이 같은 카테고리(무게/부피/개수/포장) 단위인지"""
    if not a.is_valid or not b.is_valid:
        return False
    category = get_unit_category(a.unit)
    return category != "OTHER" and category == get_unit_category(b.unit)


def compare_specs(a: ParsedSpec, b: ParsedSpec) -> Optional[float]:
    """b의 기준 수량 / a의 기준 수량 (비교 불가 시 None)

    예: compare_specs(parse_spec("1KG"), parse_spec("500G")) -> 0.5
    """
    if not are_specs_compatible(a, b):
        return None

    base_a = to_base_quantity(a)
    base_b = to_base_quantity(b)
    if base_a is None or base_b is None:
        # 포장 단위끼리는 같은 단위일 때만 수량 비교
        if a.unit == b.unit and a.quantity and b.quantity is not None:
            return b.quantity / a.quantity
        return None
    return base_b[0] / base_a[0]
