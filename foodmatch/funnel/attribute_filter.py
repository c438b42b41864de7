"""깔때기(Funnel) 3단계: 속성 소거법

품목명에서 원산지/프리미엄 속성을 추출하고, 감점 방식으로 후보와의 속성 호환도를 계산합니다.
감점 모델은 학습이 아닌 고정 규칙이며, 불일치 사유를 사람이 읽을 수 있는 문장으로 남깁니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Generic, Sequence, TypeVar

from foodmatch.schemas.matching_schema import CatalogProduct, InvoiceLineItem
from foodmatch.utils.resource_loader import load_attribute_vocabulary

ORIGIN_DOMESTIC = "국내산"
ORIGIN_IMPORTED = "수입산"

BASE_SCORE = 100
ORIGIN_CONFLICT_PENALTY = 20
ONE_SIDED_PENALTY = 15
DEFAULT_THRESHOLD = 90

P = TypeVar("P", bound=CatalogProduct)


@dataclass
class AttributeComparison:
    """속성 비교 결과

    score 는 100 에서 감점만 하며 하한을 두지 않습니다.
    """

    score: int
    mismatches: list[str] = field(default_factory=list)
    premium_mismatches: list[str] = field(default_factory=list)
    origin_mismatches: list[str] = field(default_factory=list)
    query_tags: list[str] = field(default_factory=list)
    candidate_tags: list[str] = field(default_factory=list)

    @property
    def penalty(self) -> int:
        return BASE_SCORE - self.score


@dataclass
class AttributeMatch(Generic[P]):
    product: P
    attribute_score: int
    comparison: AttributeComparison


@dataclass
class FilterResult(Generic[P]):
    """1차(임계값 이상) / 2차 후보, 각각 점수 내림차순"""

    primary: list[AttributeMatch[P]] = field(default_factory=list)
    secondary: list[AttributeMatch[P]] = field(default_factory=list)


@lru_cache(maxsize=1)
def _origin_patterns() -> tuple[tuple[str, str], ...]:
    vocabulary = load_attribute_vocabulary()["origin"]
    pairs = [(keyword, tag) for tag, keywords in vocabulary.items() for keyword in keywords]
    # 긴 키워드 우선, 같은 길이는 선언 순서 유지
    return tuple(sorted(pairs, key=lambda pair: len(pair[0]), reverse=True))


@lru_cache(maxsize=1)
def _premium_tokens() -> tuple[str, ...]:
    return tuple(load_attribute_vocabulary()["premium"])


def extract_attributes(name: str) -> list[str]:
    """품목명에서 속성 태그 추출 (순서 유지, 중복 없음)

    예:
        extract_attributes("친환경 깻잎(국내산)") -> ["국내산", "친환경"]
        extract_attributes("한우 1++ 등심") -> ["1++", "한우"]
    """
    remaining = (name or "").strip()
    if not remaining:
        return []

    tags: list[str] = []

    # 원산지는 하나만
    for keyword, tag in _origin_patterns():
        if keyword in remaining:
            tags.append(tag)
            remaining = remaining.replace(keyword, " ", 1)
            break

    # 추출한 토큰은 지워서 "1++" 안의 "1+" 가 다시 잡히지 않도록 함
    for token in _premium_tokens():
        if token in remaining:
            tags.append(token)
            remaining = remaining.replace(token, " ")

    return list(dict.fromkeys(tags))


def compare_attributes(query_tags: Sequence[str], candidate_tags: Sequence[str]) -> AttributeComparison:
    """속성 호환도 계산 (100점 시작, 감점 누적)

    - 국내산 vs 수입산: -20 ("원산지 불일치")
    - 원산지가 한쪽에만 있음: -15
    - 프리미엄 속성이 한쪽에만 있음: 속성마다 -15

    예:
        compare_attributes(["국내산"], ["친환경", "국내산"]).score -> 85
        compare_attributes(["국내산"], ["수입산"]).score -> 80
    """
    score = BASE_SCORE
    mismatches: list[str] = []
    premium_mismatches: list[str] = []
    origin_mismatches: list[str] = []

    query_domestic = ORIGIN_DOMESTIC in query_tags
    query_imported = ORIGIN_IMPORTED in query_tags
    candidate_domestic = ORIGIN_DOMESTIC in candidate_tags
    candidate_imported = ORIGIN_IMPORTED in candidate_tags
    query_origin = query_domestic or query_imported
    candidate_origin = candidate_domestic or candidate_imported

    if (query_domestic and candidate_imported) or (query_imported and candidate_domestic):
        score -= ORIGIN_CONFLICT_PENALTY
        mismatches.append("원산지 불일치")
        origin_mismatches.append("원산지 불일치 (국내산 vs 수입산)")
    elif query_origin and not candidate_origin:
        score -= ONE_SIDED_PENALTY
        origin = ORIGIN_DOMESTIC if query_domestic else ORIGIN_IMPORTED
        mismatches.append(f"{origin} 누락 (거래명세서에는 있으나 후보에 없음)")
        origin_mismatches.append(origin)
    elif candidate_origin and not query_origin:
        score -= ONE_SIDED_PENALTY
        origin = ORIGIN_DOMESTIC if candidate_domestic else ORIGIN_IMPORTED
        mismatches.append(f"{origin} 불일치 (후보에는 있으나 거래명세서에 없음)")
        origin_mismatches.append(origin)

    for token in _premium_tokens():
        in_query = token in query_tags
        in_candidate = token in candidate_tags
        if in_query == in_candidate:
            continue

        score -= ONE_SIDED_PENALTY
        premium_mismatches.append(token)
        if in_query:
            mismatches.append(f"{token} 누락 (거래명세서에는 있으나 후보에 없음)")
        else:
            mismatches.append(f"{token} 불일치 (후보에는 있으나 거래명세서에 없음)")

    return AttributeComparison(
        score=score,
        mismatches=mismatches,
        premium_mismatches=premium_mismatches,
        origin_mismatches=origin_mismatches,
        query_tags=list(query_tags),
        candidate_tags=list(candidate_tags),
    )


def filter_by_attributes(
    item: InvoiceLineItem,
    candidates: Sequence[P],
    threshold: int = DEFAULT_THRESHOLD,
) -> FilterResult[P]:
    """속성 점수로 1차/2차 후보 분리 (점수 ≥ threshold 는 1차)"""
    query_tags = extract_attributes(item.item_name)

    matches = []
    for candidate in candidates:
        comparison = compare_attributes(query_tags, extract_attributes(candidate.name))
        matches.append(AttributeMatch(product=candidate, attribute_score=comparison.score, comparison=comparison))

    def by_score(match: AttributeMatch) -> int:
        return match.attribute_score

    return FilterResult(
        primary=sorted((m for m in matches if m.attribute_score >= threshold), key=by_score, reverse=True),
        secondary=sorted((m for m in matches if m.attribute_score < threshold), key=by_score, reverse=True),
    )
