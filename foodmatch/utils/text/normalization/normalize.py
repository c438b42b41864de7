"""Korean food name normalization (keyword / semantic variants)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from foodmatch.utils.resource_loader import (
    load_brand_normalization,
    load_protected_words,
    load_spelling_corrections,
)

from ..core.cleaning import (
    collapse_whitespace,
    keep_hangul_and_letters,
    strip_brackets,
    strip_quantity_units,
)

# 단어 끝에 붙는 조사 (긴 조사를 먼저 검사)
PARTICLES = ("까지", "부터", "에서", "으로", "은", "는", "이", "가", "을", "를", "의", "도", "만", "로")

# 어간이 두 글자 이상 남을 때만 제거 ("오이", "포도"는 그대로)
_PARTICLE_RE = re.compile(r"(?<=[가-힣a-zA-Z]{2})(?:%s)$" % "|".join(PARTICLES))

_CATEGORY_PATTERNS: dict[str, tuple[str, ...]] = {
    "고기": ("돼지", "소", "닭", "삼겹", "목살", "등심", "안심", "갈비"),
    "채소": ("배추", "상추", "시금치", "깻잎", "양파", "파", "마늘", "고추", "가지", "오이"),
    "과일": ("사과", "배", "포도", "귤", "오렌지", "바나나", "딸기", "수박", "참외"),
    "유제품": ("우유", "치즈", "요거트", "요구르트", "버터", "생크림"),
    "가공식품": ("라면", "과자", "빵", "케이크", "쿠키", "사탕", "초콜릿"),
    "조미료": ("소금", "설탕", "식초", "간장", "된장", "고추장", "참기름", "식용유"),
    "만두": ("만두", "교자", "왕만두"),
}


@dataclass(frozen=True)
class NormalizedQuery:
    """검색 모드별 정규화 결과

    Attributes:
        for_keyword: BM25/Hybrid용 (조사 제거, 공격적 정규화)
        for_semantic: Trigram/Vector용 (조사 유지, 의미 보존)
    """

    for_keyword: str
    for_semantic: str


def _apply_table(text: str, table: dict[str, str]) -> str:
    for wrong, correct in table.items():
        text = text.replace(wrong, correct)
    return text


def _strip_word(word: str, protected: tuple[str, ...]) -> str:
    while not word.endswith(protected):
        stripped = _PARTICLE_RE.sub("", word)
        if stripped == word:
            break
        word = stripped
    return word


def strip_particles(text: str) -> str:
    """단어 끝 조사를 더 이상 바뀌지 않을 때까지 제거합니다.

    고정점까지 반복하므로 결과에 다시 적용해도 변하지 않습니다.
    보호 목록(particles.yaml)의 품목명으로 끝나는 단어는 건드리지 않습니다.
    예: "우유도만" -> "우유", "청포도" -> "청포도"
    """
    protected = load_protected_words()
    return re.sub(r"\S+", lambda m: _strip_word(m.group(), protected), text)


def preprocess_food_name(
    name: str,
    *,
    remove_particles: bool = True,
    normalize_spelling: bool = True,
    normalize_brands: bool = False,
    remove_numbers: bool = True,
    remove_special_chars: bool = True,
) -> str:
    """한국어 식품명 전처리

    📋 파이프라인:
    1. 괄호/대괄호 내용 제거
    2. 숫자+단위 토큰 제거
    3. 남은 숫자 제거
    4. 한글/영문/공백 외 문자 제거
    5. 맞춤법 통일
    6. 브랜드명 정규화 (선택)
    7. 조사 제거
    8. 공백 정리

    5~7은 결과가 바뀌지 않을 때까지 반복하므로 출력을 다시 넣어도 같은 값이 나옵니다.
    예외를 던지지 않으며 빈 입력은 빈 문자열을 반환합니다.
    """
    if not name:
        return ""

    processed = strip_brackets(name.strip())

    if remove_numbers:
        processed = strip_quantity_units(processed)
        processed = re.sub(r"\d+", "", processed)

    if remove_special_chars:
        processed = keep_hangul_and_letters(processed)

    previous = None
    while previous != processed:
        previous = processed
        if normalize_spelling:
            processed = _apply_table(processed, load_spelling_corrections())
        if normalize_brands:
            processed = _apply_table(processed, load_brand_normalization())
        if remove_particles:
            processed = strip_particles(processed)

    return collapse_whitespace(processed)


def normalize(raw: str) -> NormalizedQuery:
    """키워드 검색용/의미 검색용 정규화를 함께 계산합니다.

    예: "만두는 (냉동) 1kg" -> for_keyword="만두", for_semantic="만두는"
    """
    for_keyword = preprocess_food_name(raw, remove_particles=True)
    for_semantic = preprocess_food_name(raw, remove_particles=False)
    return NormalizedQuery(for_keyword=for_keyword, for_semantic=for_semantic)


def extract_category_keywords(name: str) -> list[str]:
    """품목명에서 대분류 키워드(고기, 채소, ...)를 추출합니다."""
    normalized = preprocess_food_name(name)
    if not normalized:
        return []

    keywords: list[str] = []
    for category, patterns in _CATEGORY_PATTERNS.items():
        if any(p in normalized for p in patterns):
            keywords.append(category)
    return keywords
