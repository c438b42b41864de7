"""Text cleaning helpers."""

from __future__ import annotations

import re

# 숫자+단위 토큰 (1kg, 200g, 500ml, 10개입 ...)
QUANTITY_UNIT_RE = re.compile(
    r"\d+(?:\.\d+)?\s*(?:kg|g|ml|l|ea|개입|개|팩|봉|box|호|번|입)",
    flags=re.IGNORECASE,
)


def strip_brackets(text: str) -> str:
    """소괄호/대괄호와 그 안의 내용을 제거합니다.

    예시:
    - "얼갈이배추(계약재배)" -> "얼갈이배추"
    - "[특가] 양파" -> " 양파"
    """
    if not text:
        return ""

    cleaned = re.sub(r"\([^)]*\)", "", text)
    cleaned = re.sub(r"\[[^\]]*\]", "", cleaned)
    return cleaned


def strip_quantity_units(text: str) -> str:
    """'숫자+단위' 토큰 제거"""
    if not text:
        return ""
    return QUANTITY_UNIT_RE.sub("", text)


def keep_hangul_and_letters(text: str) -> str:
    """한글, 영문, 공백만 남깁니다."""
    if not text:
        return ""
    return re.sub(r"[^가-힣a-zA-Z\s]", "", text)


def collapse_whitespace(text: str) -> str:
    """다중 공백을 단일 공백으로 정리하고 trim"""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def clean_item_name(name: str) -> str:
    """괄호 내용과 특수문자를 제거한 품목명 (숫자는 유지)

    원본 검색어와 함께 백엔드에 넘기는 '노이즈 제거' 버전입니다.
    """
    if not name:
        return ""

    cleaned = strip_brackets(name)
    cleaned = re.sub(r"[^가-힣a-zA-Z0-9\s]", "", cleaned)
    return collapse_whitespace(cleaned)
