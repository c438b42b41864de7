"""Similarity helpers."""

from __future__ import annotations

from rapidfuzz import fuzz, utils

from ..normalization.normalize import preprocess_food_name


def fuzzy_score(query: str, candidate: str) -> float:
    """두 품목명의 유사도 점수(0~100).

    조사는 유지한 의미 보존 정규화 결과끼리 WRatio로 비교합니다.
    """
    if not query or not candidate:
        return 0.0

    q = preprocess_food_name(query, remove_particles=False)
    c = preprocess_food_name(candidate, remove_particles=False)
    if not q or not c:
        return 0.0

    return float(fuzz.WRatio(q, c, processor=utils.default_process))


def character_jaccard(name1: str, name2: str) -> float:
    """공백을 무시한 글자 집합 Jaccard 유사도(0~1)"""
    chars1 = set(preprocess_food_name(name1).replace(" ", ""))
    chars2 = set(preprocess_food_name(name2).replace(" ", ""))

    union = chars1 | chars2
    if not union:
        return 0.0
    return len(chars1 & chars2) / len(union)
