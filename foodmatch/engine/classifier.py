"""Match Classifier - Tiering by Top Score

- top > 0.8        → auto_matched (best = 1순위, candidates = 나머지)
- 0.3 ≤ top ≤ 0.8  → pending (전체 후보, best 없음)
- top < 0.3        → unmatched (빈 후보)
"""

from typing import Optional, Sequence

from foodmatch.schemas.matching_schema import MatchCandidate

from .result import MatchResult

AUTO_MATCH_THRESHOLD = 0.8
PENDING_THRESHOLD = 0.3


def classify(ranked: Sequence[MatchCandidate], query: Optional[str] = None) -> MatchResult:
    """점수 내림차순 후보 목록을 매칭 단계로 분류

    Args:
        ranked: 백엔드 점수 내림차순 후보
        query: 검색어 (결과 메타데이터)

    Returns:
        MatchResult: auto_matched | pending | unmatched
    """
    if not ranked:
        return MatchResult.unmatched(query=query)

    top = ranked[0]
    if top.match_score > AUTO_MATCH_THRESHOLD:
        return MatchResult.auto_matched(best_match=top, candidates=list(ranked[1:]), query=query)

    if top.match_score >= PENDING_THRESHOLD:
        return MatchResult.pending(candidates=list(ranked), query=query)

    return MatchResult.unmatched(query=query)
