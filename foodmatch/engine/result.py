"""Match Result - Standardized Result Format

Provides the terminal tiered result of matching one invoice line item.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from foodmatch.schemas.matching_schema import MatchCandidate


class MatchStatus(str, Enum):
    """매칭 신뢰도 단계

    결과마다 정확히 하나만 해당합니다.
    """

    AUTO_MATCHED = "auto_matched"  # 자동 매칭
    PENDING = "pending"  # 사람 검토 필요
    UNMATCHED = "unmatched"  # 매칭 없음 (후보 비어 있음)


@dataclass
class MatchResult:
    """매칭 결과 표준 포맷

    Attributes:
        status: 매칭 단계
        best_match: auto_matched 일 때만 설정되는 1순위 후보
        candidates: auto_matched 는 나머지 후보, pending 은 전체 후보, unmatched 는 빈 목록
        query: 검색에 사용한 품목명
        error_code: 검색/임베딩 실패 시 에러 코드 (RETRIEVAL_FAILED | EMBEDDING_FAILED)
        error_message: 실패 메시지
    """

    status: MatchStatus
    best_match: Optional[MatchCandidate] = None
    candidates: list[MatchCandidate] = field(default_factory=list)

    # 메타데이터
    query: Optional[str] = None

    # 실패 정보
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_auto_matched(self) -> bool:
        return self.status == MatchStatus.AUTO_MATCHED

    @property
    def is_pending(self) -> bool:
        return self.status == MatchStatus.PENDING

    @property
    def is_unmatched(self) -> bool:
        return self.status == MatchStatus.UNMATCHED

    @property
    def is_error(self) -> bool:
        """검색/임베딩 실패 여부 (후보 없음은 오류가 아님)"""
        return self.error_code is not None

    @classmethod
    def auto_matched(
        cls, best_match: MatchCandidate, candidates: list[MatchCandidate], query: Optional[str] = None
    ) -> "MatchResult":
        """자동 매칭 결과 생성

        Args:
            best_match: 1순위 후보
            candidates: 나머지 후보
            query: 검색어
        """
        return cls(
            status=MatchStatus.AUTO_MATCHED,
            best_match=best_match,
            candidates=list(candidates),
            query=query,
        )

    @classmethod
    def pending(cls, candidates: list[MatchCandidate], query: Optional[str] = None) -> "MatchResult":
        """검토 대기 결과 생성 (전체 후보 노출, best_match 없음)"""
        return cls(status=MatchStatus.PENDING, candidates=list(candidates), query=query)

    @classmethod
    def unmatched(cls, query: Optional[str] = None) -> "MatchResult":
        """매칭 없음 결과 생성"""
        return cls(status=MatchStatus.UNMATCHED, query=query)

    @classmethod
    def retrieval_failed(cls, query: Optional[str], error: str) -> "MatchResult":
        """검색 백엔드 실패 결과 생성"""
        return cls(
            status=MatchStatus.UNMATCHED,
            query=query,
            error_code="RETRIEVAL_FAILED",
            error_message=error,
        )

    @classmethod
    def embedding_failed(cls, query: Optional[str], error: str) -> "MatchResult":
        """임베딩 생성 실패 결과 생성"""
        return cls(
            status=MatchStatus.UNMATCHED,
            query=query,
            error_code="EMBEDDING_FAILED",
            error_message=error,
        )
