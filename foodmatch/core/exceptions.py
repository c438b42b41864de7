"""커스텀 예외 정의 (Structured Exception Hierarchy)

기대 가능한 실패(규격 파싱 실패, 후보 없음)는 예외가 아니라 값으로 표현합니다.
여기의 예외는 외부 호출 실패와 설정/프로그래밍 오류에만 사용됩니다.
"""
from typing import Any, Optional


class FoodMatchException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 검색 백엔드 관련 예외
class RetrievalException(FoodMatchException):
    """검색 백엔드 호출 실패 (재시도 없음, 품목 단위로 unmatched 처리)"""
    def __init__(self, mode: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Candidate retrieval failed ({mode}): {reason}"
        super().__init__(message, "RETRIEVAL_FAILED", details or {"mode": mode, "reason": reason})


class EmbeddingException(FoodMatchException):
    """임베딩 생성 실패 - '검색 결과 없음'과 구분되는 별도 오류"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Embedding generation failed: {reason}"
        super().__init__(message, "EMBEDDING_FAILED", details or {"reason": reason})


# 설정 관련 예외
class ConfigurationException(FoodMatchException):
    """설정 누락/불일치"""
    def __init__(self, setting: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Invalid configuration for '{setting}': {reason}"
        super().__init__(message, "CONFIGURATION_ERROR", details or {"setting": setting, "reason": reason})


# 유효성 검증 관련 예외
class ValidationException(FoodMatchException):
    """유효성 검증 예외"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                        details or {"field": field, "reason": reason})


class InvalidQueryException(ValidationException):
    """유효하지 않은 검색어"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__("query", reason, details)
