"""로깅 설정

- 'foodmatch' 로거 하나를 앱 전체에서 공유
- 외부 클라이언트(httpx, openai) 로그는 WARNING 이상만
- 검색어/오류 메시지는 sanitize_for_log 를 거쳐 기록 (서비스 키, API 키 노출 방지)
"""
import logging
import os
import re
import sys

from foodmatch.core.config import settings

IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"

# 요청 URL/헤더를 INFO 로 남기는 클라이언트 라이브러리
NOISY_LOGGERS = ("httpx", "httpcore", "openai")

_SENSITIVE_KEYWORDS = ("password", "token", "api_key", "apikey", "secret", "bearer", "service_key")

# OpenAI 키(sk-...) / Supabase JWT(eyJ...)
_KEY_LIKE_RE = re.compile(r"\bsk-[A-Za-z0-9_\-]{8,}|\beyJ[A-Za-z0-9_\-]{10,}(?:\.[A-Za-z0-9_\-]+)*")


def _resolve_level() -> int:
    level = settings.log_level.upper()
    if IS_PRODUCTION and level == "DEBUG":
        level = "INFO"
    return getattr(logging, level, logging.INFO)


def setup_logging() -> logging.Logger:
    """foodmatch 로거 초기화 (여러 번 호출해도 핸들러는 하나)"""
    level = _resolve_level()

    logger = logging.getLogger("foodmatch")
    logger.setLevel(level)

    if IS_PRODUCTION:
        fmt = "%(asctime)s - %(levelname)s - %(message)s"
    else:
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger


logger = setup_logging()


def sanitize_for_log(value: str, max_length: int = 100) -> str:
    """로깅용 문자열 정리

    - 빈 값: "[empty]"
    - 민감 키워드가 들어 있으면 전체를 "***" 로
    - 키처럼 보이는 토큰(sk-..., eyJ...)만 "***" 로 치환
    - max_length 초과 시 절단 후 "..."

    예: sanitize_for_log("국산 양파 1kg") -> "국산 양파 1kg"
    """
    if not value:
        return "[empty]"

    lowered = value.lower()
    if any(keyword in lowered for keyword in _SENSITIVE_KEYWORDS):
        return "***"

    result = _KEY_LIKE_RE.sub("***", value)

    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result
