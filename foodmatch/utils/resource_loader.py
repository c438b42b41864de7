"""리소스 파일(YAML) 로더 유틸리티"""
import os
import yaml
from typing import Any, Dict
from functools import lru_cache

from foodmatch.core.logging import logger


def get_resource_path(relative_path: str) -> str:
    """패키지 리소스 절대 경로 반환"""
    # foodmatch/utils/resource_loader.py -> foodmatch/utils -> foodmatch
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base_dir, "resources", relative_path)


@lru_cache(maxsize=32)
def load_yaml_resource(relative_path: str) -> Dict[str, Any]:
    """YAML 리소스 로드 및 캐싱"""
    path = get_resource_path(relative_path)
    if not os.path.exists(path):
        logger.warning(f"Resource not found: {path}")
        return {}

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_spelling_corrections() -> Dict[str, str]:
    """맞춤법 통일 사전 로드 (오표기 -> 표준 표기)"""
    data = load_yaml_resource("normalization/spelling.yaml")
    return dict(data.get("spelling", {}))


def load_brand_normalization() -> Dict[str, str]:
    """브랜드명 정규화 사전 로드"""
    data = load_yaml_resource("normalization/spelling.yaml")
    return dict(data.get("brands", {}))


def load_unit_mapping() -> Dict[str, str]:
    """단위 정규화 테이블 로드 (원본 토큰 -> 정규 단위)"""
    data = load_yaml_resource("normalization/units.yaml")
    return {str(k): str(v) for k, v in data.get("units", {}).items()}


def load_unit_categories() -> Dict[str, list[str]]:
    """정규 단위의 카테고리 목록 로드"""
    data = load_yaml_resource("normalization/units.yaml")
    return data.get("categories", {})


def load_category_tolerances() -> Dict[str, Any]:
    """카테고리별 단가 허용 오차 로드"""
    data = load_yaml_resource("pricing/category_tolerances.yaml")
    return {
        "default": data.get("default", "기타"),
        "tolerances": {str(k): float(v) for k, v in data.get("tolerances", {}).items()},
        "aliases": dict(data.get("aliases", {})),
    }


def load_attribute_vocabulary() -> Dict[str, Any]:
    """원산지/프리미엄 속성 어휘 로드"""
    data = load_yaml_resource("matching/attributes.yaml")
    return {
        "origin": {tag: list(keywords) for tag, keywords in data.get("origin", {}).items()},
        "premium": [str(p) for p in data.get("premium", [])],
    }


def load_protected_words() -> tuple[str, ...]:
    """조사 제거에서 제외할 품목명 끝말 로드"""
    data = load_yaml_resource("normalization/particles.yaml")
    return tuple(str(w) for w in data.get("protected", []))
