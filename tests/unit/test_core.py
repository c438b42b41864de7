"""설정/예외/로깅 테스트"""
import pytest
from pydantic import ValidationError

from foodmatch.core.config import Settings
from foodmatch.core.exceptions import (
    ConfigurationException,
    EmbeddingException,
    FoodMatchException,
    InvalidQueryException,
    RetrievalException,
    ValidationException,
)
from foodmatch.core.logging import sanitize_for_log


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.search_mode == "hybrid"
        assert settings.search_limit == 5
        assert settings.embedding_dimensions == 384
        assert settings.vector_similarity_threshold == 0.2

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SEARCH_MODE", "bm25")
        monkeypatch.setenv("SEARCH_LIMIT", "12")
        settings = Settings(_env_file=None)
        assert settings.search_mode == "bm25"
        assert settings.search_limit == 12

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"search_mode": "keyword"},
            {"search_limit": 0},
            {"hybrid_bm25_weight": 1.5},
            {"vector_similarity_threshold": -0.1},
            {"backend_timeout_s": 0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **kwargs)


class TestExceptions:
    def test_retrieval(self):
        e = RetrievalException("bm25", "HTTP 503")
        assert e.error_code == "RETRIEVAL_FAILED"
        assert e.message == "Candidate retrieval failed (bm25): HTTP 503"
        assert str(e) == "[RETRIEVAL_FAILED] Candidate retrieval failed (bm25): HTTP 503"
        assert e.details == {"mode": "bm25", "reason": "HTTP 503"}

    def test_hierarchy(self):
        assert issubclass(EmbeddingException, FoodMatchException)
        assert issubclass(InvalidQueryException, ValidationException)
        assert InvalidQueryException("empty").error_code == "VALIDATION_ERROR"
        assert ConfigurationException("x", "y").error_code == "CONFIGURATION_ERROR"


class TestSanitizeForLog:
    def test_empty(self):
        assert sanitize_for_log("") == "[empty]"

    def test_masks_secrets(self):
        assert sanitize_for_log("api_key=abc") == "***"
        assert sanitize_for_log("Bearer xyz") == "***"

    def test_truncates(self):
        assert sanitize_for_log("양" * 120, max_length=100) == "양" * 100 + "..."

    def test_plain_value(self):
        assert sanitize_for_log("국산 양파") == "국산 양파"

    def test_masks_key_like_tokens(self):
        assert sanitize_for_log("query sk-abcdefghijklmnop 양파") == "query *** 양파"
