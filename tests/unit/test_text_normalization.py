"""텍스트 정규화 유닛 테스트"""
import pytest

from foodmatch.utils.text import (
    character_jaccard,
    clean_item_name,
    extract_category_keywords,
    fuzzy_score,
    normalize,
    preprocess_food_name,
)
from foodmatch.utils.text.normalization import strip_particles


class TestNormalize:
    """키워드/의미 검색용 정규화"""

    def test_particles_only_stripped_for_keyword(self):
        """조사는 키워드용에서만 제거"""
        result = normalize("만두는 (냉동) 1kg")
        assert result.for_keyword == "만두"
        assert result.for_semantic == "만두는"

    def test_brackets_removed(self):
        assert normalize("[특가] 얼갈이배추(계약재배)").for_keyword == "얼갈이배추"

    def test_quantity_units_removed(self):
        assert normalize("양파 10kg").for_keyword == "양파"
        assert normalize("계란 30개입").for_keyword == "계란"
        assert normalize("우유 1.5L").for_keyword == "우유"

    def test_spelling_corrected(self):
        assert normalize("쵸콜렛 과자").for_keyword == "초콜릿 과자"
        assert normalize("되지고기 앞다리").for_semantic == "돼지고기 앞다리"

    def test_special_characters_and_digits_removed(self):
        assert normalize("양파#1 !!상품").for_keyword == "양파 상품"

    def test_whitespace_collapsed(self):
        assert normalize("  국산   양파  ").for_semantic == "국산 양파"

    @pytest.mark.parametrize("raw", ["", "   ", "(냉동)", "1kg"])
    def test_empty_result_never_raises(self, raw):
        """빈 입력/정규화 후 빈 문자열"""
        result = normalize(raw)
        assert result.for_keyword == ""
        assert result.for_semantic == ""

    def test_keyword_form_is_idempotent(self):
        once = normalize("우유도만 2L").for_keyword
        assert once == "우유"
        assert normalize(once).for_keyword == once

    @pytest.mark.parametrize(
        "raw,expected",
        [("쵸-코파이", "초코파이"), ("되.지고기", "돼지고기"), ("라1멘", "라면"), ("쥬#스는", "주스")],
    )
    def test_spelling_applied_after_separators_removed(self, raw, expected):
        """숫자/특수문자 제거로 드러난 오표기도 한 번에 교정"""
        once = normalize(raw).for_keyword
        assert once == expected
        assert normalize(once).for_keyword == once


class TestParticles:
    """조사 제거"""

    def test_multiple_particles(self):
        assert strip_particles("김치는 만두를") == "김치 만두"

    def test_short_stems_kept(self):
        """어간이 한 글자만 남는 단어는 유지"""
        assert strip_particles("오이") == "오이"
        assert strip_particles("포도") == "포도"

    def test_particle_inside_word_kept(self):
        assert strip_particles("만두피") == "만두피"

    @pytest.mark.parametrize("name", ["청포도", "새송이", "가시오이", "아보카도", "씨제이", "김말이", "초코파이"])
    def test_protected_names_kept(self, name):
        """조사 음절로 끝나는 품목명은 그대로"""
        assert normalize(name).for_keyword == name

    def test_particle_after_protected_name(self):
        assert strip_particles("새송이를 청포도는") == "새송이 청포도"


class TestPreprocessOptions:
    def test_brand_normalization_optional(self):
        assert preprocess_food_name("씨제이 햇반") == "씨제이 햇반"
        assert preprocess_food_name("씨제이 햇반", normalize_brands=True) == "CJ 햇반"

    def test_keep_numbers(self):
        assert preprocess_food_name("양파 3호", remove_numbers=False, remove_special_chars=False) == "양파 3호"


class TestCleanItemName:
    def test_keeps_digits(self):
        assert clean_item_name("국산 양파(특) 10kg!") == "국산 양파 10kg"

    def test_empty(self):
        assert clean_item_name("") == ""


class TestCategoryKeywords:
    def test_extracts_categories(self):
        assert extract_category_keywords("국산 양파") == ["채소"]
        assert "유제품" in extract_category_keywords("서울우유 1L")

    def test_no_category(self):
        assert extract_category_keywords("") == []


class TestSimilarity:
    def test_identical_names(self):
        assert fuzzy_score("양파 1kg", "양파(국내산)") == pytest.approx(100.0)

    def test_empty_is_zero(self):
        assert fuzzy_score("", "양파") == 0.0
        assert fuzzy_score("양파", "") == 0.0

    def test_different_names_score_lower(self):
        assert fuzzy_score("양파", "대파") < fuzzy_score("양파", "양파")

    def test_character_jaccard(self):
        assert character_jaccard("양파", "양파") == 1.0
        assert character_jaccard("양파", "대파") == pytest.approx(1 / 3)
        assert character_jaccard("", "") == 0.0
