"""스키마 검증 테스트"""
import pytest
from pydantic import ValidationError

from foodmatch.schemas.matching_schema import (
    CatalogProduct,
    InvoiceLineItem,
    MatchBatchRequest,
    MatchCandidate,
)


class TestInvoiceLineItem:
    def test_valid(self):
        item = InvoiceLineItem(row_number=3, item_name="  양파(국내산)  ", spec="1kg", quantity=2, unit_price=5000)
        assert item.item_name == "양파(국내산)"
        assert item.total_price == 0

    def test_immutable(self):
        item = InvoiceLineItem(item_name="양파")
        with pytest.raises(ValidationError):
            item.item_name = "대파"

    @pytest.mark.parametrize("name", ["", "   ", "가" * 501])
    def test_invalid_name(self, name):
        with pytest.raises(ValidationError):
            InvoiceLineItem(item_name=name)

    def test_negative_price(self):
        with pytest.raises(ValidationError):
            InvoiceLineItem(item_name="양파", unit_price=-1)

    def test_spec_text_prefers_spec_column(self):
        assert InvoiceLineItem(item_name="참치캔(200G)", spec=" 1kg ").spec_text == "1kg"

    def test_spec_text_from_name(self):
        assert InvoiceLineItem(item_name="옛날당면(1.5KG/PAC)").spec_text == "1.5KG"
        assert InvoiceLineItem(item_name="양파").spec_text is None


class TestCatalogProduct:
    def test_integer_id(self):
        assert CatalogProduct(id=42, name="양파").id == "42"

    def test_spec_text(self):
        assert CatalogProduct(id="a", name="양파", spec_quantity=2, spec_unit="KG").spec_text == "2KG"
        assert CatalogProduct(id="a", name="참치캔 200g").spec_text == "200G"
        assert CatalogProduct(id="a", name="양파").spec_text is None

    def test_candidate_score_bounds(self):
        with pytest.raises(ValidationError):
            MatchCandidate(id="a", name="양파", match_score=1.5)


class TestBatchRequest:
    def test_limits(self):
        with pytest.raises(ValidationError):
            MatchBatchRequest(items=[])
        with pytest.raises(ValidationError):
            MatchBatchRequest(items=[{"item_name": "양파"}] * 501)

    def test_parses_items(self):
        request = MatchBatchRequest(items=[{"item_name": "양파"}, {"item_name": "대파", "quantity": 3}])
        assert request.items[1].quantity == 3
