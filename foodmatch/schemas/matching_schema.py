"""Pydantic 스키마 정의 (매칭 도메인 + API 입출력)"""
from typing import Optional, List, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime

from foodmatch.funnel.spec_parser import extract_spec_from_name, format_number, format_spec


class InvoiceLineItem(BaseModel):
    """거래명세서 품목 (업스트림 추출 결과, 불변)"""
    model_config = ConfigDict(frozen=True)

    row_number: int = Field(0, ge=0, description="원본 행 번호")
    item_name: str = Field(..., min_length=1, max_length=500, description="품목명")
    spec: Optional[str] = Field(None, max_length=200, description="규격 (예: 1kg, 45G*20개*6팩)")
    quantity: float = Field(1, ge=0, description="수량")
    unit_price: float = Field(0, ge=0, description="단가 (원)")
    total_price: float = Field(0, ge=0, description="금액 (원)")
    tax_type: Optional[str] = Field(None, max_length=20, description="과세 구분")

    @field_validator('item_name')
    @classmethod
    def validate_item_name(cls, v: str) -> str:
        """품목명 검증: 공백만으로 구성 불가"""
        if not v or not v.strip():
            raise ValueError('품목명은 공백만으로 구성될 수 없습니다')
        return v.strip()

    @property
    def spec_text(self) -> Optional[str]:
        """규격 컬럼이 비어 있으면 품목명 끝의 '수량+단위'를 사용"""
        if self.spec and self.spec.strip():
            return self.spec.strip()
        parsed = extract_spec_from_name(self.item_name)
        return format_spec(parsed) if parsed.is_valid else None


class CatalogProduct(BaseModel):
    """공급사 카탈로그 상품 (읽기 전용)"""
    id: str = Field(..., description="상품 ID")
    name: str = Field(..., description="상품명")
    standard_price: float = Field(0, description="기준 단가 (원)")
    spec_quantity: Optional[float] = Field(None, description="규격 수량")
    spec_unit: Optional[str] = Field(None, description="규격 단위")
    supplier: str = Field("", description="공급사")
    category: Optional[str] = Field(None, description="카테고리")
    tax_type: Optional[str] = Field(None, description="과세 구분")
    unit_normalized: Optional[str] = Field(None, description="정규화된 판매 단위")

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        # DB에 따라 정수 ID가 올 수 있음
        return str(v) if v is not None else v

    @property
    def spec_text(self) -> Optional[str]:
        """규격 문자열 (spec_quantity/spec_unit 우선, 없으면 상품명에서 추출)"""
        if self.spec_quantity and self.spec_unit:
            return f"{format_number(self.spec_quantity)}{self.spec_unit}"
        parsed = extract_spec_from_name(self.name)
        return format_spec(parsed) if parsed.is_valid else None


class MatchCandidate(CatalogProduct):
    """검색 백엔드 결과를 정규화한 후보 (match_score 0~1)"""
    match_score: float = Field(0.0, ge=0, le=1, description="백엔드 유사도 점수")


# ============================================================================
# API 입출력
# ============================================================================

class MatchBatchRequest(BaseModel):
    """일괄 매칭 요청"""
    items: List[InvoiceLineItem] = Field(..., min_length=1, max_length=500, description="거래명세서 품목 목록")


class ScoredCandidateData(BaseModel):
    """깔때기 점수가 붙은 후보"""
    product: CatalogProduct
    text_score: float
    attribute_score: float
    price_in_range: bool
    final_score: float
    mismatch_reasons: list[str] = Field(default_factory=list)


class PriceRangeData(BaseModel):
    """적용된 단가 범위"""
    min: float
    max: float
    base: float
    tolerance_percent: float


class FunnelData(BaseModel):
    """깔때기 추천 결과"""
    success: bool
    primary: list[ScoredCandidateData] = Field(default_factory=list)
    secondary: list[ScoredCandidateData] = Field(default_factory=list)
    price_range: PriceRangeData | None = None
    invoice_ppu: float | None = Field(None, description="거래명세서 단위당 가격")
    ppu_unit: str | None = Field(None, description="g | ml | ea")
    error: str | None = None


class SupplierSavingData(BaseModel):
    """공급사별 절감액"""
    supplier: str
    product: CatalogProduct
    standard_price: float
    comparable_price: float = Field(..., description="거래명세서 규격으로 환산한 가격")
    savings: float
    loss: float = 0


class ComparisonData(BaseModel):
    """공급사 비교 결과"""
    suppliers: list[SupplierSavingData] = Field(default_factory=list)
    best_supplier: str | None = None
    max_savings: float = 0


class ItemMatchData(BaseModel):
    """품목 하나의 매칭 결과"""
    row_number: int
    item_name: str
    match_status: str = Field(..., description="auto_matched | pending | unmatched")
    best_match: MatchCandidate | None = None
    candidates: list[MatchCandidate] = Field(default_factory=list)
    funnel: FunnelData | None = None
    comparison: ComparisonData | None = None
    error_code: str | None = Field(None, description="검색/임베딩 실패 시 에러 코드")


class MatchResponse(BaseModel):
    """단건 매칭 응답"""
    status: str = Field(..., description="success or error")
    data: Optional[ItemMatchData] = Field(None, description="매칭 결과")
    message: str = Field(..., description="응답 메시지")
    error_code: str | None = Field(None, description="에러 코드 (error 시)")


class MatchBatchResponse(BaseModel):
    """일괄 매칭 응답"""
    status: str
    data: list[ItemMatchData] = Field(default_factory=list)
    summary: dict[str, int] = Field(default_factory=dict, description="상태별 건수")
    message: str
    error_code: str | None = None


class ProductSearchResponse(BaseModel):
    """상품 검색 응답"""
    status: str
    data: list[MatchCandidate] = Field(default_factory=list)
    message: str
    error_code: str | None = None


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    timestamp: datetime
    version: str
    search_mode: str
