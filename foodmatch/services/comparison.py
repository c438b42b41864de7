"""공급사 비교 / 절감액 계산"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from foodmatch.funnel.funnel_matcher import FunnelMatch
from foodmatch.funnel.price_normalizer import PricePerUnit, price_per_unit
from foodmatch.schemas.matching_schema import CatalogProduct, InvoiceLineItem


@dataclass
class SupplierSaving:
    """공급사 하나의 대표 후보와 절감액

    Attributes:
        standard_price: 카탈로그에 등록된 판매 단위 가격
        comparable_price: 거래명세서 규격으로 환산한 가격 (환산 불가면 standard_price)
        savings: (내 단가 - comparable_price) × 수량, 음수 가능
        loss: 비싸게 산 금액 (0 이상)
    """

    supplier: str
    product: CatalogProduct
    standard_price: float
    comparable_price: float
    savings: float
    loss: float = 0.0


@dataclass
class SupplierComparison:
    suppliers: list[SupplierSaving] = field(default_factory=list)
    best_supplier: Optional[str] = None
    max_savings: float = 0.0


def calculate_loss(extracted_unit_price: float, standard_price: float, quantity: float) -> float:
    """기준가보다 비싸게 산 금액 (싸게 샀으면 0)

    예: calculate_loss(1200, 1000, 10) -> 2000
    """
    diff = extracted_unit_price - standard_price
    if diff <= 0:
        return 0.0
    return diff * quantity


def comparable_price(product: CatalogProduct, invoice_ppu: Optional[PricePerUnit]) -> float:
    """후보 가격을 거래명세서 품목 규격 기준으로 환산

    예: 품목 1kg, 후보 10kg 40000원 -> 4000
    단위당 가격을 비교할 수 없으면 등록 가격을 그대로 씁니다.
    """
    if invoice_ppu is None:
        return product.standard_price

    candidate_ppu = price_per_unit(product.standard_price, product.spec_text)
    if candidate_ppu is None or candidate_ppu.unit != invoice_ppu.unit:
        return product.standard_price
    return candidate_ppu.value * invoice_ppu.normalized_quantity


def compare_suppliers(item: InvoiceLineItem, funnel: FunnelMatch) -> SupplierComparison:
    """공급사별로 깔때기 순위가 가장 높은 후보를 골라 절감액 비교

    max_savings 는 0 이상이며, 절감 가능한 공급사가 없으면 best_supplier 는 None 입니다.
    """
    representatives: dict[str, CatalogProduct] = {}
    for scored in funnel.ranked:
        supplier = scored.product.supplier or "unknown"
        representatives.setdefault(supplier, scored.product)

    suppliers = []
    for supplier, product in representatives.items():
        price = comparable_price(product, funnel.invoice_ppu)
        suppliers.append(
            SupplierSaving(
                supplier=supplier,
                product=product,
                standard_price=product.standard_price,
                comparable_price=price,
                savings=(item.unit_price - price) * item.quantity,
                loss=calculate_loss(item.unit_price, price, item.quantity),
            )
        )

    best = max(suppliers, key=lambda s: s.savings, default=None)
    if best is None or best.savings <= 0:
        return SupplierComparison(suppliers=suppliers)

    return SupplierComparison(suppliers=suppliers, best_supplier=best.supplier, max_savings=best.savings)
