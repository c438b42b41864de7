"""비즈니스 로직 서비스 - export only."""

from .comparison import SupplierComparison, SupplierSaving, calculate_loss, comparable_price, compare_suppliers

__all__ = ["SupplierComparison", "SupplierSaving", "calculate_loss", "comparable_price", "compare_suppliers"]
