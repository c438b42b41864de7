"""foodmatch - 거래명세서 품목 ↔ 공급사 카탈로그 매칭 엔진"""

__version__ = "1.0.0"
