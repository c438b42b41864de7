"""Text utilities (modularized).

Implementation is organized under:
- core/ (cleaning)
- normalization/ (keyword / semantic normalization)
- matching/ (similarity)
"""

from .core.cleaning import clean_item_name
from .matching import character_jaccard, fuzzy_score
from .normalization import NormalizedQuery, extract_category_keywords, normalize, preprocess_food_name

__all__ = [
    # core
    "clean_item_name",
    # normalization
    "NormalizedQuery",
    "normalize",
    "preprocess_food_name",
    "extract_category_keywords",
    # matching
    "fuzzy_score",
    "character_jaccard",
]
