"""Normalization package."""

from .normalize import (
    PARTICLES,
    NormalizedQuery,
    extract_category_keywords,
    normalize,
    preprocess_food_name,
    strip_particles,
)

__all__ = [
    "PARTICLES",
    "NormalizedQuery",
    "extract_category_keywords",
    "normalize",
    "preprocess_food_name",
    "strip_particles",
]
