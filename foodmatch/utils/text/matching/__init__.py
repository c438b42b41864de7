"""Matching package."""

from .similarity import character_jaccard, fuzzy_score

__all__ = ["character_jaccard", "fuzzy_score"]
