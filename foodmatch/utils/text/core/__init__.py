"""Core text processing (cleaning)."""

from .cleaning import (
    clean_item_name,
    collapse_whitespace,
    keep_hangul_and_letters,
    strip_brackets,
    strip_quantity_units,
)

__all__ = [
    "clean_item_name",
    "collapse_whitespace",
    "keep_hangul_and_letters",
    "strip_brackets",
    "strip_quantity_units",
]
