"""Shared text utilities."""

from recipe_intake.tools.normalize import (
    canonical_words,
    clean_unit,
    extract_quantity_unit,
    normalize_name,
    parse_quantity,
    singularize,
)

__all__ = [
    "canonical_words",
    "clean_unit",
    "extract_quantity_unit",
    "normalize_name",
    "parse_quantity",
    "singularize",
]
