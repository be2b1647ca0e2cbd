"""
Tests for text normalization utilities.

Tests cover:
- Name and unit normalization
- Quantity parsing (fractions, mixed numbers, unicode fractions)
- Canonical word sequences used for ingredient matching
- Social caption cleanup
"""

import pytest

from recipe_intake.recipe_import.normalizer import normalize_social_text
from recipe_intake.tools.normalize import (
    canonical_words,
    clean_unit,
    extract_quantity_unit,
    normalize_name,
    parse_quantity,
    singularize,
)


class TestNormalization:
    """Test name and unit normalization utilities."""

    def test_normalize_name_lowercase(self):
        assert normalize_name("Chicken Thighs") == "chicken thighs"
        assert normalize_name("TOMATO") == "tomato"

    def test_normalize_name_collapses_spaces(self):
        assert normalize_name("  extra   virgin   olive   oil ") == "extra virgin olive oil"

    def test_clean_unit_normalizes(self):
        assert clean_unit("LBS") == "lb"
        assert clean_unit("Cups") == "cup"
        assert clean_unit("TABLESPOON") == "tbsp"
        assert clean_unit("tsp.") == "tsp"

    def test_clean_unit_preserves_unknown(self):
        assert clean_unit("handful") == "handful"


class TestQuantities:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2", 2.0),
            ("1/2", 0.5),
            ("1 1/2", 1.5),
            ("½", 0.5),
            ("1½", 1.5),
            ("0.25", 0.25),
        ],
    )
    def test_parse_quantity(self, text, expected):
        assert parse_quantity(text) == expected

    def test_parse_quantity_invalid(self):
        assert parse_quantity("") is None
        assert parse_quantity("1/0") is None

    def test_extract_quantity_unit_basic(self):
        assert extract_quantity_unit("3 lbs chicken") == (3.0, "lb", "chicken")

    def test_extract_quantity_unit_mixed_number(self):
        assert extract_quantity_unit("1 1/2 cups flour") == (1.5, "cup", "flour")

    def test_extract_quantity_unit_of(self):
        assert extract_quantity_unit("2 cups of milk") == (2.0, "cup", "milk")

    def test_extract_quantity_without_unit(self):
        assert extract_quantity_unit("2 eggs") == (2.0, None, "eggs")

    def test_extract_quantity_unit_no_quantity(self):
        assert extract_quantity_unit("chicken") == (None, None, "chicken")


class TestCanonicalWords:
    def test_singularize(self):
        assert singularize("tomatoes") == "tomato"
        assert singularize("berries") == "berry"
        assert singularize("peaches") == "peach"
        assert singularize("eggs") == "egg"
        assert singularize("leaves") == "leaf"

    def test_singularize_exceptions(self):
        assert singularize("asparagus") == "asparagus"
        assert singularize("molasses") == "molasses"
        assert singularize("glass") == "glass"

    def test_canonical_words(self):
        assert canonical_words("Fresh Tomatoes, diced!") == ["fresh", "tomato", "diced"]
        assert canonical_words("All-Purpose Flour") == ["all-purpose", "flour"]
        assert canonical_words("2 cups") == ["cup"]


class TestSocialText:
    """Caption cleanup keeps line structure."""

    def test_strips_emoji_hashtags_mentions(self):
        assert normalize_social_text("🔥 Best pasta! #dinner @chef") == "Best pasta!"

    def test_strips_links(self):
        text = "Full recipe at https://example.com/pasta or www.example.com"
        assert normalize_social_text(text) == "Full recipe at or"

    def test_standardizes_bullets_and_numbers(self):
        text = "• 2 eggs\n* 1 cup milk\n1) Whisk\n2.Cook"
        assert normalize_social_text(text) == "- 2 eggs\n- 1 cup milk\n1. Whisk\n2. Cook"

    def test_collapses_blank_lines(self):
        text = "Title\n\n\n\n\nIngredients:\n- salt"
        assert normalize_social_text(text) == "Title\n\nIngredients:\n- salt"

    def test_keeps_email_like_at_signs(self):
        assert "hello@example.com" in normalize_social_text("Questions: hello@example.com")

    def test_empty(self):
        assert normalize_social_text("") == ""
