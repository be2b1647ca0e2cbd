"""
Recipe Intake - Name and Quantity Normalization.

Utilities for normalizing ingredient text for consistent matching.
"""

import re

UNICODE_FRACTIONS = {
    "½": 0.5,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "¼": 0.25,
    "¾": 0.75,
    "⅕": 0.2,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
}

# Unit aliases - map to standard form
UNIT_ALIASES = {
    "pounds": "lb",
    "pound": "lb",
    "lbs": "lb",
    "ounces": "oz",
    "ounce": "oz",
    "grams": "g",
    "gram": "g",
    "kilograms": "kg",
    "kilogram": "kg",
    "liters": "l",
    "liter": "l",
    "litres": "l",
    "litre": "l",
    "milliliters": "ml",
    "milliliter": "ml",
    "millilitres": "ml",
    "cups": "cup",
    "c": "cup",
    "tablespoons": "tbsp",
    "tablespoon": "tbsp",
    "tbs": "tbsp",
    "tbsps": "tbsp",
    "teaspoons": "tsp",
    "teaspoon": "tsp",
    "tsps": "tsp",
    "cloves": "clove",
    "pinches": "pinch",
    "dashes": "dash",
    "cans": "can",
    "bunches": "bunch",
    "slices": "slice",
    "pieces": "piece",
    "sticks": "stick",
    "quarts": "quart",
    "pints": "pint",
    "gallons": "gallon",
    "heads": "head",
    "sprigs": "sprig",
    "packages": "package",
}

KNOWN_UNITS = set(UNIT_ALIASES) | set(UNIT_ALIASES.values()) | {"fl oz"}

# Pattern fragment matching any known unit, longest first so "tbsp" beats "tb"
UNIT_PATTERN = "|".join(sorted((re.escape(u) for u in KNOWN_UNITS), key=len, reverse=True))

# Mixed numbers, fractions, decimals, integers and unicode fractions
QUANTITY_PATTERN = r"(?:\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?\s*[½⅓⅔¼¾⅕⅛⅜⅝⅞]?|[½⅓⅔¼¾⅕⅛⅜⅝⅞])"

_SINGULAR_EXCEPTIONS = {
    "asparagus",
    "couscous",
    "hummus",
    "molasses",
    "citrus",
    "swiss",
    "grits",
    "oats",
    "brussels",
    "chips",
}

_IRREGULAR_PLURALS = {
    "leaves": "leaf",
    "halves": "half",
    "loaves": "loaf",
    "knives": "knife",
}


def normalize_name(name: str) -> str:
    """
    Normalize a name for consistent matching.

    Operations:
    - Lowercase
    - Strip leading/trailing whitespace
    - Collapse multiple spaces to single space

    Examples:
        normalize_name("  Chicken Thighs  ") -> "chicken thighs"
        normalize_name("TOMATO") -> "tomato"
    """
    return " ".join(name.lower().strip().split())


def singularize(word: str) -> str:
    """
    Reduce a plural food word to its singular form.

    Examples:
        singularize("tomatoes") -> "tomato"
        singularize("berries") -> "berry"
        singularize("peaches") -> "peach"
        singularize("eggs") -> "egg"
    """
    if word in _SINGULAR_EXCEPTIONS or len(word) <= 3:
        return word
    if word in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[word]
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("oes"):
        return word[:-2]
    if word.endswith(("shes", "ches", "xes", "sses")):
        return word[:-2]
    if word.endswith("s") and not word.endswith(("ss", "us")):
        return word[:-1]
    return word


def canonical_words(text: str) -> list[str]:
    """Lowercase, strip punctuation, and singularize every word."""
    words = re.findall(r"[a-z]+(?:-[a-z]+)*", text.lower())
    return [singularize(w) for w in words]


def clean_unit(unit: str) -> str:
    """
    Clean and normalize a unit string.

    Args:
        unit: Raw unit input (e.g., "Tablespoons", "LBS", "cup")

    Returns:
        Normalized unit (lowercase, short form where applicable)
    """
    unit = unit.lower().strip().rstrip(".")
    return UNIT_ALIASES.get(unit, unit)


def parse_quantity(text: str) -> float | None:
    """
    Parse a quantity string to a float.

    Examples:
        "2" -> 2.0
        "1/2" -> 0.5
        "1 1/2" -> 1.5
        "½" -> 0.5
        "1½" -> 1.5
    """
    text = text.strip()
    if not text:
        return None

    total = 0.0
    for frac_char, value in UNICODE_FRACTIONS.items():
        if frac_char in text:
            total += value
            text = text.replace(frac_char, "").strip()

    try:
        for part in text.split():
            if "/" in part:
                numerator, denominator = part.split("/", 1)
                total += float(numerator) / float(denominator)
            else:
                total += float(part)
    except (ValueError, ZeroDivisionError):
        return None

    return round(total, 3)


def extract_quantity_unit(text: str) -> tuple[float | None, str | None, str]:
    """
    Extract quantity and unit from the start of an ingredient line.

    Args:
        text: Text like "3 lbs of chicken" or "2 cups flour"

    Returns:
        Tuple of (quantity, unit, remaining_text)
        Returns (None, None, text) if no quantity found

    Examples:
        "3 lbs chicken" -> (3.0, "lb", "chicken")
        "chicken" -> (None, None, "chicken")
        "1 1/2 cups flour" -> (1.5, "cup", "flour")
    """
    text = text.strip()

    match = re.match(rf"^({QUANTITY_PATTERN})\s*", text)
    if not match:
        return (None, None, text)

    quantity = parse_quantity(match.group(1))
    remaining = text[match.end() :].strip()

    unit_match = re.match(rf"^({UNIT_PATTERN})\.?(?:\s+|$)(?:of\s+)?(.*)$", remaining, re.IGNORECASE)
    if unit_match:
        return (quantity, clean_unit(unit_match.group(1)), unit_match.group(2).strip())

    return (quantity, None, remaining)
