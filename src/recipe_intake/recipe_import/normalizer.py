"""Normalization utilities for recipe data."""

import re

from .models import StructuredRecipe

_EMOJI_RE = re.compile(
    "["
    "\U0001F300-\U0001FAFF"  # pictographs, supplemental symbols
    "\U0001F1E0-\U0001F1FF"  # regional indicators
    "\u2600-\u27bf"  # misc symbols, dingbats
    "\ue000-\uf8ff"  # private use
    "]"
)
_VARIATION_SELECTOR_RE = re.compile("[\ufe00-\ufe0f\u200d]")
_HASHTAG_RE = re.compile(r"#\w+")
_MENTION_RE = re.compile(r"(?<![\w.])@[\w.]+")
_LINK_RE = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)


def parse_duration(duration: str | int | None) -> int | None:
    """
    Parse ISO 8601 duration to minutes.

    Examples:
        PT30M -> 30
        PT1H -> 60
        PT1H30M -> 90
        P0DT2H15M -> 135
    """
    if not duration:
        return None

    # Handle already-integer values
    if isinstance(duration, int):
        return duration

    # Match ISO 8601 duration pattern, tolerating a leading day component
    match = re.match(r"P(?:(\d+)D)?T(?:(\d+)H)?(?:(\d+)M)?", str(duration).strip(), re.IGNORECASE)
    if not match:
        # Try parsing as plain number
        try:
            return int(duration)
        except (ValueError, TypeError):
            return None

    days = int(match.group(1) or 0)
    hours = int(match.group(2) or 0)
    minutes = int(match.group(3) or 0)
    total = days * 24 * 60 + hours * 60 + minutes
    return total or None


def parse_servings(yield_str: str | int | list | None) -> int | None:
    """
    Parse recipe yield/servings to integer.

    Examples:
        "4 servings" -> 4
        "Serves 6" -> 6
        ["4", "4 servings"] -> 4
        "Makes 12 cookies" -> 12
    """
    if not yield_str:
        return None

    if isinstance(yield_str, int):
        return yield_str

    if isinstance(yield_str, list):
        return parse_servings(yield_str[0])

    # Extract first number from string
    match = re.search(r"(\d+)", str(yield_str))
    if match:
        return int(match.group(1))

    return None


def extract_instructions_text(instructions: list | str | dict | None) -> list[str]:
    """
    Extract instruction text from various formats.

    Handles:
        - Plain strings (split by newlines/numbers)
        - List of strings
        - List of HowToStep dicts with 'text' field
        - HowToSection dicts whose steps live under 'itemListElement'
    """
    if not instructions:
        return []

    if isinstance(instructions, dict):
        instructions = [instructions]

    # Already a list
    if isinstance(instructions, list):
        result = []
        for item in instructions:
            if isinstance(item, str):
                text = item.strip()
                if text:
                    result.append(text)
            elif isinstance(item, dict):
                # HowToSection groups steps
                if item.get("itemListElement"):
                    result.extend(extract_instructions_text(item["itemListElement"]))
                    continue
                # HowToStep format
                text = item.get("text") or item.get("@text") or item.get("name") or ""
                if isinstance(text, str) and text.strip():
                    result.append(text.strip())
            elif isinstance(item, list):
                result.extend(extract_instructions_text(item))
        return result

    # Single string - split by numbered steps or newlines
    if isinstance(instructions, str):
        # Try splitting by numbered patterns like "1." or "1)"
        steps = re.split(r"(?:^|\n)\s*\d+[\.\)]\s*", instructions)
        steps = [s.strip() for s in steps if s.strip()]
        if len(steps) > 1:
            return steps

        # Fall back to splitting by newlines
        steps = [s.strip() for s in instructions.split("\n") if s.strip()]
        if len(steps) > 1:
            return steps

        # Single paragraph - return as single instruction
        return [instructions.strip()] if instructions.strip() else []

    return []


def normalize_ingredients(ingredients: list | str | None) -> list[str]:
    """
    Normalize ingredients to list of strings.

    Handles:
        - List of strings
        - List of dicts with 'name' or 'text' field
        - A single newline-separated string
    """
    if not ingredients:
        return []

    if isinstance(ingredients, str):
        ingredients = ingredients.split("\n")

    result = []
    for item in ingredients:
        if isinstance(item, str):
            text = " ".join(item.split())
            if text:
                result.append(text)
        elif isinstance(item, dict):
            text = item.get("text") or item.get("name") or ""
            if isinstance(text, str) and text.strip():
                result.append(text.strip())

    return result


def extract_image_url(image: str | dict | list | None) -> str | None:
    """
    Extract image URL from various formats.

    Handles:
        - Plain URL string
        - Dict with 'url' field
        - List of images (take first)
    """
    if not image:
        return None

    if isinstance(image, str):
        return image if image.startswith("http") else None

    if isinstance(image, dict):
        url = image.get("url") or image.get("@url") or image.get("contentUrl")
        if isinstance(url, str) and url.startswith("http"):
            return url

    if isinstance(image, list) and len(image) > 0:
        return extract_image_url(image[0])

    return None


def extract_author(author: str | dict | list | None) -> str | None:
    """Author name from a schema.org author (string, Person dict, or list)."""
    if not author:
        return None
    if isinstance(author, str):
        return author.strip() or None
    if isinstance(author, dict):
        name = author.get("name")
        return name.strip() if isinstance(name, str) and name.strip() else None
    if isinstance(author, list):
        return extract_author(author[0])
    return None


def extract_keywords(recipe_data: dict) -> list[str]:
    """Tags from keywords, recipeCategory and recipeCuisine, deduplicated in order."""
    tags: list[str] = []
    for key in ("keywords", "recipeCategory", "recipeCuisine"):
        value = recipe_data.get(key)
        if isinstance(value, str):
            values = value.split(",")
        elif isinstance(value, list):
            values = [v for v in value if isinstance(v, str)]
        else:
            continue
        for tag in values:
            tag = tag.strip()
            if tag and tag.lower() not in (t.lower() for t in tags):
                tags.append(tag)
    return tags


def extract_nutrition(nutrition: dict | None) -> dict[str, str]:
    """NutritionInformation fields as display strings, minus the schema keys."""
    if not isinstance(nutrition, dict):
        return {}
    return {
        key: str(value).strip()
        for key, value in nutrition.items()
        if not key.startswith("@") and value not in (None, "")
    }


def format_structured_text(recipe: StructuredRecipe) -> str:
    """
    Flatten a structured recipe into the plain-text layout the parser reads.

    Example:
        Chocolate Chip Cookies

        Classic chewy cookies.

        Prep time: 15 minutes
        Servings: 24

        Ingredients:
        - 2 cups flour

        Instructions:
        1. Mix everything.
    """
    parts = [recipe.name.strip()]

    if recipe.description:
        parts.append(recipe.description.strip())

    details = []
    if recipe.prep_time_minutes:
        details.append(f"Prep time: {recipe.prep_time_minutes} minutes")
    if recipe.cook_time_minutes:
        details.append(f"Cook time: {recipe.cook_time_minutes} minutes")
    if recipe.servings:
        details.append(f"Servings: {recipe.servings}")
    if details:
        parts.append("\n".join(details))

    if recipe.ingredients:
        parts.append("Ingredients:\n" + "\n".join(f"- {line}" for line in recipe.ingredients))

    if recipe.instructions:
        parts.append(
            "Instructions:\n" + "\n".join(f"{i}. {step}" for i, step in enumerate(recipe.instructions, 1))
        )

    if recipe.nutrition:
        parts.append("Nutrition:\n" + "\n".join(f"- {k}: {v}" for k, v in recipe.nutrition.items()))

    if recipe.keywords:
        parts.append("Tags: " + ", ".join(recipe.keywords))

    return "\n\n".join(p for p in parts if p)


def normalize_social_text(text: str) -> str:
    """
    Strip social-media artifacts from pasted captions.

    Removes emoji, hashtags, @mentions and links, standardizes bullets and
    numbered lists, and collapses whitespace. Line structure is kept so the
    parser can still find sections.

    Examples:
        "🔥 Best pasta! #dinner @chef" -> "Best pasta!"
        "• 2 eggs" -> "- 2 eggs"
    """
    if not text:
        return ""

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _EMOJI_RE.sub(" ", text)
    text = _VARIATION_SELECTOR_RE.sub("", text)
    text = _LINK_RE.sub(" ", text)
    text = _HASHTAG_RE.sub(" ", text)
    text = _MENTION_RE.sub(" ", text)

    lines = []
    for line in text.split("\n"):
        line = re.sub("[\t\u00a0\u2000-\u200b\u3000 ]+", " ", line).strip()
        line = re.sub(r"^[-•*·]\s*", "- ", line)
        line = re.sub(r"^(\d+)[.)]\s*", r"\1. ", line)
        line = re.sub(r"\s+([,.!?;:])", r"\1", line)
        lines.append(line)

    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()
