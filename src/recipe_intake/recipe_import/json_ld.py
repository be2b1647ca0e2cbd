"""JSON-LD/Schema.org and microdata recipe extraction."""

import logging

import extruct

from .models import StructuredRecipe
from .normalizer import (
    extract_author,
    extract_image_url,
    extract_instructions_text,
    extract_keywords,
    extract_nutrition,
    normalize_ingredients,
    parse_duration,
    parse_servings,
)

logger = logging.getLogger(__name__)


def extract_structured_recipe(html: str, base_url: str) -> StructuredRecipe | None:
    """
    Extract a recipe from Schema.org markup embedded in a page.

    JSON-LD is preferred; HTML microdata (itemprop) is the fallback.

    Returns:
        StructuredRecipe, or None when the page has no usable Recipe node
    """
    try:
        data = extruct.extract(html, base_url=base_url, syntaxes=["json-ld", "microdata"])
    except Exception as e:
        # extruct surfaces lxml and json errors for malformed pages
        logger.debug(f"Structured data parsing failed for {base_url}: {e}")
        return None

    recipe_data = _find_recipe_in_json_ld(data.get("json-ld", []))
    if not recipe_data:
        recipe_data = _find_recipe_in_microdata(data.get("microdata", []))

    if not recipe_data:
        return None

    name = recipe_data.get("name")
    if isinstance(name, list):
        name = name[0] if name else None
    if not isinstance(name, str) or not name.strip():
        logger.debug(f"Recipe data found but missing name on {base_url}")
        return None

    ingredients = normalize_ingredients(
        recipe_data.get("recipeIngredient") or recipe_data.get("ingredients") or []
    )
    instructions = extract_instructions_text(recipe_data.get("recipeInstructions", []))

    if not ingredients and not instructions:
        return None

    description = recipe_data.get("description")

    return StructuredRecipe(
        name=name.strip(),
        description=description.strip() if isinstance(description, str) and description.strip() else None,
        image_url=extract_image_url(recipe_data.get("image")),
        ingredients=ingredients,
        instructions=instructions,
        prep_time_minutes=parse_duration(recipe_data.get("prepTime")),
        cook_time_minutes=parse_duration(recipe_data.get("cookTime")),
        servings=parse_servings(recipe_data.get("recipeYield")),
        keywords=extract_keywords(recipe_data),
        author=extract_author(recipe_data.get("author")),
        nutrition=extract_nutrition(recipe_data.get("nutrition")),
    )


def _is_recipe_type(item_type) -> bool:
    if isinstance(item_type, list):
        return any(_is_recipe_type(t) for t in item_type)
    return isinstance(item_type, str) and item_type.rsplit("/", 1)[-1] == "Recipe"


def _find_recipe_in_json_ld(json_ld_items: list) -> dict | None:
    """Find Recipe schema in JSON-LD data, searching @graph and nested lists."""
    for item in json_ld_items:
        if isinstance(item, list):
            found = _find_recipe_in_json_ld(item)
            if found:
                return found
            continue

        if not isinstance(item, dict):
            continue

        # Direct Recipe type
        if _is_recipe_type(item.get("@type", "")):
            return item

        # Recipe inside @graph
        graph = item.get("@graph", [])
        if isinstance(graph, list):
            found = _find_recipe_in_json_ld(graph)
            if found:
                return found

        # WebPage wrapping the recipe
        main_entity = item.get("mainEntity")
        if isinstance(main_entity, dict) and _is_recipe_type(main_entity.get("@type", "")):
            return main_entity

    return None


def _find_recipe_in_microdata(microdata_items: list) -> dict | None:
    """Find Recipe schema in microdata, flattening nested itemscopes."""
    for item in microdata_items:
        if isinstance(item, dict) and _is_recipe_type(item.get("type", "")):
            return _flatten_microdata(item.get("properties", {}))
    return None


def _flatten_microdata(value):
    """Turn extruct's {type, properties} nesting into plain JSON-LD-like dicts."""
    if isinstance(value, list):
        return [_flatten_microdata(v) for v in value]
    if isinstance(value, dict):
        if "properties" in value:
            return _flatten_microdata(value["properties"])
        return {k: _flatten_microdata(v) for k, v in value.items()}
    return value
