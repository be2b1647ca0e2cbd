"""Site scrapers: recipe-scrapers for known sites, BeautifulSoup heuristics for the rest."""

import logging
import re

from bs4 import BeautifulSoup
from recipe_scrapers import scrape_html

from .models import StructuredRecipe
from .normalizer import (
    extract_image_url,
    extract_instructions_text,
    normalize_ingredients,
    parse_duration,
    parse_servings,
)

logger = logging.getLogger(__name__)

INGREDIENT_SELECTORS = [
    '[itemprop="recipeIngredient"]',
    ".recipe-ingredient",
    ".wprm-recipe-ingredient",
    ".ingredients li",
    "li.ingredient",
    ".ingredient-list li",
]

INSTRUCTION_SELECTORS = [
    '[itemprop="recipeInstructions"]',
    ".recipe-instruction",
    ".wprm-recipe-instruction",
    ".instructions li",
    ".method li",
    ".directions li",
    ".recipe-directions li",
]


def extract_with_scraper(html: str, url: str) -> StructuredRecipe | None:
    """
    Extract recipe using recipe-scrapers library.

    This library has custom parsers for 400+ recipe sites. Unsupported
    sites and pages without a recipe return None.
    """
    try:
        scraper = scrape_html(html, org_url=url)

        name = scraper.title()
        if not name:
            return None

        ingredients = normalize_ingredients(_safe_call(scraper.ingredients))
        instructions = extract_instructions_text(_safe_call(scraper.instructions_list))

    except Exception as e:
        # recipe-scrapers throws various exceptions for unsupported sites
        logger.debug(f"Scraper failed for {url}: {e}")
        return None

    if not ingredients and not instructions:
        return None

    return StructuredRecipe(
        name=name.strip(),
        description=_safe_call(scraper.description),
        image_url=extract_image_url(_safe_call(scraper.image)),
        ingredients=ingredients,
        instructions=instructions,
        prep_time_minutes=parse_duration(_safe_call(scraper.prep_time)),
        cook_time_minutes=parse_duration(_safe_call(scraper.cook_time)),
        servings=parse_servings(_safe_call(scraper.yields)),
        author=_safe_call(scraper.author),
    )


def extract_with_heuristics(html: str) -> StructuredRecipe | None:
    """
    Extract recipe fields from common markup conventions.

    Title comes from h1, og:title, then <title>. Ingredient and instruction
    items come from the first selector that matches anything.

    Returns:
        StructuredRecipe when list items were found, or when a title and
        a description were found; otherwise None
    """
    soup = BeautifulSoup(html, "lxml")

    title = _text_of(soup.find("h1")) or _meta(soup, "og:title") or _text_of(soup.title)
    description = _meta(soup, "og:description") or _meta(soup, "description", attr="name")
    image_url = _meta(soup, "og:image")

    ingredients = _select_texts(soup, INGREDIENT_SELECTORS)
    instructions = _select_texts(soup, INSTRUCTION_SELECTORS)

    if not ingredients and not instructions and not (title and description):
        return None

    author_tag = soup.select_one('[itemprop="author"]')

    return StructuredRecipe(
        name=title or "Imported Recipe",
        description=description,
        image_url=extract_image_url(image_url),
        ingredients=ingredients,
        instructions=instructions,
        author=_text_of(author_tag),
    )


def _safe_call(func):
    """Safely call a scraper method, returning None on error."""
    try:
        return func()
    except Exception:
        return None


def _text_of(tag) -> str | None:
    if tag is None:
        return None
    text = " ".join(tag.get_text(" ", strip=True).split())
    return text or None


def _meta(soup: BeautifulSoup, key: str, attr: str = "property") -> str | None:
    tag = soup.find("meta", attrs={attr: key})
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def _select_texts(soup: BeautifulSoup, selectors: list[str]) -> list[str]:
    for selector in selectors:
        texts = [t for t in (_text_of(el) for el in soup.select(selector)) if t]
        if texts:
            return [re.sub(r"^\d+[.)]\s+", "", t) for t in texts]
    return []
