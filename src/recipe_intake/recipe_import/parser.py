"""
Recipe Parser - Turn raw recipe text into a draft recipe.

Two paths:
- parse_recipe_text: deterministic section/line heuristics, always available
- parse_recipe_with_llm: structured extraction via Instructor, falling back
  to the heuristic parser on any failure
"""

import logging
import re

from pydantic import BaseModel, Field

from recipe_intake.llm import LLMNotConfigured, call_llm
from recipe_intake.tools.normalize import QUANTITY_PATTERN, extract_quantity_unit

from .models import DraftRecipe, Ingredient

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Imported Recipe"

# Ingredient confidence by whether a quantity was parsed
QUANTIFIED_CONFIDENCE = 0.9
UNQUANTIFIED_CONFIDENCE = 0.7

_SECTION_PATTERNS = {
    "ingredients": re.compile(r"^(?:ingredients?|what you(?:'ll| will)? need|you(?:'ll| will) need)\b", re.IGNORECASE),
    "instructions": re.compile(
        r"^(?:instructions?|directions?|method|steps?|preparation|how to make(?: it)?)\b", re.IGNORECASE
    ),
    "nutrition": re.compile(r"^nutrition(?:\s+(?:facts|info(?:rmation)?))?\b", re.IGNORECASE),
    "notes": re.compile(r"^(?:notes?|tips?|tags?|keywords?)\b", re.IGNORECASE),
}

_HEADER_RE = re.compile(r"^[#*\s]*([A-Za-z' ]{3,40}?)\s*:?\s*[*]*\s*$")
_BULLET_RE = re.compile(r"^\s*(?:[-•*·▪◦]|\[\s?\])\s*")
_NUMBERED_RE = re.compile(r"^\s*(?:step\s*)?\d+\s*(?:[.):-]\s+|[.)](?=[A-Za-z])|:\s*)", re.IGNORECASE)
_STARTS_WITH_QUANTITY_RE = re.compile(rf"^(?:{QUANTITY_PATTERN})(?:\s|$)")

_SERVINGS_RE = re.compile(r"\b(?:serves|servings|yield|yields|makes)\s*:?\s*(\d+)", re.IGNORECASE)
_PREP_RE = re.compile(r"\bprep(?:aration)?\s*time\s*:?\s*([^\n|,;]+)", re.IGNORECASE)
_COOK_RE = re.compile(r"\b(?:cook(?:ing)?|bake|baking)\s*time\s*:?\s*([^\n|,;]+)", re.IGNORECASE)
_TIME_PART_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(h(?:ou)?rs?|h\b|min(?:ute)?s?|m\b)", re.IGNORECASE)

_OPTIONAL_RE = re.compile(r"\s*(?:\(\s*optional\s*\)|,\s*optional\b|\boptional:\s*)", re.IGNORECASE)
_TO_TASTE_RE = re.compile(r"[,\s]*\bto taste\b", re.IGNORECASE)
_PAREN_RE = re.compile(r"\s*\(([^)]*)\)")
_NUTRITION_PAIR_RE = re.compile(r"^([A-Za-z][A-Za-z ]{1,30}?)\s*[:=-]\s*(.+)$")
_NUTRITION_VALUE_FIRST_RE = re.compile(
    r"^(\d+(?:\.\d+)?\s*(?:k?cal|g|mg|%)?)\s+([A-Za-z][A-Za-z ]{1,30})$", re.IGNORECASE
)


# =============================================================================
# Heuristic parser
# =============================================================================


def parse_recipe_text(raw_text: str) -> DraftRecipe:
    """
    Parse raw recipe text with section and line heuristics.

    Recognizes headers (Ingredients / Instructions / Directions / Method /
    Steps / Nutrition), bullets and numbered steps, "Serves N", prep and
    cook times. Text without headers is split by line shape: quantity-led
    and bulleted lines are ingredients, numbered and sentence-like lines
    are steps.
    """
    lines = [line.strip() for line in (raw_text or "").splitlines()]
    lines = [line for line in lines if line]

    servings = _find_servings(raw_text or "")
    prep_minutes = _find_minutes(_PREP_RE, raw_text or "")
    cook_minutes = _find_minutes(_COOK_RE, raw_text or "")

    title: str | None = None
    description_lines: list[str] = []
    ingredient_lines: list[str] = []
    instruction_lines: list[str] = []
    nutrition: dict[str, str] = {}
    unsectioned: list[str] = []

    section: str | None = None
    for line in lines:
        header, inline = _match_header(line)
        if header:
            section = header
            if inline:
                _add_to_section(section, inline, ingredient_lines, instruction_lines, nutrition)
            continue

        if _is_metadata_line(line):
            continue

        if section is None:
            if title is None and not _BULLET_RE.match(line) and not _NUMBERED_RE.match(line):
                title = _clean_title(line)
            else:
                unsectioned.append(line)
            continue

        if section == "notes":
            continue

        _add_to_section(section, line, ingredient_lines, instruction_lines, nutrition)

    if not ingredient_lines and not instruction_lines:
        # No headers: sort free lines by shape
        ingredient_lines, instruction_lines, description_lines = _split_by_shape(unsectioned)
    else:
        for line in unsectioned:
            if _BULLET_RE.match(line) or _STARTS_WITH_QUANTITY_RE.match(line):
                ingredient_lines.append(_strip_marker(line))
            elif _NUMBERED_RE.match(line):
                instruction_lines.append(_strip_marker(line))
            else:
                description_lines.append(line)

    ingredients = [ing for ing in (parse_ingredient_line(line) for line in ingredient_lines) if ing is not None]

    return DraftRecipe(
        title=title or DEFAULT_TITLE,
        description=" ".join(description_lines) or None,
        ingredients=ingredients,
        instructions=[step for step in instruction_lines if step],
        servings=servings,
        prep_time_minutes=prep_minutes,
        cook_time_minutes=cook_minutes,
        nutrition=nutrition,
        raw_ingredient_lines=ingredient_lines,
    )


def parse_ingredient_line(line: str) -> Ingredient | None:
    """
    Parse one ingredient line.

    Examples:
        "2 cups flour" -> Ingredient(name="flour", quantity=2.0, unit="cup")
        "1 onion, diced" -> Ingredient(name="onion", quantity=1.0, notes="diced")
        "parsley (optional)" -> Ingredient(name="parsley", optional=True)
        "salt to taste" -> Ingredient(name="salt", notes="to taste")
    """
    text = _strip_marker(line).strip()
    if not text:
        return None

    optional = bool(_OPTIONAL_RE.search(text))
    text = _OPTIONAL_RE.sub("", text).strip()

    notes: list[str] = []
    if _TO_TASTE_RE.search(text):
        notes.append("to taste")
        text = _TO_TASTE_RE.sub("", text).strip()

    quantity, unit, remaining = extract_quantity_unit(text)

    for paren in _PAREN_RE.findall(remaining):
        if paren.strip():
            notes.insert(0, paren.strip())
    remaining = _PAREN_RE.sub("", remaining).strip()

    if "," in remaining:
        name, _, extra = remaining.partition(",")
        if extra.strip():
            notes.insert(0, extra.strip())
        remaining = name.strip()

    name = remaining.strip(" .;:-")
    if not name:
        return None

    return Ingredient(
        name=name,
        quantity=quantity,
        unit=unit,
        notes=", ".join(notes) or None,
        optional=optional,
        confidence=QUANTIFIED_CONFIDENCE if quantity else UNQUANTIFIED_CONFIDENCE,
    )


def _match_header(line: str) -> tuple[str | None, str | None]:
    """Return (section, inline content) when the line opens a section."""
    bare = line.strip().lstrip("#*").strip()
    for section, pattern in _SECTION_PATTERNS.items():
        match = pattern.match(bare)
        if not match:
            continue
        rest = bare[match.end() :]
        # "Ingredients:" / "INSTRUCTIONS" / "Nutrition: 200 calories"
        if not rest.strip(" *"):
            return section, None
        if rest.lstrip().startswith(":"):
            inline = rest.lstrip()[1:].strip(" *")
            return section, inline or None
        if _HEADER_RE.match(line) and len(bare) <= 40 and not _NUMBERED_RE.match(line):
            return section, None
    return None, None


def _add_to_section(
    section: str,
    line: str,
    ingredient_lines: list[str],
    instruction_lines: list[str],
    nutrition: dict[str, str],
) -> None:
    if section == "ingredients":
        ingredient_lines.append(_strip_marker(line))
    elif section == "instructions":
        step = _strip_marker(line)
        if step:
            instruction_lines.append(step)
    elif section == "nutrition":
        for part in re.split(r"[|;]|,\s(?=[A-Za-z\d])", _strip_marker(line)):
            _add_nutrition(part.strip(), nutrition)


def _add_nutrition(text: str, nutrition: dict[str, str]) -> None:
    if not text:
        return
    match = _NUTRITION_PAIR_RE.match(text)
    if match:
        nutrition[match.group(1).strip().lower()] = match.group(2).strip()
        return
    match = _NUTRITION_VALUE_FIRST_RE.match(text)
    if match:
        nutrition[match.group(2).strip().lower()] = match.group(1).strip()


def _split_by_shape(lines: list[str]) -> tuple[list[str], list[str], list[str]]:
    ingredients: list[str] = []
    instructions: list[str] = []
    description: list[str] = []

    for line in lines:
        stripped = _strip_marker(line)
        if _NUMBERED_RE.match(line):
            instructions.append(stripped)
        elif _STARTS_WITH_QUANTITY_RE.match(stripped) and len(stripped.split()) <= 10:
            ingredients.append(stripped)
        elif _BULLET_RE.match(line) and len(stripped.split()) <= 8:
            ingredients.append(stripped)
        elif len(stripped.split()) >= 5 and re.search(r"[.!]$", stripped):
            instructions.append(stripped)
        else:
            description.append(stripped)

    return ingredients, instructions, description


def _strip_marker(line: str) -> str:
    line = _BULLET_RE.sub("", line, count=1)
    return _NUMBERED_RE.sub("", line, count=1).strip()


def _clean_title(line: str) -> str:
    return line.strip().strip("#*").strip() or DEFAULT_TITLE


def _is_metadata_line(line: str) -> bool:
    """Servings / time lines that aren't content of any section."""
    if not (_SERVINGS_RE.search(line) or _PREP_RE.search(line) or _COOK_RE.search(line)):
        return False
    return len(line.split()) <= 12 and not _NUMBERED_RE.match(line)


def _find_servings(text: str) -> int | None:
    match = _SERVINGS_RE.search(text)
    return int(match.group(1)) if match else None


def _find_minutes(pattern: re.Pattern, text: str) -> int | None:
    """
    Parse a labelled duration to minutes.

    Examples:
        "Prep time: 15 minutes" -> 15
        "Cook time: 1 hr 30 min" -> 90
    """
    match = pattern.search(text)
    if not match:
        return None

    total = 0.0
    for amount, unit in _TIME_PART_RE.findall(match.group(1)):
        value = float(amount)
        total += value * 60 if unit.lower().startswith("h") else value

    return int(total) or None


# =============================================================================
# LLM parser
# =============================================================================


class ParsedIngredientModel(BaseModel):
    name: str = Field(description="Canonical ingredient name, no quantity or prep")
    quantity: float | None = Field(default=None, description="Numeric amount, fractions as decimals")
    unit: str | None = None
    notes: str | None = Field(default=None, description="Prep instructions and qualifiers")
    is_optional: bool = False


class ParsedRecipeModel(BaseModel):
    title: str
    description: str | None = None
    servings: int | None = None
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    ingredients: list[ParsedIngredientModel] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    nutrition: dict[str, str] = Field(default_factory=dict)


PARSER_SYSTEM_PROMPT = """You convert raw recipe text into structured data.

The text may come from a web page, a social media caption, or OCR of a photo,
so expect noise: stray symbols, broken lines, hashtags.

Rules:
- Extract only what the text says. Never invent ingredients, steps or amounts.
- ingredients: one entry per ingredient line. Convert fractions (1/2 -> 0.5).
  Keep prep words ("minced", "diced") in notes, not in the name.
- is_optional is true ONLY when the text explicitly says optional or "if desired".
  "to taste" does NOT mean optional.
- instructions: one entry per step, without numbering.
- nutrition: label -> value as written (e.g. "calories": "250").
- If there is no title, use a short descriptive one."""


async def parse_recipe_with_llm(raw_text: str) -> DraftRecipe:
    """
    Parse raw text with the structured LLM client.

    Falls back to parse_recipe_text when no key is configured or the call
    fails for any reason.
    """
    heuristic = parse_recipe_text(raw_text)

    try:
        parsed = await call_llm(
            response_model=ParsedRecipeModel,
            system_prompt=PARSER_SYSTEM_PROMPT,
            user_prompt=f"Recipe text:\n\n{raw_text}",
            stage="parser",
            complexity="medium",
        )
    except LLMNotConfigured:
        logger.info("No LLM configured, using heuristic recipe parser")
        return heuristic
    except Exception as e:
        logger.warning(f"LLM recipe parsing failed, using heuristic parser: {e}")
        return heuristic

    ingredients = [
        Ingredient(
            name=item.name.strip(),
            quantity=item.quantity,
            unit=item.unit,
            notes=item.notes,
            optional=item.is_optional,
            confidence=QUANTIFIED_CONFIDENCE if item.quantity else UNQUANTIFIED_CONFIDENCE,
        )
        for item in parsed.ingredients
        if item.name and item.name.strip()
    ]

    if not ingredients and not parsed.instructions:
        logger.warning("LLM parser returned an empty recipe, using heuristic parser")
        return heuristic

    return DraftRecipe(
        title=parsed.title.strip() or heuristic.title,
        description=parsed.description or heuristic.description,
        ingredients=ingredients,
        instructions=[step.strip() for step in parsed.instructions if step.strip()],
        servings=parsed.servings or heuristic.servings,
        prep_time_minutes=parsed.prep_time_minutes or heuristic.prep_time_minutes,
        cook_time_minutes=parsed.cook_time_minutes or heuristic.cook_time_minutes,
        nutrition=parsed.nutrition or heuristic.nutrition,
        raw_ingredient_lines=heuristic.raw_ingredient_lines,
    )
