"""Recipe import: classify raw input, extract recipe text, parse a draft."""

from .detection import classify, get_platform_hints, validate_input
from .errors import ExtractionFailed, InputRejected, OcrFailed, RecipeImportError
from .extractor import ContentExtractor, ExtractionStrategy
from .models import (
    BinaryFileRef,
    DetectionResult,
    DraftRecipe,
    ExtractionMethod,
    ExtractionResult,
    Ingredient,
    InputType,
)
from .parser import parse_recipe_text, parse_recipe_with_llm

__all__ = [
    "classify",
    "get_platform_hints",
    "validate_input",
    "ExtractionFailed",
    "InputRejected",
    "OcrFailed",
    "RecipeImportError",
    "ContentExtractor",
    "ExtractionStrategy",
    "BinaryFileRef",
    "DetectionResult",
    "DraftRecipe",
    "ExtractionMethod",
    "ExtractionResult",
    "Ingredient",
    "InputType",
    "parse_recipe_text",
    "parse_recipe_with_llm",
]
