"""
Recipe Intake - end-to-end import pipeline.

classify -> validate -> extract -> parse -> recover, bundled into one
ImportedRecipe for the CLI and the web layer.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

import httpx

from recipe_intake.config import settings
from recipe_intake.llm import call_llm_chat
from recipe_intake.ocr import OcrEngine, OcrOptions
from recipe_intake.recipe_import import (
    BinaryFileRef,
    ContentExtractor,
    DetectionResult,
    DraftRecipe,
    InputRejected,
    classify,
    get_platform_hints,
    parse_recipe_text,
    parse_recipe_with_llm,
    validate_input,
)
from recipe_intake.recipe_import.models import ExtractionMetadata
from recipe_intake.recovery import IngredientRecovery, RecoveryOptions, RecoveryResult
from recipe_intake.recovery.recovery import CompleteFn

logger = logging.getLogger(__name__)

LOW_RECOVERY_CONFIDENCE = 0.5


def _plain(items: list[tuple[str, Any]]) -> dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}


@dataclass
class ImportedRecipe:
    """Everything one import produced, ready for review."""

    detection: DetectionResult
    extraction: ExtractionMetadata
    draft: DraftRecipe
    recovery: RecoveryResult
    fallback_used: bool = False
    warnings: list[str] = field(default_factory=list)
    hints: list[str] = field(default_factory=list)

    @property
    def ingredients(self):
        return self.recovery.recovered_ingredients

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict; enums become their values."""
        return asdict(self, dict_factory=_plain)


class RecipeImporter:
    """
    Runs the full pipeline for one input at a time.

    Usage:
        importer = RecipeImporter()
        imported = await importer.import_recipe("https://example.com/pasta")
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        ocr_engine: OcrEngine | None = None,
        complete: CompleteFn | None = None,
        use_llm_parser: bool | None = None,
    ):
        # Only an injected completion is shared with vision OCR
        ocr_engine = ocr_engine or OcrEngine(complete=complete)
        if complete is None and settings.ai_enabled:
            complete = call_llm_chat
        if use_llm_parser is None:
            use_llm_parser = settings.use_llm_parser and settings.ai_enabled

        self._extractor = ContentExtractor(
            http_client=http_client,
            ocr_engine=ocr_engine,
        )
        self._recovery = IngredientRecovery(complete=complete)
        self._use_llm_parser = use_llm_parser

    async def import_recipe(
        self,
        raw_input: str | BinaryFileRef,
        *,
        recovery_options: RecoveryOptions | None = None,
        ocr_options: OcrOptions | None = None,
    ) -> ImportedRecipe:
        """
        Import one recipe.

        Raises:
            InputRejected: the input failed validation
            ExtractionFailed: nothing readable came out of the input
        """
        detection = classify(raw_input)
        logger.info(f"Classified input as {detection.type.value} ({detection.confidence})")

        validation = validate_input(raw_input, detection)
        if not validation.is_valid:
            logger.info(f"Input rejected: {validation.errors}")
            raise InputRejected(validation.errors)

        extraction = await self._extractor.extract(raw_input, detection, ocr_options=ocr_options)

        if self._use_llm_parser:
            draft = await parse_recipe_with_llm(extraction.raw_text)
        else:
            draft = parse_recipe_text(extraction.raw_text)

        recovery = await self._recovery.recover(
            draft.ingredients,
            draft.instructions,
            extraction.raw_text,
            recovery_options,
        )

        warnings = [*validation.warnings, *extraction.warnings]
        if not draft.ingredients:
            warnings.append("No ingredients were found - add them before saving")
        if recovery.confidence < LOW_RECOVERY_CONFIDENCE:
            warnings.append("Some ingredients may be missing or incorrect - review before saving")

        logger.info(
            f"Imported '{draft.title}': {len(recovery.recovered_ingredients)} ingredients, "
            f"confidence {recovery.confidence}"
        )

        return ImportedRecipe(
            detection=detection,
            extraction=extraction.metadata,
            draft=draft,
            recovery=recovery,
            fallback_used=extraction.fallback_used,
            warnings=warnings,
            hints=get_platform_hints(detection),
        )
