"""API endpoints for importing recipes from links, text and images."""

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from recipe_intake.pipeline import RecipeImporter
from recipe_intake.recipe_import import (
    BinaryFileRef,
    ExtractionFailed,
    InputRejected,
    classify,
    get_platform_hints,
    validate_input,
)
from recipe_intake.recovery import RecoveryOptions

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recipe-import"])


# =============================================================================
# Request/Response Models
# =============================================================================


class ImportRequest(BaseModel):
    """A recipe link or pasted recipe text."""

    input: str
    use_ai: bool = True
    max_inferred_ingredients: int = 5


class ClassifyRequest(BaseModel):
    input: str


class ClassifyResponse(BaseModel):
    type: str
    confidence: float
    metadata: dict[str, Any]
    is_valid: bool
    errors: list[str] = []
    warnings: list[str] = []
    hints: list[str] = []


# =============================================================================
# Dependencies
# =============================================================================


def get_importer() -> RecipeImporter:
    """One importer per request; no state is shared between imports."""
    return RecipeImporter()


async def _run_import(importer: RecipeImporter, raw_input: str | BinaryFileRef, options: RecoveryOptions) -> dict:
    try:
        imported = await importer.import_recipe(raw_input, recovery_options=options)
    except InputRejected as e:
        logger.info(f"Import rejected: {e.errors}")
        raise HTTPException(status_code=400, detail={"message": "Invalid input", "errors": e.errors})
    except ExtractionFailed as e:
        logger.warning(f"Import failed: {e} ({len(e.attempts)} attempts)")
        raise HTTPException(
            status_code=422,
            detail={
                "message": e.user_message,
                "attempts": [asdict(attempt) for attempt in e.attempts],
            },
        )
    return imported.to_dict()


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/recipes/import")
async def import_recipe(
    req: ImportRequest,
    importer: RecipeImporter = Depends(get_importer),
) -> dict[str, Any]:
    """
    Import a recipe from a URL or pasted text.

    Returns the draft recipe, recovered ingredients, confidence, warnings
    and hints for user review before saving.
    """
    logger.info(f"Import request: {req.input[:80]!r}")
    options = RecoveryOptions(
        use_ai_for_inference=req.use_ai,
        max_inferred_ingredients=req.max_inferred_ingredients,
    )
    return await _run_import(importer, req.input, options)


@router.post("/recipes/import/image")
async def import_recipe_image(
    file: UploadFile = File(...),
    importer: RecipeImporter = Depends(get_importer),
) -> dict[str, Any]:
    """Import a recipe from an uploaded photo or screenshot."""
    data = await file.read()
    logger.info(f"Image import request: {file.filename} ({len(data)} bytes)")

    upload = BinaryFileRef(name=file.filename, mime_type=file.content_type, size=len(data), data=data)
    return await _run_import(importer, upload, RecoveryOptions())


@router.post("/recipes/classify", response_model=ClassifyResponse)
async def classify_input(req: ClassifyRequest) -> ClassifyResponse:
    """Classify and validate an input without importing it."""
    detection = classify(req.input)
    validation = validate_input(req.input, detection)

    return ClassifyResponse(
        type=detection.type.value,
        confidence=detection.confidence,
        metadata={k: v for k, v in asdict(detection.metadata).items() if v is not None},
        is_valid=validation.is_valid,
        errors=validation.errors,
        warnings=validation.warnings,
        hints=get_platform_hints(detection),
    )
