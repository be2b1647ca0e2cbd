"""
End-to-end tests for the import pipeline.

No API key is configured in tests, so parsing is heuristic and recovery
runs without AI inference.
"""

import asyncio

import httpx
import pytest

from recipe_intake.ocr.models import OcrMetadata, OcrResult
from recipe_intake.pipeline import RecipeImporter
from recipe_intake.recipe_import import BinaryFileRef, InputRejected, InputType


def _run(coro):
    """Helper to run async code in tests."""
    return asyncio.run(coro)


class FakeOcrEngine:
    async def recognize(self, image_data, options=None):
        return OcrResult(
            text="Toast\n1 slice bread\n1 tbsp butter\n1. Toast the bread and spread with butter.",
            confidence=0.88,
            metadata=OcrMetadata(provider="fake", processing_time_ms=3, image_size=(800, 600)),
        )


class TestTextImport:
    def test_full_import(self, sample_recipe_text):
        imported = _run(RecipeImporter().import_recipe(sample_recipe_text))

        assert imported.detection.type == InputType.TEXT
        assert imported.extraction.extraction_methods == ["text-input"]
        assert imported.draft.title == "Garlic Butter Pasta"
        assert len(imported.draft.ingredients) == 5

        # Pepper is only in the steps, so recovery adds it
        assert [i.name for i in imported.ingredients] == [
            "spaghetti",
            "butter",
            "garlic",
            "parmesan",
            "salt",
            "pepper",
        ]
        pepper = imported.ingredients[-1]
        assert pepper.inferred is True
        assert (pepper.quantity, pepper.unit) == (0.5, "tsp")

        assert imported.recovery.confidence == 0.92
        assert imported.warnings == []
        assert imported.hints == []
        assert imported.fallback_used is False

    def test_draft_is_untouched_by_recovery(self, sample_recipe_text):
        imported = _run(RecipeImporter().import_recipe(sample_recipe_text))
        assert not any(i.inferred for i in imported.draft.ingredients)

    def test_short_text_rejected(self):
        with pytest.raises(InputRejected) as exc_info:
            _run(RecipeImporter().import_recipe("eggs"))
        assert exc_info.value.errors == ["Text is too short to contain a meaningful recipe"]

    def test_no_ingredients_warns(self):
        text = "Just boil it for a while and then eat it with friends."
        imported = _run(RecipeImporter().import_recipe(text))
        assert "No ingredients were found - add them before saving" in imported.warnings
        assert "Some ingredients may be missing or incorrect - review before saving" in imported.warnings

    def test_to_dict_uses_enum_values(self, sample_recipe_text):
        data = _run(RecipeImporter().import_recipe(sample_recipe_text)).to_dict()

        assert data["detection"]["type"] == "text"
        assert data["recovery"]["missing_ingredients"][0]["name"] == "pepper"
        assert data["draft"]["ingredients"][0]["name"] == "spaghetti"
        assert data["extraction"]["source"] == "text"


class TestOtherSources:
    def test_url_import(self, recipe_page_html):
        async def run():
            transport = httpx.MockTransport(lambda request: httpx.Response(200, text=recipe_page_html))
            async with httpx.AsyncClient(transport=transport) as client:
                return await RecipeImporter(http_client=client).import_recipe("https://example.com/pancakes")

        imported = _run(run())

        assert imported.extraction.extraction_methods == ["structured-data"]
        assert imported.draft.title == "Best Pancakes"
        assert imported.draft.description == "Fluffy weekend pancakes."
        assert imported.draft.servings == 4
        assert [i.name for i in imported.ingredients] == ["flour", "eggs", "milk", "sugar"]
        assert imported.draft.nutrition == {"calories": "320 calories"}
        assert imported.recovery.confidence == 0.94

    def test_image_import(self, png_bytes):
        upload = BinaryFileRef(name="card.png", mime_type="image/png", size=len(png_bytes), data=png_bytes)
        imported = _run(RecipeImporter(ocr_engine=FakeOcrEngine()).import_recipe(upload))

        assert imported.detection.type == InputType.IMAGE
        assert imported.extraction.extraction_methods == ["image-ocr"]
        assert imported.draft.title == "Toast"
        assert [i.name for i in imported.ingredients] == ["bread", "butter"]
        assert imported.draft.instructions == ["Toast the bread and spread with butter."]
