"""Tests for the HTTP API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from recipe_intake.ocr.models import OcrMetadata, OcrResult
from recipe_intake.pipeline import RecipeImporter
from recipe_intake.recipe_import.errors import UNREADABLE_INPUT_MESSAGE
from recipe_intake.web.app import app
from recipe_intake.web.recipe_import_routes import get_importer


class FakeOcrEngine:
    async def recognize(self, image_data, options=None):
        return OcrResult(
            text="Toast\n1 slice bread\n1 tbsp butter\n1. Toast the bread and spread with butter.",
            confidence=0.88,
            metadata=OcrMetadata(provider="fake", processing_time_ms=3, image_size=(800, 600)),
        )


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _offline_importer() -> RecipeImporter:
    def refuse(request):
        raise httpx.ConnectError("offline", request=request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    return RecipeImporter(http_client=http_client, ocr_engine=FakeOcrEngine())


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "recipe-intake"


class TestClassifyEndpoint:
    def test_video_link(self, client):
        response = client.post("/api/recipes/classify", json={"input": "https://www.tiktok.com/@chef/video/123"})

        assert response.status_code == 200
        body = response.json()
        assert body["type"] == "url"
        assert body["metadata"]["platform"] == "tiktok"
        assert body["is_valid"] is True

    def test_short_text(self, client):
        body = client.post("/api/recipes/classify", json={"input": "eggs"}).json()
        assert body["type"] == "text"
        assert body["is_valid"] is False
        assert body["errors"]


class TestImportEndpoint:
    def test_import_text(self, client, sample_recipe_text):
        response = client.post("/api/recipes/import", json={"input": sample_recipe_text, "use_ai": False})

        assert response.status_code == 200
        body = response.json()
        assert body["draft"]["title"] == "Garlic Butter Pasta"
        assert body["recovery"]["confidence"] == 0.92
        assert body["recovery"]["recovered_ingredients"][-1]["name"] == "pepper"
        assert body["recovery"]["recovered_ingredients"][-1]["inferred"] is True

    def test_invalid_input_is_400(self, client):
        response = client.post("/api/recipes/import", json={"input": "eggs"})

        assert response.status_code == 400
        assert response.json()["detail"]["errors"] == ["Text is too short to contain a meaningful recipe"]

    def test_unreachable_url_is_422(self, client):
        app.dependency_overrides[get_importer] = _offline_importer

        response = client.post("/api/recipes/import", json={"input": "https://example.com/recipe-x"})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["message"] == UNREADABLE_INPUT_MESSAGE
        assert [a["method"] for a in detail["attempts"]] == ["structured-data", "html-scraping", "reader-proxy"]

    def test_image_upload(self, client, png_bytes):
        app.dependency_overrides[get_importer] = _offline_importer

        response = client.post(
            "/api/recipes/import/image",
            files={"file": ("card.png", png_bytes, "image/png")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["detection"]["type"] == "image"
        assert body["extraction"]["extraction_methods"] == ["image-ocr"]
        assert body["draft"]["title"] == "Toast"
