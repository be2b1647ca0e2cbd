"""
Tests for the OCR engine.

Tests cover:
- Preprocessing steps and their order
- Provider ordering, fallback, timeouts and empty results
- Text cleanup and quality validation
- Tesseract output reconstruction
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from recipe_intake.ocr import OcrEngine, OcrOptions, PreprocessOptions
from recipe_intake.ocr.cleanup import clean_ocr_text, validate_ocr_result
from recipe_intake.ocr.models import OcrMetadata, OcrResult, ProviderText
from recipe_intake.ocr.preprocessing import preprocess_image
from recipe_intake.ocr.providers import OcrProvider, VisionProvider, tesseract_data_to_text
from recipe_intake.recipe_import.errors import ExtractionFailed, OcrFailed


def _run(coro):
    """Helper to run async code in tests."""
    return asyncio.run(coro)


class FakeProvider(OcrProvider):
    """Scriptable provider: returns text, raises, or hangs."""

    def __init__(self, name, accuracy, text="", confidence=80.0, on_device=False, available=True, error=None, delay=0.0):
        self._name = name
        self._accuracy = accuracy
        self._on_device = on_device
        self._available = available
        self.text = text
        self.confidence = confidence
        self.error = error
        self.delay = delay
        self.calls = 0

    @property
    def name(self):
        return self._name

    @property
    def accuracy(self):
        return self._accuracy

    @property
    def on_device(self):
        return self._on_device

    def is_available(self):
        return self._available

    async def recognize(self, image, language):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return ProviderText(text=self.text, confidence=self.confidence)


def _engine(*providers):
    return OcrEngine(providers=list(providers))


class TestPreprocessing:
    """Pillow preprocessing pipeline."""

    def test_all_steps_in_order(self, png_bytes):
        image = preprocess_image(png_bytes)
        assert image.steps == ["contrast-enhancement", "denoising", "sharpening", "resizing"]
        # 400x300 is upscaled so the short side reaches 1000
        assert min(image.size) == 1000
        assert image.mime_type == "image/png"

    def test_resize_recorded_when_in_band(self, png_factory):
        image = preprocess_image(png_factory(1200, 1500), PreprocessOptions(enhance_contrast=False, denoise=False))
        assert image.steps == ["sharpening", "resizing"]
        assert image.size == (1200, 1500)

    def test_large_image_downscaled(self, png_factory):
        image = preprocess_image(png_factory(3000, 4000), PreprocessOptions(denoise=False, sharpen=False))
        assert image.size == (2000, 2667)

    def test_disabled_steps_skipped(self, png_bytes):
        options = PreprocessOptions(enhance_contrast=False, denoise=False, sharpen=False, resize=False)
        image = preprocess_image(png_bytes, options)
        assert image.steps == []
        assert image.size == (400, 300)

    def test_garbage_bytes(self):
        image = preprocess_image(b"definitely not an image")
        assert image.steps == ["preprocessing-failed"]
        assert image.data == b"definitely not an image"
        assert image.size == (0, 0)


class TestProviderOrder:
    def test_auto_orders_by_accuracy(self):
        low = FakeProvider("local", 0.7, on_device=True)
        high = FakeProvider("cloud", 0.9)
        engine = _engine(low, high)
        assert [p.name for p in engine.provider_order(OcrOptions())] == ["cloud", "local"]

    def test_unavailable_providers_skipped(self):
        engine = _engine(FakeProvider("cloud", 0.9, available=False), FakeProvider("local", 0.7, on_device=True))
        assert [p.name for p in engine.provider_order(OcrOptions())] == ["local"]

    def test_named_provider_without_fallbacks_keeps_terminal(self):
        engine = _engine(
            FakeProvider("cloud", 0.9),
            FakeProvider("other", 0.8),
            FakeProvider("local", 0.7, on_device=True),
        )
        options = OcrOptions(provider="other", allow_fallback_providers=False)
        assert [p.name for p in engine.provider_order(options)] == ["other", "local"]

    def test_named_provider_with_fallbacks(self):
        engine = _engine(
            FakeProvider("cloud", 0.9),
            FakeProvider("other", 0.8),
            FakeProvider("local", 0.7, on_device=True),
        )
        options = OcrOptions(provider="local")
        assert [p.name for p in engine.provider_order(options)] == ["local", "cloud", "other"]

    def test_register_provider_replaces_by_name(self):
        engine = _engine(FakeProvider("cloud", 0.9))
        engine.register_provider(FakeProvider("cloud", 0.5))
        assert [p.accuracy for p in engine.providers] == [0.5]

    def test_vision_unavailable_without_key(self):
        assert VisionProvider().is_available() is False
        assert VisionProvider(complete=AsyncMock(return_value="text")).is_available() is True


class TestRecognize:
    """Engine fallback behaviour."""

    def test_first_provider_wins(self, png_bytes):
        cloud = FakeProvider("cloud", 0.9, text="2 cups F|our", confidence=90)
        local = FakeProvider("local", 0.7, text="unused", on_device=True)

        result = _run(_engine(cloud, local).recognize(png_bytes))

        assert result.text == "2 cups Flour"
        assert result.confidence == 0.9
        assert result.metadata.provider == "cloud"
        assert result.metadata.preprocessing_applied == [
            "contrast-enhancement",
            "denoising",
            "sharpening",
            "resizing",
        ]
        assert local.calls == 0

    def test_falls_back_after_error(self, png_bytes):
        cloud = FakeProvider("cloud", 0.9, error=RuntimeError("quota exceeded"))
        local = FakeProvider("local", 0.7, text="1 egg", confidence=62, on_device=True)

        result = _run(_engine(cloud, local).recognize(png_bytes))

        assert result.metadata.provider == "local"
        assert result.confidence == 0.62
        assert cloud.calls == 1

    def test_falls_back_after_empty_text(self, png_bytes):
        cloud = FakeProvider("cloud", 0.9, text="   \n  ")
        local = FakeProvider("local", 0.7, text="salt", on_device=True)

        result = _run(_engine(cloud, local).recognize(png_bytes))
        assert result.text == "salt"

    def test_timeout_moves_on(self, png_bytes):
        slow = FakeProvider("cloud", 0.9, text="late", delay=1.0)
        local = FakeProvider("local", 0.7, text="on time", on_device=True)
        options = OcrOptions(preprocess=False, timeout_seconds=0.05)

        result = _run(_engine(slow, local).recognize(png_bytes, options))
        assert result.metadata.provider == "local"

    def test_all_providers_fail(self, png_bytes):
        cloud = FakeProvider("cloud", 0.9, error=RuntimeError("down"))
        local = FakeProvider("local", 0.7, text="", on_device=True)

        with pytest.raises(OcrFailed) as exc_info:
            _run(_engine(cloud, local).recognize(png_bytes, OcrOptions(preprocess=False)))

        assert isinstance(exc_info.value, ExtractionFailed)
        assert [(a.method, a.error) for a in exc_info.value.attempts] == [
            ("cloud", "down"),
            ("local", "empty text"),
        ]

    def test_no_preprocessing(self, png_bytes):
        local = FakeProvider("local", 0.7, text="ok text", on_device=True)
        result = _run(_engine(local).recognize(png_bytes, OcrOptions(preprocess=False)))
        assert result.metadata.preprocessing_applied == []
        assert result.metadata.image_size == (400, 300)

    def test_confidence_clamped(self, png_bytes):
        local = FakeProvider("local", 0.7, text="ok", confidence=140, on_device=True)
        result = _run(_engine(local).recognize(png_bytes, OcrOptions(preprocess=False)))
        assert result.confidence == 1.0

    def test_vision_provider_sends_data_url(self, png_bytes):
        complete = AsyncMock(return_value="  1 cup rice  ")
        result = _run(_engine(VisionProvider(complete=complete)).recognize(png_bytes))

        assert result.text == "1 cup rice"
        assert result.confidence == 0.9
        messages = complete.call_args.args[0]
        image_part = messages[0]["content"][1]
        assert image_part["image_url"]["url"].startswith("data:image/png;base64,")


class TestCleanup:
    def test_fixes_letter_confusions(self):
        assert clean_ocr_text("2 cups F|our") == "2 cups Flour"
        assert clean_ocr_text("1 c0rn tortilla") == "1 corn tortilla"
        assert clean_ocr_text("CH0P the onion") == "CHOP the onion"
        assert clean_ocr_text("a1l purpose") == "all purpose"

    def test_numbers_untouched(self):
        assert clean_ocr_text("10 oz  pasta\n1/2 cup milk") == "10 oz pasta\n1/2 cup milk"

    def test_collapses_blank_lines(self):
        assert clean_ocr_text("  Title  \n\n\n  Step one ") == "Title\nStep one"

    def test_empty(self):
        assert clean_ocr_text("") == ""


class TestValidation:
    @staticmethod
    def _result(text, confidence=0.9):
        return OcrResult(text=text, confidence=confidence, metadata=OcrMetadata("x", 1, (10, 10)))

    def test_good_result(self):
        validation = validate_ocr_result(self._result("2 cups flour\n1 tsp salt\nMix well"))
        assert validation.is_valid is True
        assert validation.issues == []

    def test_short_low_confidence(self):
        validation = validate_ocr_result(self._result("egg", confidence=0.3))
        assert validation.is_valid is False
        assert "Very little text extracted" in validation.issues
        assert "Low OCR confidence" in validation.issues
        assert "Very few words detected" in validation.issues

    def test_artifacts(self):
        validation = validate_ocr_result(self._result("|| // ~~ `` \\\\ one two three four five"))
        assert "High number of OCR artifacts detected" in validation.issues

    def test_single_line_suggestion(self):
        text = " ".join(["word"] * 25)
        validation = validate_ocr_result(self._result(text))
        assert validation.is_valid is True
        assert any("single line" in s for s in validation.suggestions)


class TestTesseractData:
    def test_rebuilds_lines_and_confidence(self):
        data = {
            "text": ["", "2", "cups", "flour", "Mix", "well", ""],
            "conf": ["-1", "90", "80", "70", "60", "100", "-1"],
            "block_num": [1, 1, 1, 1, 1, 1, 2],
            "par_num": [1, 1, 1, 1, 1, 1, 1],
            "line_num": [0, 1, 1, 1, 2, 2, 1],
        }
        result = tesseract_data_to_text(data)
        assert result.text == "2 cups flour\nMix well"
        assert result.confidence == 80.0

    def test_nothing_recognized(self):
        data = {"text": [""], "conf": [-1], "block_num": [1], "par_num": [1], "line_num": [1]}
        result = tesseract_data_to_text(data)
        assert result.text == ""
        assert result.confidence == 0.0
