"""
OCR Providers.

A provider turns preprocessed image bytes into text plus a 0-100
confidence. The engine orders providers by accuracy and treats the
on-device provider as the terminal fallback.

Built-ins:
- VisionProvider: OpenAI vision model (needs OPENAI_API_KEY)
- TesseractProvider: local Tesseract via pytesseract
"""

import asyncio
import base64
import io
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

import pytesseract
from PIL import Image

from recipe_intake.config import settings
from recipe_intake.llm import call_llm_chat

from .models import ProviderText
from .preprocessing import PreprocessedImage

logger = logging.getLogger(__name__)

CompleteFn = Callable[..., Awaitable[str]]

VISION_PROMPT = """Transcribe all text in this image exactly as written.

This is usually a recipe: a card, a cookbook page, or a screenshot.
- Keep the original line breaks, list bullets and numbering
- Keep quantities, fractions and units exactly as shown
- Do not add, summarize, translate or explain anything
- If the image has no readable text, reply with nothing"""


class OcrProvider(ABC):
    """Base class for text recognition backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique provider identifier (e.g., 'vision', 'tesseract')."""
        ...

    @property
    @abstractmethod
    def accuracy(self) -> float:
        """Expected accuracy, 0..1. Used to order providers."""
        ...

    @property
    def on_device(self) -> bool:
        """Whether recognition runs locally without network access."""
        return False

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def recognize(self, image: PreprocessedImage, language: str) -> ProviderText:
        """
        Recognize text in an image.

        Returns:
            ProviderText with confidence on a 0-100 scale
        """
        ...


class VisionProvider(OcrProvider):
    """OpenAI vision-model transcription."""

    def __init__(self, complete: CompleteFn | None = None, model: str | None = None):
        self._complete = complete
        self._model = model

    @property
    def name(self) -> str:
        return "vision"

    @property
    def accuracy(self) -> float:
        return 0.9

    def is_available(self) -> bool:
        return self._complete is not None or bool(settings.openai_api_key)

    async def recognize(self, image: PreprocessedImage, language: str) -> ProviderText:
        encoded = base64.b64encode(image.data).decode("ascii")
        prompt = VISION_PROMPT if language == "eng" else f"{VISION_PROMPT}\n- Expected language: {language}"
        messages: list[dict[str, Any]] = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": f"data:{image.mime_type};base64,{encoded}"}},
                ],
            }
        ]

        if self._complete is not None:
            text = await self._complete(messages)
        else:
            text = await call_llm_chat(
                messages,
                stage="ocr",
                model=self._model or settings.vision_model,
                max_tokens=2000,
            )

        text = (text or "").strip()
        # Vision models report no per-word confidence
        return ProviderText(text=text, confidence=self.accuracy * 100 if text else 0.0)


class TesseractProvider(OcrProvider):
    """Local Tesseract OCR. Blocking calls run in a worker thread."""

    @property
    def name(self) -> str:
        return "tesseract"

    @property
    def accuracy(self) -> float:
        return 0.7

    @property
    def on_device(self) -> bool:
        return True

    async def recognize(self, image: PreprocessedImage, language: str) -> ProviderText:
        return await asyncio.to_thread(self._recognize_sync, image.data, language)

    def _recognize_sync(self, data: bytes, language: str) -> ProviderText:
        if settings.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = settings.tesseract_cmd

        with Image.open(io.BytesIO(data)) as img:
            result = pytesseract.image_to_data(img, lang=language, output_type=pytesseract.Output.DICT)

        return tesseract_data_to_text(result)


def tesseract_data_to_text(data: dict[str, list]) -> ProviderText:
    """
    Rebuild line-broken text and a mean word confidence from image_to_data output.

    Words with a negative confidence are layout boxes, not text.
    """
    lines: dict[tuple[int, int, int], list[str]] = {}
    confidences: list[float] = []

    for i, word in enumerate(data.get("text", [])):
        word = (word or "").strip()
        try:
            conf = float(data["conf"][i])
        except (KeyError, IndexError, TypeError, ValueError):
            conf = -1.0
        if not word or conf < 0:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        confidences.append(conf)

    text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return ProviderText(text=text, confidence=confidence)


def default_providers(complete: CompleteFn | None = None) -> list[OcrProvider]:
    return [VisionProvider(complete=complete), TesseractProvider()]
