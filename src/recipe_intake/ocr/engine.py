"""
OCR Engine.

Preprocesses an image, then tries providers in accuracy order until one
returns non-empty text. The on-device provider is always the terminal
fallback so recognition still works offline.
"""

import asyncio
import logging
import time

from recipe_intake.config import settings
from recipe_intake.recipe_import.errors import OcrFailed
from recipe_intake.recipe_import.models import ExtractionAttempt

from .cleanup import clean_ocr_text
from .models import OcrMetadata, OcrOptions, OcrResult, PreprocessOptions
from .preprocessing import PreprocessedImage, sniff_mime_type, image_dimensions, preprocess_image
from .providers import CompleteFn, OcrProvider, default_providers

logger = logging.getLogger(__name__)


class OcrEngine:
    """
    Image-to-text recognition with provider fallback.

    Usage:
        engine = OcrEngine()
        result = await engine.recognize(image_bytes, OcrOptions(provider="tesseract"))
    """

    def __init__(self, providers: list[OcrProvider] | None = None, complete: CompleteFn | None = None):
        self._providers: list[OcrProvider] = list(providers) if providers is not None else default_providers(complete)

    @property
    def providers(self) -> list[OcrProvider]:
        return list(self._providers)

    def register_provider(self, provider: OcrProvider) -> None:
        """Add a provider, replacing any existing one with the same name."""
        self._providers = [p for p in self._providers if p.name != provider.name]
        self._providers.append(provider)

    def provider_order(self, options: OcrOptions) -> list[OcrProvider]:
        """
        Resolve which providers to try, in order.

        - "auto": every available provider by descending accuracy
        - named: that provider first, then (if fallbacks are allowed) the
          remaining available providers by accuracy
        - the most accurate on-device provider is always appended last
        """
        available = sorted(
            (p for p in self._providers if p.is_available()),
            key=lambda p: p.accuracy,
            reverse=True,
        )

        if options.provider == "auto":
            order = list(available)
        else:
            order = [p for p in available if p.name == options.provider]
            if not order:
                logger.warning(f"OCR provider '{options.provider}' is not available")
            if options.allow_fallback_providers:
                order += [p for p in available if p.name != options.provider]

        terminal = next((p for p in available if p.on_device), None)
        if terminal is not None and terminal not in order:
            order.append(terminal)

        return order

    async def recognize(self, image_data: bytes, options: OcrOptions | None = None) -> OcrResult:
        """
        Recognize text in an image.

        Args:
            image_data: Encoded image bytes (JPEG, PNG, ...)
            options: Recognition options

        Returns:
            OcrResult with cleaned text and a 0..1 confidence

        Raises:
            OcrFailed: every provider failed, timed out, or returned empty text
        """
        options = options or OcrOptions(language=settings.ocr_language)
        started = time.monotonic()

        image = await self._prepare(image_data, options)
        timeout = options.timeout_seconds or settings.ocr_timeout_seconds

        attempts: list[ExtractionAttempt] = []
        last_error: Exception | None = None

        for provider in self.provider_order(options):
            try:
                raw = await asyncio.wait_for(provider.recognize(image, options.language), timeout=timeout)
            except asyncio.TimeoutError as e:
                logger.warning(f"OCR provider {provider.name} timed out after {timeout}s")
                attempts.append(ExtractionAttempt(method=provider.name, succeeded=False, error="timeout"))
                last_error = e
                continue
            except Exception as e:
                logger.warning(f"OCR provider {provider.name} failed: {e}")
                attempts.append(ExtractionAttempt(method=provider.name, succeeded=False, error=str(e)))
                last_error = e
                continue

            text = clean_ocr_text(raw.text)
            if not text:
                logger.info(f"OCR provider {provider.name} returned no text")
                attempts.append(ExtractionAttempt(method=provider.name, succeeded=False, error="empty text"))
                continue

            attempts.append(ExtractionAttempt(method=provider.name, succeeded=True))
            elapsed_ms = int((time.monotonic() - started) * 1000)
            logger.info(f"OCR succeeded with {provider.name} ({len(text)} chars, {elapsed_ms}ms)")

            return OcrResult(
                text=text,
                confidence=max(0.0, min(1.0, raw.confidence / 100)),
                metadata=OcrMetadata(
                    provider=provider.name,
                    processing_time_ms=elapsed_ms,
                    image_size=image.size,
                    preprocessing_applied=list(image.steps),
                    language=options.language,
                ),
            )

        raise OcrFailed("No OCR provider could read this image", attempts) from last_error

    async def _prepare(self, image_data: bytes, options: OcrOptions) -> PreprocessedImage:
        if options.preprocess is False:
            return PreprocessedImage(
                data=image_data,
                size=image_dimensions(image_data),
                mime_type=sniff_mime_type(image_data),
            )

        preprocess = options.preprocess if isinstance(options.preprocess, PreprocessOptions) else PreprocessOptions()
        # Pillow work is CPU-bound
        return await asyncio.to_thread(preprocess_image, image_data, preprocess)
