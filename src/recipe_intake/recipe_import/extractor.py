"""
Content extraction orchestration.

Turns a classified input into raw recipe text. URLs run through an
ordered chain of strategies, each tried once, until one yields text:

1. structured-data: Schema.org JSON-LD / microdata
2. video-caption: oEmbed or meta-tag captions for social video
3. html-scraping: recipe-scrapers, then markup heuristics
4. reader-proxy: plain-text rendering through a reader service

Every attempted strategy is recorded in extraction_methods, success or
failure. Only exhausting the chain raises.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from recipe_intake.config import settings
from recipe_intake.ocr.cleanup import validate_ocr_result
from recipe_intake.ocr.models import OcrOptions

from .captions import META_CAPTION_PLATFORMS, caption_from_page, fetch_oembed_caption
from .errors import ExtractionFailed
from .fetch import (
    LOGIN_WALL_MESSAGE,
    FetchedPage,
    FetchError,
    PageBlocked,
    create_http_client,
    fetch_page,
    get_with_retry,
)
from .json_ld import extract_structured_recipe
from .models import (
    BinaryFileRef,
    DetectionResult,
    ExtractionAttempt,
    ExtractionMetadata,
    ExtractionMethod,
    ExtractionResult,
    InputType,
)
from .normalizer import format_structured_text, normalize_social_text
from .scrapers import extract_with_heuristics, extract_with_scraper
from .urls import normalize_url

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_WARNING = 0.5


@dataclass
class StrategyOutput:
    """What a strategy produced. Empty text counts as a miss."""

    text: str
    confidence: float
    creator: str | None = None
    fallback_used: bool = False


class ExtractionContext:
    """
    Per-import state shared by URL strategies.

    The page is fetched at most once; a fetch failure is remembered and
    re-raised to every later strategy that needs the page.
    """

    def __init__(self, url: str, original_url: str, client: httpx.AsyncClient, detection: DetectionResult):
        self.url = url
        self.original_url = original_url
        self.client = client
        self.detection = detection
        self._page: FetchedPage | None = None
        self._page_error: FetchError | None = None
        self._page_loaded = False

    @property
    def platform(self) -> str | None:
        return self.detection.metadata.platform

    async def get_page(self) -> FetchedPage:
        if not self._page_loaded:
            try:
                self._page = await fetch_page(self.client, self.url)
            except FetchError as e:
                self._page_error = e
            finally:
                self._page_loaded = True

        if self._page_error is not None:
            raise self._page_error
        return self._page

    async def get_readable_page(self) -> FetchedPage:
        """The page, unless it is a login wall."""
        page = await self.get_page()
        if page.login_wall:
            raise PageBlocked(LOGIN_WALL_MESSAGE)
        return page


class ExtractionStrategy(ABC):
    """One link in the URL fallback chain."""

    name: str = ""
    confidence: float = 0.0

    def applies(self, context: ExtractionContext) -> bool:
        return True

    @abstractmethod
    async def attempt(self, context: ExtractionContext) -> StrategyOutput | None:
        """
        Try to extract recipe text.

        Returns None (or empty text) for a miss. Raised exceptions are
        recorded as a failed attempt by the driver loop.
        """
        ...


class StructuredDataStrategy(ExtractionStrategy):
    name = ExtractionMethod.STRUCTURED_DATA.value
    confidence = 0.9

    async def attempt(self, context: ExtractionContext) -> StrategyOutput | None:
        page = await context.get_page()
        recipe = extract_structured_recipe(page.html, page.url)
        if recipe is None:
            # Structured data behind a login wall is still usable
            if page.login_wall:
                raise PageBlocked(LOGIN_WALL_MESSAGE)
            return None
        return StrategyOutput(text=format_structured_text(recipe), confidence=self.confidence, creator=recipe.author)


class VideoCaptionStrategy(ExtractionStrategy):
    name = ExtractionMethod.VIDEO_CAPTION.value
    confidence = 0.7

    def applies(self, context: ExtractionContext) -> bool:
        metadata = context.detection.metadata
        return bool(metadata.is_social_media or metadata.is_video_url)

    async def attempt(self, context: ExtractionContext) -> StrategyOutput | None:
        if context.platform in META_CAPTION_PLATFORMS:
            page = await context.get_page()
            caption = caption_from_page(page.html)
        else:
            caption = await fetch_oembed_caption(context.client, context.platform or "", context.url)

        if caption is None:
            return None
        return StrategyOutput(
            text=normalize_social_text(caption.text),
            confidence=self.confidence,
            creator=caption.creator,
        )


class HtmlScrapingStrategy(ExtractionStrategy):
    name = ExtractionMethod.HTML_SCRAPING.value
    confidence = 0.8

    async def attempt(self, context: ExtractionContext) -> StrategyOutput | None:
        page = await context.get_readable_page()
        recipe = extract_with_scraper(page.html, page.url) or extract_with_heuristics(page.html)
        if recipe is None:
            return None
        return StrategyOutput(text=format_structured_text(recipe), confidence=self.confidence, creator=recipe.author)


class ReaderProxyStrategy(ExtractionStrategy):
    name = ExtractionMethod.READER_PROXY.value
    confidence = 0.6

    async def attempt(self, context: ExtractionContext) -> StrategyOutput | None:
        response = await get_with_retry(
            context.client,
            f"{settings.reader_proxy_url}{context.url}",
            headers={"Accept": "text/plain"},
        )
        return StrategyOutput(text=response.text.strip(), confidence=self.confidence, fallback_used=True)


def default_strategies() -> list[ExtractionStrategy]:
    return [
        StructuredDataStrategy(),
        VideoCaptionStrategy(),
        HtmlScrapingStrategy(),
        ReaderProxyStrategy(),
    ]


class ContentExtractor:
    """
    Converts any classified input into raw recipe text.

    Usage:
        extractor = ContentExtractor()
        result = await extractor.extract("https://example.com/recipe", classify(...))
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        ocr_engine=None,
        strategies: list[ExtractionStrategy] | None = None,
    ):
        if ocr_engine is None:
            # Deferred: the OCR package imports this package's errors
            from recipe_intake.ocr.engine import OcrEngine

            ocr_engine = OcrEngine()

        self._client = http_client
        self._ocr = ocr_engine
        self._strategies = strategies if strategies is not None else default_strategies()

    async def extract(
        self,
        raw_input: str | BinaryFileRef,
        detection: DetectionResult,
        *,
        ocr_options: OcrOptions | None = None,
    ) -> ExtractionResult:
        """
        Extract raw recipe text.

        Raises:
            ExtractionFailed: every applicable method was exhausted
            OcrFailed: image input and every OCR provider failed
        """
        if detection.type == InputType.URL:
            return await self._extract_url(str(raw_input), detection)
        if detection.type == InputType.TEXT:
            return self._extract_text(str(raw_input or ""), detection)
        if detection.type == InputType.IMAGE:
            return await self._extract_image(raw_input, ocr_options)

        raise ExtractionFailed(
            "Video files can't be transcribed. Share the video link instead.",
            [ExtractionAttempt(method="video-file", succeeded=False, error="unsupported input type")],
        )

    # -------------------------------------------------------------------------
    # URL
    # -------------------------------------------------------------------------

    async def _extract_url(self, raw_url: str, detection: DetectionResult) -> ExtractionResult:
        url = normalize_url(raw_url)

        if self._client is not None:
            return await self._run_chain(ExtractionContext(url, raw_url.strip(), self._client, detection))

        async with create_http_client() as client:
            return await self._run_chain(ExtractionContext(url, raw_url.strip(), client, detection))

    async def _run_chain(self, context: ExtractionContext) -> ExtractionResult:
        methods: list[str] = []
        attempts: list[ExtractionAttempt] = []
        last_error: Exception | None = None

        for strategy in self._strategies:
            if not strategy.applies(context):
                continue

            methods.append(strategy.name)
            logger.info(f"Attempting {strategy.name} extraction for {context.url}")

            try:
                output = await strategy.attempt(context)
            except Exception as e:
                logger.warning(f"{strategy.name} extraction failed for {context.url}: {e}")
                attempts.append(ExtractionAttempt(method=strategy.name, succeeded=False, error=str(e)))
                last_error = e
                continue

            if output is None or not output.text.strip():
                logger.info(f"{strategy.name} found no recipe content for {context.url}")
                attempts.append(ExtractionAttempt(method=strategy.name, succeeded=False, error="no content"))
                continue

            attempts.append(ExtractionAttempt(method=strategy.name, succeeded=True))
            logger.info(f"{strategy.name} extraction succeeded for {context.url}")

            warnings = []
            if output.fallback_used:
                warnings.append("Recipe was read from a plain-text copy of the page - check the details")

            return ExtractionResult(
                raw_text=output.text.strip(),
                metadata=ExtractionMetadata(
                    source=context.url,
                    extraction_methods=methods,
                    confidence=output.confidence,
                    platform=context.platform,
                    creator=output.creator,
                    original_url=context.original_url,
                ),
                fallback_used=output.fallback_used,
                warnings=warnings,
            )

        logger.info(f"All extraction methods failed for {context.url}")
        raise ExtractionFailed(f"Could not extract recipe content from {context.url}", attempts) from last_error

    # -------------------------------------------------------------------------
    # Text and images
    # -------------------------------------------------------------------------

    def _extract_text(self, text: str, detection: DetectionResult) -> ExtractionResult:
        method = ExtractionMethod.TEXT_INPUT.value
        cleaned = normalize_social_text(text)

        if not cleaned:
            raise ExtractionFailed(
                "No text to extract",
                [ExtractionAttempt(method=method, succeeded=False, error="empty text")],
            )

        warnings = []
        if detection.confidence < LOW_CONFIDENCE_WARNING:
            warnings.append("This text doesn't look much like a recipe - results may be incomplete")

        return ExtractionResult(
            raw_text=cleaned,
            metadata=ExtractionMetadata(
                source="text",
                extraction_methods=[method],
                confidence=detection.confidence,
            ),
            warnings=warnings,
        )

    async def _extract_image(self, file: str | BinaryFileRef, ocr_options: OcrOptions | None) -> ExtractionResult:
        method = ExtractionMethod.IMAGE_OCR.value

        if not isinstance(file, BinaryFileRef) or not file.data:
            raise ExtractionFailed(
                "Image has no data to read",
                [ExtractionAttempt(method=method, succeeded=False, error="empty image")],
            )

        options = ocr_options or OcrOptions(language=settings.ocr_language)
        ocr_result = await self._ocr.recognize(file.data, options)

        validation = validate_ocr_result(ocr_result)
        warnings = [f"OCR: {issue}" for issue in validation.issues]

        return ExtractionResult(
            raw_text=ocr_result.text,
            metadata=ExtractionMetadata(
                source="image",
                extraction_methods=[method],
                confidence=ocr_result.confidence,
            ),
            warnings=warnings,
        )
