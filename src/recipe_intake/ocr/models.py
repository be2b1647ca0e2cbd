"""Data models for OCR."""

from dataclasses import dataclass, field


@dataclass
class PreprocessOptions:
    """Toggles for each preprocessing step. Steps always run in this order."""

    enhance_contrast: bool = True
    denoise: bool = True
    sharpen: bool = True
    resize: bool = True


@dataclass
class OcrOptions:
    """
    Options for a single recognition.

    provider is "auto" or a provider name. With a named provider and
    allow_fallback_providers=False, only that provider and the on-device
    terminal fallback are tried.
    """

    language: str = "eng"
    preprocess: bool | PreprocessOptions = True
    provider: str = "auto"
    allow_fallback_providers: bool = True
    timeout_seconds: float | None = None


@dataclass
class ProviderText:
    """Raw provider output. Confidence is on the provider's 0-100 scale."""

    text: str
    confidence: float


@dataclass
class OcrMetadata:
    provider: str
    processing_time_ms: int
    image_size: tuple[int, int]
    preprocessing_applied: list[str] = field(default_factory=list)
    language: str = "eng"


@dataclass
class OcrResult:
    """Recognized text with a 0..1 confidence."""

    text: str
    confidence: float
    metadata: OcrMetadata


@dataclass
class OcrValidation:
    is_valid: bool
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
