"""Data models for recipe import."""

from dataclasses import dataclass, field
from enum import Enum


class InputType(str, Enum):
    """Kind of artifact the user handed us."""

    URL = "url"
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"


class ExtractionMethod(str, Enum):
    """Method used to extract raw recipe text."""

    STRUCTURED_DATA = "structured-data"
    VIDEO_CAPTION = "video-caption"
    HTML_SCRAPING = "html-scraping"
    READER_PROXY = "reader-proxy"
    TEXT_INPUT = "text-input"
    IMAGE_OCR = "image-ocr"


@dataclass
class BinaryFileRef:
    """An uploaded file: declared media type, filename, and optional bytes."""

    name: str | None = None
    mime_type: str | None = None
    size: int = 0
    data: bytes | None = None


@dataclass(frozen=True)
class DetectionMetadata:
    """Signals gathered while classifying an input."""

    platform: str | None = None
    is_video_url: bool | None = None
    is_social_media: bool | None = None
    file_type: str | None = None
    size: int | None = None
    has_recipe_structure: bool | None = None
    bullet_points: int | None = None
    numbered_steps: int | None = None
    measurements: int | None = None
    line_count: int | None = None


@dataclass(frozen=True)
class DetectionResult:
    """Classification of a raw input. Confidence is 0..1."""

    type: InputType
    confidence: float
    metadata: DetectionMetadata = field(default_factory=DetectionMetadata)


@dataclass
class ValidationResult:
    """Outcome of input validation."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ExtractionMetadata:
    """How raw text was obtained. `extraction_methods` lists every attempt in order."""

    source: str
    extraction_methods: list[str] = field(default_factory=list)
    confidence: float = 0.0
    platform: str | None = None
    creator: str | None = None
    original_url: str | None = None


@dataclass
class ExtractionResult:
    """Raw recipe text plus extraction metadata. `warnings` carries quality issues for the user."""

    raw_text: str
    metadata: ExtractionMetadata
    fallback_used: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass
class ExtractionAttempt:
    """One link in the causal chain of an extraction."""

    method: str
    succeeded: bool
    error: str | None = None


@dataclass
class StructuredRecipe:
    """Recipe fields lifted from a page before they are flattened to text."""

    name: str
    description: str | None = None
    image_url: str | None = None
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    servings: int | None = None
    keywords: list[str] = field(default_factory=list)
    author: str | None = None
    nutrition: dict[str, str] = field(default_factory=dict)


@dataclass
class Ingredient:
    """Draft ingredient. `inferred` is only ever set by the recovery stage."""

    name: str
    quantity: float | None = None
    unit: str | None = None
    notes: str | None = None
    optional: bool = False
    confidence: float = 1.0
    inferred: bool = False


@dataclass
class DraftRecipe:
    """Recipe parsed from raw text, before ingredient recovery."""

    title: str
    description: str | None = None
    ingredients: list[Ingredient] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    servings: int | None = None
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    nutrition: dict[str, str] = field(default_factory=dict)
    raw_ingredient_lines: list[str] = field(default_factory=list)
