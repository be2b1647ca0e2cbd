"""
Input detection and validation for recipe imports.

Classifies raw input into url / text / image / video with a confidence
score and platform metadata. Classification never raises: the worst case
is a low-confidence guess.
"""

import logging
import re

from .models import BinaryFileRef, DetectionMetadata, DetectionResult, InputType, ValidationResult
from .urls import match_platform, normalize_url, parse_url, is_video_url

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "heic", "heif", "gif", "bmp", "tif", "tiff"}
VIDEO_EXTENSIONS = {"mp4", "mov", "avi", "webm", "m4v", "mkv", "3gp"}

GENERIC_URL_CONFIDENCE = 0.8
UNKNOWN_FILE_CONFIDENCE = 0.3

# Text scoring
TEXT_BASE_CONFIDENCE = 0.5
TEXT_INDICATOR_WEIGHT = 0.1
TEXT_STRUCTURE_WEIGHT = 0.2
TEXT_MAX_CONFIDENCE = 0.95

RECIPE_INDICATORS = [
    re.compile(r"ingredients?:", re.IGNORECASE),
    re.compile(r"directions?:", re.IGNORECASE),
    re.compile(r"instructions?:", re.IGNORECASE),
    re.compile(r"steps?:", re.IGNORECASE),
    re.compile(r"method:", re.IGNORECASE),
    re.compile(r"recipe", re.IGNORECASE),
    re.compile(r"serves?\s+\d+", re.IGNORECASE),
    re.compile(r"prep\s+time", re.IGNORECASE),
    re.compile(r"cook\s+time", re.IGNORECASE),
    re.compile(r"\d+\s+(?:cup|tbsp|tsp|oz|lb|kg|g|ml|liter)\b", re.IGNORECASE),
]

MEASUREMENT_RE = re.compile(
    r"\d+\s*(?:cups?|tbsp|tsp|tablespoons?|teaspoons?|oz|ounces?|lbs?|pounds?|kg|grams?|ml|liters?)\b",
    re.IGNORECASE,
)
BULLET_RE = re.compile(r"^[-•*]\s")
NUMBERED_RE = re.compile(r"^\d+[.)]?\s")

# Validation limits
MIN_TEXT_LENGTH = 10
MAX_TEXT_LENGTH = 50_000
MAX_IMAGE_BYTES = 10 * 1024 * 1024
MIN_IMAGE_BYTES = 1024
MAX_VIDEO_BYTES = 100 * 1024 * 1024
LARGE_VIDEO_BYTES = 50 * 1024 * 1024


def classify(raw_input: str | BinaryFileRef | None) -> DetectionResult:
    """
    Detect the input type with confidence scoring.

    Args:
        raw_input: A string (URL or free text) or an uploaded file

    Returns:
        DetectionResult; never raises
    """
    try:
        if isinstance(raw_input, BinaryFileRef):
            return _classify_file(raw_input)

        text = (raw_input or "").strip()
        if not text:
            return DetectionResult(type=InputType.TEXT, confidence=0.0)

        url_result = _classify_url(text)
        if url_result is not None:
            return url_result

        return _classify_text(text)

    except Exception as e:
        # Classification is advisory; an unexpected shape gets the lowest bucket
        logger.warning(f"Input classification failed, treating as text: {e}")
        return DetectionResult(type=InputType.TEXT, confidence=0.0)


def _classify_url(text: str) -> DetectionResult | None:
    """Classify a URL-shaped string, or return None if it isn't one."""
    if parse_url(text) is None:
        return None

    url = normalize_url(text)
    signature = match_platform(url)

    if signature is None:
        return DetectionResult(
            type=InputType.URL,
            confidence=GENERIC_URL_CONFIDENCE,
            metadata=DetectionMetadata(platform="generic", is_video_url=False, is_social_media=False),
        )

    return DetectionResult(
        type=InputType.URL,
        confidence=signature.confidence,
        metadata=DetectionMetadata(
            platform=signature.name,
            is_video_url=is_video_url(url, signature),
            is_social_media=signature.is_social_media,
        ),
    )


def _classify_file(file: BinaryFileRef) -> DetectionResult:
    """
    Classify an uploaded file.

    MIME type wins over the filename extension. Unknown files default to
    image: OCR can attempt them safely, video processing cannot.
    """
    mime_type = (file.mime_type or "").lower().strip()
    size = file.size or (len(file.data) if file.data else 0)

    if mime_type.startswith("image/"):
        return DetectionResult(
            type=InputType.IMAGE,
            confidence=0.95,
            metadata=DetectionMetadata(file_type=mime_type, size=size),
        )

    if mime_type.startswith("video/"):
        return DetectionResult(
            type=InputType.VIDEO,
            confidence=0.95,
            metadata=DetectionMetadata(file_type=mime_type, size=size),
        )

    name = (file.name or "").lower()
    extension = name.rsplit(".", 1)[-1] if "." in name else ""

    if extension in IMAGE_EXTENSIONS:
        return DetectionResult(
            type=InputType.IMAGE,
            confidence=0.8,
            metadata=DetectionMetadata(
                file_type=f"image/{'jpeg' if extension == 'jpg' else extension}",
                size=size,
            ),
        )

    if extension in VIDEO_EXTENSIONS:
        return DetectionResult(
            type=InputType.VIDEO,
            confidence=0.8,
            metadata=DetectionMetadata(file_type=f"video/{extension}", size=size),
        )

    return DetectionResult(
        type=InputType.IMAGE,
        confidence=UNKNOWN_FILE_CONFIDENCE,
        metadata=DetectionMetadata(file_type="unknown", size=size),
    )


def _classify_text(text: str) -> DetectionResult:
    """Score free text by how recipe-like it looks."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    confidence = TEXT_BASE_CONFIDENCE
    matched = sum(1 for pattern in RECIPE_INDICATORS if pattern.search(text))
    confidence += matched * TEXT_INDICATOR_WEIGHT

    bullet_points = sum(1 for line in lines if BULLET_RE.match(line))
    numbered_steps = sum(1 for line in lines if NUMBERED_RE.match(line))
    measurements = len(MEASUREMENT_RE.findall(text))

    if bullet_points > 2:
        confidence += TEXT_STRUCTURE_WEIGHT
    if numbered_steps > 2:
        confidence += TEXT_STRUCTURE_WEIGHT
    if measurements > 2:
        confidence += TEXT_STRUCTURE_WEIGHT

    confidence = round(min(confidence, TEXT_MAX_CONFIDENCE), 4)

    return DetectionResult(
        type=InputType.TEXT,
        confidence=confidence,
        metadata=DetectionMetadata(
            line_count=len(lines),
            has_recipe_structure=confidence > 0.7,
            bullet_points=bullet_points,
            numbered_steps=numbered_steps,
            measurements=measurements,
        ),
    )


# =============================================================================
# Validation
# =============================================================================


def validate_input(raw_input: str | BinaryFileRef | None, detection: DetectionResult) -> ValidationResult:
    """
    Validate input based on its detected type.

    Errors make the input unusable; warnings are surfaced to the user
    but never block the import.
    """
    if detection.type == InputType.URL:
        return _validate_url(str(raw_input or ""), detection)
    if detection.type == InputType.TEXT:
        return validate_text(str(raw_input or "") if not isinstance(raw_input, BinaryFileRef) else "", detection)
    if detection.type == InputType.IMAGE:
        return _validate_image(detection)
    return _validate_video(detection)


def _validate_url(url: str, detection: DetectionResult) -> ValidationResult:
    result = ValidationResult(is_valid=True)

    parts = parse_url(url)
    if parts is None:
        return ValidationResult(is_valid=False, errors=["Invalid URL format"])

    if parts.scheme.lower() == "http":
        result.warnings.append("URL uses HTTP instead of HTTPS - some content may not be accessible")

    metadata = detection.metadata
    if metadata.is_social_media:
        if metadata.platform == "tiktok" and not metadata.is_video_url:
            result.warnings.append("This appears to be a TikTok profile link rather than a specific video")
        if metadata.platform == "instagram" and "/reel" not in parts.path:
            result.warnings.append("Instagram posts work best when the recipe is in the caption")

    return result


def validate_text(text: str, detection: DetectionResult) -> ValidationResult:
    """Reject text too short to hold a recipe; warn on everything else."""
    result = ValidationResult(is_valid=True)

    if len(text.strip()) < MIN_TEXT_LENGTH:
        return ValidationResult(is_valid=False, errors=["Text is too short to contain a meaningful recipe"])

    if len(text) > MAX_TEXT_LENGTH:
        result.warnings.append("Text is very long - processing may take extra time")

    if detection.confidence < 0.5:
        result.warnings.append("Text does not appear to contain a structured recipe - results may vary")

    if not re.search(r"ingredients?", text, re.IGNORECASE) and not MEASUREMENT_RE.search(text):
        result.warnings.append("No ingredients list detected - ingredients will be inferred from context")

    if not re.search(r"steps?|directions?|instructions?|method", text, re.IGNORECASE) and not re.search(
        r"^\s*\d+\.", text, re.MULTILINE
    ):
        result.warnings.append("No cooking steps detected - steps will be inferred from context")

    return result


def _validate_image(detection: DetectionResult) -> ValidationResult:
    result = ValidationResult(is_valid=True)
    size = detection.metadata.size or 0

    if size > MAX_IMAGE_BYTES:
        result.errors.append("Image file is too large (max 10MB)")
    if 0 < size < MIN_IMAGE_BYTES:
        result.warnings.append("Image file is very small - text may be difficult to read")
    if detection.confidence < 0.8:
        result.warnings.append("File type detection uncertain - ensure this is a valid image file")

    result.is_valid = not result.errors
    return result


def _validate_video(detection: DetectionResult) -> ValidationResult:
    result = ValidationResult(is_valid=True)
    size = detection.metadata.size or 0

    if size > MAX_VIDEO_BYTES:
        result.errors.append("Video file is too large (max 100MB)")
    elif size > LARGE_VIDEO_BYTES:
        result.warnings.append("Large video file - processing may take several minutes")
    if detection.confidence < 0.8:
        result.warnings.append("File type detection uncertain - ensure this is a valid video file")
    result.warnings.append("Video files need transcription - share the video link instead for caption import")

    result.is_valid = not result.errors
    return result


def get_platform_hints(detection: DetectionResult) -> list[str]:
    """Platform-specific tips for getting a better import."""
    hints: list[str] = []
    platform = detection.metadata.platform

    if detection.type == InputType.URL:
        if platform == "tiktok":
            hints.append("TikTok videos work best when the caption lists ingredients and steps")
        elif platform == "instagram":
            hints.append("Instagram Reels often have recipe details in captions")
            hints.append("Screenshots of recipe cards work well too")
        elif platform == "youtube":
            hints.append("YouTube videos with ingredient lists in the description work best")
        elif platform == "recipe-site":
            hints.append("Recipe websites usually have structured data for best results")

    elif detection.type == InputType.TEXT and detection.confidence < 0.7:
        hints.append("For best results, include both an ingredients list and cooking steps")
        hints.append("Use clear formatting with bullet points or numbers")

    elif detection.type == InputType.IMAGE:
        hints.append("Ensure text is clear and well-lit for better OCR results")
        hints.append("Recipe cards and screenshots work better than photos of printed pages")

    elif detection.type == InputType.VIDEO:
        hints.append("Share the video's link instead of the file to import its caption")

    return hints
