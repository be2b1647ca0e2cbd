"""OCR text cleanup and quality checks."""

import re

from .models import OcrResult, OcrValidation

MIN_TEXT_LENGTH = 10
MIN_CONFIDENCE = 0.5
MAX_ARTIFACT_RATIO = 0.1
MIN_WORDS = 5
SINGLE_LINE_WORD_LIMIT = 20

_ARTIFACT_RE = re.compile(r"[|\\/~`]")
_PIPE_IN_WORD_RE = re.compile(r"(?<=[A-Za-z])\||\|(?=[A-Za-z])")
_ZERO_BETWEEN_LETTERS_RE = re.compile(r"(?<=[A-Za-z])0(?=[A-Za-z])")
_ONE_BETWEEN_LETTERS_RE = re.compile(r"(?<=[A-Za-z])1(?=[A-Za-z])")


def _zero_to_o(match: re.Match) -> str:
    before = match.string[match.start() - 1]
    return "O" if before.isupper() else "o"


def clean_ocr_text(text: str) -> str:
    """
    Normalize recognized text without disturbing numbers.

    - Runs of spaces/tabs collapse to one space
    - Blank-line runs collapse to a single newline
    - "|" touching letters becomes "l" ("F|our" -> "Flour")
    - "0" between letters becomes "o", "1" between letters becomes "l"

    Quantities such as "10 oz" or "1/2 cup" are left alone.
    """
    if not text:
        return ""

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = re.sub(r"\n{2,}", "\n", text)

    text = _PIPE_IN_WORD_RE.sub("l", text)
    text = _ZERO_BETWEEN_LETTERS_RE.sub(_zero_to_o, text)
    text = _ONE_BETWEEN_LETTERS_RE.sub("l", text)

    return text.strip()


def validate_ocr_result(result: OcrResult) -> OcrValidation:
    """Flag OCR output that is probably unusable, with suggestions for a retake."""
    issues: list[str] = []
    suggestions: list[str] = []
    text = result.text or ""

    if len(text) < MIN_TEXT_LENGTH:
        issues.append("Very little text extracted")
        suggestions.append("Try a higher resolution image or better lighting")

    if result.confidence < MIN_CONFIDENCE:
        issues.append("Low OCR confidence")
        suggestions.append("Image quality may be poor - try a sharper, well-lit photo")

    if text and len(_ARTIFACT_RE.findall(text)) / len(text) > MAX_ARTIFACT_RATIO:
        issues.append("High number of OCR artifacts detected")
        suggestions.append("Image may have poor contrast or resolution")

    word_count = len(text.split())
    line_count = len([line for line in text.split("\n") if line.strip()])

    if word_count < MIN_WORDS:
        issues.append("Very few words detected")
        suggestions.append("Ensure the image contains readable text")

    if line_count < 2 and word_count > SINGLE_LINE_WORD_LIMIT:
        suggestions.append("Text appears to be in a single line - check for line break issues")

    return OcrValidation(is_valid=not issues, issues=issues, suggestions=suggestions)
