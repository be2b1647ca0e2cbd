"""Image OCR with preprocessing and provider fallback."""

from .cleanup import clean_ocr_text, validate_ocr_result
from .engine import OcrEngine
from .models import OcrOptions, OcrResult, OcrValidation, PreprocessOptions
from .providers import OcrProvider, TesseractProvider, VisionProvider

__all__ = [
    "clean_ocr_text",
    "validate_ocr_result",
    "OcrEngine",
    "OcrOptions",
    "OcrResult",
    "OcrValidation",
    "PreprocessOptions",
    "OcrProvider",
    "TesseractProvider",
    "VisionProvider",
]
