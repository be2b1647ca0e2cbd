"""
Image preprocessing ahead of text recognition.

Pillow pipeline, fixed order:
contrast-enhancement, denoising, sharpening, resizing.
"""

import io
import logging
from dataclasses import dataclass, field

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from .models import PreprocessOptions

logger = logging.getLogger(__name__)

CONTRAST_FACTOR = 1.5
CONTRAST_MIDPOINT = 128
MEDIAN_FILTER_SIZE = 3
SHARPEN_KERNEL = (0, -1, 0, -1, 5, -1, 0, -1, 0)
MIN_SHORT_SIDE = 1000
MAX_SHORT_SIDE = 2000

STEP_CONTRAST = "contrast-enhancement"
STEP_DENOISE = "denoising"
STEP_SHARPEN = "sharpening"
STEP_RESIZE = "resizing"
STEP_FAILED = "preprocessing-failed"


@dataclass
class PreprocessedImage:
    """Image bytes ready for a provider. `size` is (width, height); (0, 0) if undecodable."""

    data: bytes
    size: tuple[int, int]
    mime_type: str = "image/png"
    steps: list[str] = field(default_factory=list)


def _stretch(value: int) -> int:
    return max(0, min(255, round((value - CONTRAST_MIDPOINT) * CONTRAST_FACTOR + CONTRAST_MIDPOINT)))


def _target_size(width: int, height: int) -> tuple[int, int]:
    """Scale so the shorter side lands inside [MIN_SHORT_SIDE, MAX_SHORT_SIDE]."""
    short_side = min(width, height)
    if short_side < MIN_SHORT_SIDE:
        scale = MIN_SHORT_SIDE / short_side
    elif short_side > MAX_SHORT_SIDE:
        scale = MAX_SHORT_SIDE / short_side
    else:
        return width, height
    return max(1, round(width * scale)), max(1, round(height * scale))


def decode_image(data: bytes) -> Image.Image:
    """Open image bytes, honoring EXIF orientation, as RGB or L."""
    image = Image.open(io.BytesIO(data))
    image = ImageOps.exif_transpose(image)
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return image


def preprocess_image(data: bytes, options: PreprocessOptions | None = None) -> PreprocessedImage:
    """
    Run the enabled preprocessing steps.

    Every enabled step is recorded in order, including a resize that
    leaves an in-band image unchanged. Undecodable input records
    "preprocessing-failed" and returns the original bytes.
    """
    options = options or PreprocessOptions()

    try:
        image = decode_image(data)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Image preprocessing failed, sending original bytes: {e}")
        return PreprocessedImage(data=data, size=(0, 0), mime_type=sniff_mime_type(data), steps=[STEP_FAILED])

    steps: list[str] = []

    if options.enhance_contrast:
        image = image.point(_stretch)
        steps.append(STEP_CONTRAST)

    if options.denoise:
        image = image.filter(ImageFilter.MedianFilter(MEDIAN_FILTER_SIZE))
        steps.append(STEP_DENOISE)

    if options.sharpen:
        image = image.filter(ImageFilter.Kernel((3, 3), SHARPEN_KERNEL, scale=1))
        steps.append(STEP_SHARPEN)

    if options.resize:
        target = _target_size(*image.size)
        if target != image.size:
            image = image.resize(target, Image.Resampling.LANCZOS)
        steps.append(STEP_RESIZE)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return PreprocessedImage(data=buffer.getvalue(), size=image.size, steps=steps)


def image_dimensions(data: bytes) -> tuple[int, int]:
    """(width, height) of image bytes, or (0, 0) when they can't be decoded."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError, ValueError):
        return (0, 0)


def sniff_mime_type(data: bytes) -> str:
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return "application/octet-stream"
