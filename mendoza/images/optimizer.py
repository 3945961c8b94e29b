"""Best-effort downscaling and JPEG re-encoding before upload."""

import logging

from PIL import Image

from mendoza.images.files import BYTES_PER_MB, ImageFile
from mendoza.images.heic import convert_heic_to_jpeg, decode_bitmap, render_jpeg

logger = logging.getLogger(__name__)

MAX_DIMENSION = 2048
DEFAULT_MAX_SIZE_MB = 5.0
QUALITY_STEPS = (90, 80, 70, 60)


def target_dimensions(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> tuple[int, int]:
    """Scale (width, height) so the longer side equals ``max_dimension``.

    Sizes already within the limit are returned unchanged.
    """
    longest = max(width, height)
    if longest <= max_dimension:
        return width, height
    scale = max_dimension / longest
    if width >= height:
        return max_dimension, max(1, round(height * scale))
    return max(1, round(width * scale)), max_dimension


def optimize_image(image: ImageFile, max_size_mb: float = DEFAULT_MAX_SIZE_MB) -> ImageFile:
    """Shrink ``image`` to a JPEG under ``max_size_mb`` where possible.

    Files already within budget are returned untouched. Otherwise the image is
    HEIC-converted, turned upright from its EXIF orientation, downscaled to at
    most 2048 px on its longer side, and re-encoded at decreasing quality until
    a result fits. When no quality fits, the lowest-quality attempt is kept.
    Decode or encode failures fall back to the converted, unoptimized file.

    Raises:
        HeicConversionError: a HEIC/HEIF input cannot be converted.
    """
    if image.size <= max_size_mb * BYTES_PER_MB:
        return image

    converted = convert_heic_to_jpeg(image)
    budget = max_size_mb * BYTES_PER_MB

    try:
        bitmap = decode_bitmap(converted.data)
        size = target_dimensions(*bitmap.size)

        encoded = b""
        for quality in QUALITY_STEPS:
            encoded = render_jpeg(bitmap, size, quality)
            if len(encoded) <= budget:
                break
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Image optimization failed for %s, uploading as-is: %s", converted.name, exc)
        return converted

    if not encoded:
        logger.warning("Image optimization produced no output for %s, uploading as-is", converted.name)
        return converted

    logger.debug(
        "Optimized %s: %.2f MB -> %.2f MB at %sx%s",
        converted.name,
        converted.size_mb,
        len(encoded) / BYTES_PER_MB,
        *size,
    )
    return converted.with_jpeg_data(encoded)
