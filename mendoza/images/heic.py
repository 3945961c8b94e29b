"""HEIC/HEIF to JPEG conversion for phone-camera photos.

Decoding relies on whatever HEIF support is registered with Pillow in the
running process. This package installs no HEIF plugin, so real HEIC data
always fails here with the single remediation message the upload flow shows
to the user; only files that Pillow can read despite a HEIC name or type
convert successfully. The upload validator rejects HEIC files before this
point in any case.
"""

import logging
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from mendoza.images.files import ImageFile
from mendoza.images.validation import is_heic_metadata

logger = logging.getLogger(__name__)

HEIC_JPEG_QUALITY = 92

# Decompression bomb guard for untrusted uploads, checked on every decode.
MAX_IMAGE_PIXELS = 80_000_000

HEIC_UNSUPPORTED_MESSAGE = (
    "HEIC images are not supported in your browser. Please convert the image to JPEG or PNG "
    "before uploading, or use the Photos app on your device to export as JPEG."
)


class HeicConversionError(Exception):
    """The HEIC/HEIF image could not be decoded or re-encoded."""

    def __init__(self, message: str = HEIC_UNSUPPORTED_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


def is_heic(image: ImageFile) -> bool:
    return is_heic_metadata(image.name, image.content_type)


def decode_bitmap(data: bytes, max_pixels: int = MAX_IMAGE_PIXELS) -> Image.Image:
    """Decode ``data`` into an upright bitmap with EXIF orientation applied.

    Raises:
        Image.DecompressionBombError: the image has more than ``max_pixels`` pixels.
        UnidentifiedImageError, OSError: the bytes cannot be decoded.
    """
    with Image.open(BytesIO(data)) as source:
        width, height = source.size
        if width * height > max_pixels:
            raise Image.DecompressionBombError(
                f"Image size ({width * height} pixels) exceeds limit of {max_pixels} pixels"
            )
        source.load()
        return ImageOps.exif_transpose(source)


def render_jpeg(source: Image.Image, size: tuple[int, int], quality: int) -> bytes:
    """Draw ``source`` onto an RGB surface of ``size`` and encode it as JPEG."""
    surface = source.convert("RGB")
    if surface.size != size:
        surface = surface.resize(size, Image.Resampling.LANCZOS)
    buf = BytesIO()
    surface.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def convert_heic_to_jpeg(image: ImageFile) -> ImageFile:
    """Return a JPEG copy of a HEIC/HEIF file, or ``image`` itself for anything else.

    Raises:
        HeicConversionError: the bytes cannot be decoded, drawn, or encoded.
    """
    if not is_heic(image):
        return image

    try:
        bitmap = decode_bitmap(image.data)
        data = render_jpeg(bitmap, bitmap.size, HEIC_JPEG_QUALITY)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.error("HEIC conversion failed for %s: %s", image.name, exc)
        raise HeicConversionError() from exc

    if not data:
        logger.error("HEIC conversion produced no output for %s", image.name)
        raise HeicConversionError()

    return image.with_jpeg_data(data)
