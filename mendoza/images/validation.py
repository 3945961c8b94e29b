"""Upload pre-checks on file metadata (name, declared type, size).

Nothing here reads the image bytes; decoding happens later in the optimizer.
"""

from dataclasses import dataclass

from mendoza.images.files import BYTES_PER_MB, ImageFile, has_extension

MAX_UPLOAD_BYTES = 10 * BYTES_PER_MB

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})
ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
HEIC_EXTENSIONS = (".heic", ".heif")

TOO_LARGE_MESSAGE = "Image is too large. Maximum size is 10MB."
HEIC_REJECTED_MESSAGE = (
    "HEIC images are not supported. Please convert to JPEG or PNG first. "
    "On iPhone, you can export photos as JPEG from the Photos app."
)
INVALID_TYPE_MESSAGE = "Invalid file type. Please upload JPEG, PNG, or WebP images."


@dataclass(frozen=True)
class ImageValidationResult:
    valid: bool
    error: str | None = None


def is_heic_metadata(name: str, content_type: str | None) -> bool:
    """True when the declared type mentions HEIC/HEIF or the name ends in .heic/.heif."""
    declared = (content_type or "").lower()
    return "heic" in declared or "heif" in declared or has_extension(name, *HEIC_EXTENSIONS)


def validate_image(image: ImageFile) -> ImageValidationResult:
    """Accept JPEG, PNG and WebP uploads up to 10 MB.

    The extension fallback covers file pickers that report a generic or empty
    media type.
    """
    if image.size > MAX_UPLOAD_BYTES:
        return ImageValidationResult(valid=False, error=TOO_LARGE_MESSAGE)

    if is_heic_metadata(image.name, image.content_type):
        return ImageValidationResult(valid=False, error=HEIC_REJECTED_MESSAGE)

    declared = (image.content_type or "").lower()
    if declared not in ALLOWED_CONTENT_TYPES and not has_extension(image.name, *ALLOWED_EXTENSIONS):
        return ImageValidationResult(valid=False, error=INVALID_TYPE_MESSAGE)

    return ImageValidationResult(valid=True)
