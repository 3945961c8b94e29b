"""Apartment image uploads: validate, optimize, store, one file at a time."""

import logging
import re
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field

from starlette.concurrency import run_in_threadpool

from mendoza.images.files import ImageFile
from mendoza.images.heic import HeicConversionError
from mendoza.images.optimizer import DEFAULT_MAX_SIZE_MB, optimize_image
from mendoza.images.validation import validate_image
from mendoza.storage import StorageClient, StorageError

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

UPLOAD_FAILED_MESSAGE = "Upload failed. Please try again."


@dataclass
class UploadOutcome:
    """Public URLs of stored images plus an error message per rejected file name."""

    urls: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)


def storage_path(apartment_id: uuid.UUID, file_name: str) -> str:
    """``<apartment_id>/<millis>-<sanitized name>``."""
    safe_name = _UNSAFE_NAME_CHARS.sub("-", file_name).strip("-") or "image.jpg"
    return f"{apartment_id}/{int(time.time() * 1000)}-{safe_name}"


async def upload_apartment_images(
    storage: StorageClient,
    apartment_id: uuid.UUID,
    files: Sequence[ImageFile],
    *,
    max_size_mb: float = DEFAULT_MAX_SIZE_MB,
    cache_control: str = "3600",
) -> UploadOutcome:
    """Upload ``files`` sequentially and collect their public URLs.

    Rejected or failed files are reported in ``errors``; the remaining files
    are still processed.
    """
    outcome = UploadOutcome()

    for image in files:
        check = validate_image(image)
        if not check.valid:
            outcome.errors[image.name] = check.error or "Invalid image."
            continue

        try:
            prepared = await run_in_threadpool(optimize_image, image, max_size_mb)
        except HeicConversionError as exc:
            outcome.errors[image.name] = exc.message
            continue

        path = storage_path(apartment_id, prepared.name)
        try:
            stored = await storage.upload(
                path,
                prepared.data,
                prepared.content_type,
                cache_control=cache_control,
                upsert=False,
            )
        except StorageError as exc:
            logger.error("Error uploading image %s for apartment %s: %s", image.name, apartment_id, exc)
            outcome.errors[image.name] = UPLOAD_FAILED_MESSAGE
            continue

        outcome.urls.append(storage.get_public_url(stored))

    logger.info(
        "Uploaded %d image(s) for apartment %s, %d rejected",
        len(outcome.urls),
        apartment_id,
        len(outcome.errors),
    )
    return outcome


async def delete_apartment_images(storage: StorageClient, image_urls: Sequence[str]) -> bool:
    """Remove stored objects behind ``image_urls``; URLs outside the bucket are skipped.

    Returns ``False`` (after logging) when the storage call fails.
    """
    candidates = [storage.path_from_public_url(url) for url in image_urls]
    paths = [path for path in candidates if path]
    if not paths:
        return True
    try:
        await storage.remove(paths)
    except StorageError as exc:
        logger.error("Error deleting %d stored image(s): %s", len(paths), exc)
        return False
    return True


def without_image(images: Sequence[str], principal_index: int, url: str) -> tuple[list[str], int]:
    """Drop ``url`` from ``images`` and keep the cover pointing at the same picture.

    When the cover itself is removed the first remaining image becomes the cover.
    """
    removed_at = images.index(url)
    remaining = [*images[:removed_at], *images[removed_at + 1 :]]
    if removed_at < principal_index:
        principal_index -= 1
    elif removed_at == principal_index:
        principal_index = 0
    return remaining, max(0, min(principal_index, len(remaining) - 1))
