"""Admin API routes: apartments, images, availability periods and reservations.

Every route requires an admin access token.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from mendoza.api.deps import get_current_admin, get_db, get_storage
from mendoza.config import settings
from mendoza.images.files import ImageFile
from mendoza.images.validation import MAX_UPLOAD_BYTES, TOO_LARGE_MESSAGE
from mendoza.models.apartment import Apartment
from mendoza.models.booking import Booking
from mendoza.schemas.apartment import (
    ApartmentCreate,
    ApartmentListResponse,
    ApartmentResponse,
    ApartmentUpdate,
    ImageUploadResponse,
)
from mendoza.schemas.auth import MessageResponse
from mendoza.schemas.availability import AvailabilityCreate, AvailabilityResponse
from mendoza.schemas.booking import (
    BookingListResponse,
    BookingResponse,
    BookingStatus,
    BookingStatusUpdate,
    BookingWithApartmentResponse,
)
from mendoza.services import apartments as apartment_service
from mendoza.services import bookings as booking_service
from mendoza.services.media import delete_apartment_images, upload_apartment_images, without_image
from mendoza.storage import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


async def _get_apartment_or_404(apartment_id: uuid.UUID, db: AsyncSession) -> Apartment:
    apartment = await apartment_service.get_apartment(db, apartment_id, active_only=False)
    if apartment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Apartment not found",
        )
    return apartment


async def _get_booking_or_404(booking_id: uuid.UUID, db: AsyncSession) -> Booking:
    booking = await booking_service.get_booking(db, booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


def _persistence_failed(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


# ---------------------------------------------------------------------------
# Apartments
# ---------------------------------------------------------------------------


@router.get("/apartments", response_model=ApartmentListResponse, summary="List all apartments")
async def list_all_apartments(db: AsyncSession = Depends(get_db)) -> ApartmentListResponse:
    """Active and inactive apartments, newest first."""
    apartments = await apartment_service.list_apartments(db)
    return ApartmentListResponse(
        items=[ApartmentResponse.model_validate(apt) for apt in apartments],
        total=len(apartments),
    )


@router.post(
    "/apartments",
    response_model=ApartmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an apartment",
)
async def create_apartment(body: ApartmentCreate, db: AsyncSession = Depends(get_db)) -> ApartmentResponse:
    apartment = await apartment_service.create_apartment(db, body)
    if apartment is None:
        raise _persistence_failed("Failed to create apartment")
    return ApartmentResponse.model_validate(apartment)


@router.get("/apartments/{apartment_id}", response_model=ApartmentResponse, summary="Get any apartment by ID")
async def get_apartment(apartment_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> ApartmentResponse:
    return ApartmentResponse.model_validate(await _get_apartment_or_404(apartment_id, db))


@router.put("/apartments/{apartment_id}", response_model=ApartmentResponse, summary="Update an apartment")
async def update_apartment(
    apartment_id: uuid.UUID,
    body: ApartmentUpdate,
    db: AsyncSession = Depends(get_db),
) -> ApartmentResponse:
    """Partially update an apartment. Only explicitly set fields are changed."""
    apartment = await _get_apartment_or_404(apartment_id, db)
    updated = await apartment_service.update_apartment(db, apartment, body)
    if updated is None:
        raise _persistence_failed("Failed to update apartment")
    return ApartmentResponse.model_validate(updated)


@router.post(
    "/apartments/{apartment_id}/toggle-active",
    response_model=ApartmentResponse,
    summary="Show or hide an apartment on the public site",
)
async def toggle_apartment_active(apartment_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> ApartmentResponse:
    apartment = await _get_apartment_or_404(apartment_id, db)
    updated = await apartment_service.apply_apartment_changes(db, apartment, {"is_active": not apartment.is_active})
    if updated is None:
        raise _persistence_failed("Failed to update apartment")
    return ApartmentResponse.model_validate(updated)


@router.delete("/apartments/{apartment_id}", response_model=MessageResponse, summary="Delete an apartment")
async def delete_apartment(
    apartment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
) -> MessageResponse:
    """Delete an apartment with its bookings, periods and stored images.

    Image removal is best-effort: a storage failure is logged and the
    apartment is deleted anyway.
    """
    apartment = await _get_apartment_or_404(apartment_id, db)
    if apartment.images and not await delete_apartment_images(storage, apartment.images):
        logger.warning("Stored images of apartment %s were not removed", apartment_id)

    if not await apartment_service.delete_apartment(db, apartment):
        raise _persistence_failed("Failed to delete apartment")
    return MessageResponse(message="Apartment deleted")


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


@router.post(
    "/apartments/{apartment_id}/images",
    response_model=ImageUploadResponse,
    summary="Upload apartment images",
)
async def upload_images(
    apartment_id: uuid.UUID,
    files: list[UploadFile] = File(...),
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
) -> ImageUploadResponse:
    """Validate, optimize and store each file, then append the URLs to the gallery.

    Returns 400 when no file could be stored; otherwise per-file errors are
    reported alongside the updated apartment.
    """
    apartment = await _get_apartment_or_404(apartment_id, db)

    images: list[ImageFile] = []
    oversized: dict[str, str] = {}
    for upload in files:
        name = upload.filename or "image"
        # Too-large files are rejected from the multipart size, without reading them.
        if upload.size is not None and upload.size > MAX_UPLOAD_BYTES:
            oversized[name] = TOO_LARGE_MESSAGE
            continue
        images.append(ImageFile(name=name, content_type=upload.content_type or "", data=await upload.read()))

    outcome = await upload_apartment_images(
        storage,
        apartment_id,
        images,
        max_size_mb=settings.image_target_size_mb,
        cache_control=settings.storage_cache_control,
    )

    errors = {**oversized, **outcome.errors}
    if not outcome.urls:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "No images were uploaded", "errors": errors},
        )

    updated = await apartment_service.apply_apartment_changes(
        db, apartment, {"images": [*apartment.images, *outcome.urls]}
    )
    if updated is None:
        # The objects are stored but unreferenced; drop them again.
        await delete_apartment_images(storage, outcome.urls)
        raise _persistence_failed("Failed to save uploaded images")

    return ImageUploadResponse(
        apartment=ApartmentResponse.model_validate(updated),
        uploaded=outcome.urls,
        errors=errors,
    )


@router.delete(
    "/apartments/{apartment_id}/images",
    response_model=ApartmentResponse,
    summary="Remove an image from an apartment",
)
async def delete_image(
    apartment_id: uuid.UUID,
    url: str = Query(...),
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
) -> ApartmentResponse:
    apartment = await _get_apartment_or_404(apartment_id, db)
    if url not in apartment.images:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )

    images, principal_index = without_image(apartment.images, apartment.principal_image_index, url)
    updated = await apartment_service.apply_apartment_changes(
        db, apartment, {"images": images, "principal_image_index": principal_index}
    )
    if updated is None:
        raise _persistence_failed("Failed to update apartment")

    if not await delete_apartment_images(storage, [url]):
        logger.warning("Stored image %s of apartment %s was not removed", url, apartment_id)
    return ApartmentResponse.model_validate(updated)


# ---------------------------------------------------------------------------
# Availability periods
# ---------------------------------------------------------------------------


@router.get(
    "/apartments/{apartment_id}/availability",
    response_model=list[AvailabilityResponse],
    summary="List availability periods",
)
async def list_availability(apartment_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> list[AvailabilityResponse]:
    await _get_apartment_or_404(apartment_id, db)
    periods = await apartment_service.list_availability(db, apartment_id)
    return [AvailabilityResponse.model_validate(p) for p in periods]


@router.post(
    "/apartments/{apartment_id}/availability",
    response_model=AvailabilityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an availability period",
)
async def create_availability(
    apartment_id: uuid.UUID,
    body: AvailabilityCreate,
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    """Any period overlapping a searched stay hides the apartment from that search."""
    await _get_apartment_or_404(apartment_id, db)
    period = await apartment_service.create_availability_period(db, apartment_id, body)
    if period is None:
        raise _persistence_failed("Failed to create availability period")
    return AvailabilityResponse.model_validate(period)


@router.delete(
    "/availability/{period_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an availability period",
)
async def delete_availability(period_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> None:
    if not await apartment_service.delete_availability_period(db, period_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Availability period not found",
        )


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------


def _booking_list(bookings: list[Booking]) -> BookingListResponse:
    return BookingListResponse(
        items=[BookingWithApartmentResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/bookings", response_model=BookingListResponse, summary="List all bookings")
async def list_bookings(
    status_filter: BookingStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> BookingListResponse:
    """Bookings across all apartments, newest first."""
    return _booking_list(await booking_service.list_bookings(db, status_filter))


@router.get(
    "/apartments/{apartment_id}/bookings",
    response_model=BookingListResponse,
    summary="List bookings of an apartment",
)
async def list_apartment_bookings(apartment_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> BookingListResponse:
    await _get_apartment_or_404(apartment_id, db)
    return _booking_list(await booking_service.list_bookings_for_apartment(db, apartment_id))


@router.patch(
    "/bookings/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change a booking status",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> BookingResponse:
    """Set any status from any status. Confirming hides the apartment for those dates."""
    booking = await _get_booking_or_404(booking_id, db)
    updated = await booking_service.update_booking_status(db, booking, body.status)
    if updated is None:
        raise _persistence_failed("Failed to update booking")
    return BookingResponse.model_validate(updated)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a booking")
async def delete_booking(booking_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> None:
    booking = await _get_booking_or_404(booking_id, db)
    if not await booking_service.delete_booking(db, booking):
        raise _persistence_failed("Failed to delete booking")
