"""Public apartment API routes: search, listing, detail, availability."""

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from mendoza.api.deps import get_db
from mendoza.schemas.apartment import ApartmentListResponse, ApartmentResponse
from mendoza.schemas.availability import AvailabilityResponse
from mendoza.schemas.search import SearchFilters
from mendoza.services.apartments import get_apartment, list_apartments, list_availability
from mendoza.services.search import search_available_apartments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/apartments", tags=["apartments"])


def _listing(apartments: list) -> ApartmentListResponse:
    return ApartmentListResponse(
        items=[ApartmentResponse.model_validate(apt) for apt in apartments],
        total=len(apartments),
    )


@router.get(
    "/search",
    response_model=ApartmentListResponse,
    summary="Search available apartments",
)
async def search_apartments(
    check_in: date | None = Query(None),
    check_out: date | None = Query(None),
    guests: int = Query(1, ge=1),
    amenities: list[str] = Query([]),
    db: AsyncSession = Depends(get_db),
) -> ApartmentListResponse:
    """Active apartments that fit the party, are free for the dates and have every amenity."""
    try:
        filters = SearchFilters(check_in=check_in, check_out=check_out, guests=guests, amenities=amenities)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[{"loc": ["query", *err["loc"]], "msg": err["msg"], "type": err["type"]} for err in exc.errors()],
        ) from None

    return _listing(await search_available_apartments(db, filters))


@router.get(
    "",
    response_model=ApartmentListResponse,
    summary="List active apartments",
)
async def list_active_apartments(db: AsyncSession = Depends(get_db)) -> ApartmentListResponse:
    return _listing(await list_apartments(db, active_only=True))


@router.get(
    "/{apartment_id}",
    response_model=ApartmentResponse,
    summary="Get an apartment by ID",
)
async def get_active_apartment(
    apartment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ApartmentResponse:
    """Retrieve a single active apartment. Returns 404 if missing or inactive."""
    apartment = await get_apartment(db, apartment_id)
    if apartment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Apartment not found",
        )
    return ApartmentResponse.model_validate(apartment)


@router.get(
    "/{apartment_id}/availability",
    response_model=list[AvailabilityResponse],
    summary="List availability periods of an apartment",
)
async def get_apartment_availability(
    apartment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> list[AvailabilityResponse]:
    """Owner-blocked and open periods, for the calendar on the detail page."""
    apartment = await get_apartment(db, apartment_id)
    if apartment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Apartment not found",
        )
    periods = await list_availability(db, apartment_id)
    return [AvailabilityResponse.model_validate(p) for p in periods]
