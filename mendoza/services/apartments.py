"""Apartment and availability-period persistence.

Every function logs database errors and returns a sentinel (``None``,
``[]`` or ``False``) instead of raising; routers decide the HTTP status.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mendoza.models.apartment import Apartment
from mendoza.models.availability import ApartmentAvailability
from mendoza.schemas.apartment import ApartmentCreate, ApartmentUpdate
from mendoza.schemas.availability import AvailabilityCreate
from mendoza.services.maps import extract_coordinates

logger = logging.getLogger(__name__)


def _fill_coordinates(values: dict[str, Any]) -> dict[str, Any]:
    """Store coordinates parsed from a new maps link when none were supplied."""
    if not values.get("google_maps_url"):
        return values
    if values.get("latitude") is not None and values.get("longitude") is not None:
        return values
    coords = extract_coordinates(values["google_maps_url"])
    if coords is None:
        return values
    return {**values, "latitude": coords.lat, "longitude": coords.lng}


async def get_apartment(db: AsyncSession, apartment_id: uuid.UUID, *, active_only: bool = True) -> Apartment | None:
    """Fetch one apartment; public callers only see active listings."""
    query = select(Apartment).where(Apartment.id == apartment_id)
    if active_only:
        query = query.where(Apartment.is_active.is_(True))
    try:
        result = await db.execute(query)
    except SQLAlchemyError:
        logger.exception("Error fetching apartment %s", apartment_id)
        return None
    return result.scalar_one_or_none()


async def list_apartments(db: AsyncSession, *, active_only: bool = False) -> list[Apartment]:
    """All apartments, newest first."""
    query = select(Apartment)
    if active_only:
        query = query.where(Apartment.is_active.is_(True))
    try:
        result = await db.execute(query.order_by(Apartment.created_at.desc()))
    except SQLAlchemyError:
        logger.exception("Error fetching apartments")
        return []
    return list(result.scalars().all())


async def create_apartment(db: AsyncSession, body: ApartmentCreate) -> Apartment | None:
    apartment = Apartment(**_fill_coordinates(body.model_dump()))
    try:
        db.add(apartment)
        await db.flush()
        await db.refresh(apartment)
    except SQLAlchemyError:
        logger.exception("Error creating apartment %r", body.title)
        await db.rollback()
        return None
    logger.info("Created apartment %s (%s)", apartment.id, apartment.title)
    return apartment


async def update_apartment(db: AsyncSession, apartment: Apartment, body: ApartmentUpdate) -> Apartment | None:
    """Apply only the fields explicitly set on ``body``."""
    return await apply_apartment_changes(db, apartment, body.model_dump(exclude_unset=True))


async def apply_apartment_changes(db: AsyncSession, apartment: Apartment, changes: dict[str, Any]) -> Apartment | None:
    apartment_id = apartment.id
    changes = _fill_coordinates(changes)
    for field, value in changes.items():
        setattr(apartment, field, value)
    try:
        db.add(apartment)
        await db.flush()
        await db.refresh(apartment)
    except SQLAlchemyError:
        logger.exception("Error updating apartment %s", apartment_id)
        await db.rollback()
        return None
    return apartment


async def delete_apartment(db: AsyncSession, apartment: Apartment) -> bool:
    """Hard-delete an apartment; bookings and periods go with it by cascade."""
    apartment_id = apartment.id
    try:
        await db.delete(apartment)
        await db.flush()
    except SQLAlchemyError:
        logger.exception("Error deleting apartment %s", apartment_id)
        await db.rollback()
        return False
    logger.info("Deleted apartment %s", apartment_id)
    return True


# ---------------------------------------------------------------------------
# Availability periods
# ---------------------------------------------------------------------------


async def list_availability(db: AsyncSession, apartment_id: uuid.UUID) -> list[ApartmentAvailability]:
    query = (
        select(ApartmentAvailability)
        .where(ApartmentAvailability.apartment_id == apartment_id)
        .order_by(ApartmentAvailability.start_date.asc())
    )
    try:
        result = await db.execute(query)
    except SQLAlchemyError:
        logger.exception("Error fetching availability for apartment %s", apartment_id)
        return []
    return list(result.scalars().all())


async def create_availability_period(
    db: AsyncSession,
    apartment_id: uuid.UUID,
    body: AvailabilityCreate,
) -> ApartmentAvailability | None:
    period = ApartmentAvailability(apartment_id=apartment_id, **body.model_dump())
    try:
        db.add(period)
        await db.flush()
        await db.refresh(period)
    except SQLAlchemyError:
        logger.exception("Error creating availability period for apartment %s", apartment_id)
        await db.rollback()
        return None
    return period


async def delete_availability_period(db: AsyncSession, period_id: uuid.UUID) -> bool:
    """Delete a period by id. Returns ``False`` when it does not exist or the delete fails."""
    try:
        period = await db.get(ApartmentAvailability, period_id)
        if period is None:
            return False
        await db.delete(period)
        await db.flush()
    except SQLAlchemyError:
        logger.exception("Error deleting availability period %s", period_id)
        await db.rollback()
        return False
    return True
