"""Booking persistence for the public booking form and the reservations view.

Like the apartment repository, these functions log database errors and
return ``None``, ``[]`` or ``False`` rather than raising.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mendoza.models.booking import Booking
from mendoza.schemas.booking import BookingCreate, BookingStatus

logger = logging.getLogger(__name__)


async def create_booking(db: AsyncSession, body: BookingCreate) -> Booking | None:
    """Store a booking request as ``pending``.

    No overlap check happens here: two guests may request the same dates, and
    only a confirmed booking hides the apartment from later searches.
    """
    booking = Booking(**body.model_dump(), status="pending")
    try:
        db.add(booking)
        await db.flush()
        await db.refresh(booking)
    except SQLAlchemyError:
        logger.exception("Error creating booking for apartment %s", body.apartment_id)
        await db.rollback()
        return None
    logger.info("Created booking %s for apartment %s", booking.id, booking.apartment_id)
    return booking


async def get_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking | None:
    try:
        return await db.get(Booking, booking_id)
    except SQLAlchemyError:
        logger.exception("Error fetching booking %s", booking_id)
        return None


async def list_bookings(db: AsyncSession, status: BookingStatus | None = None) -> list[Booking]:
    """All bookings, newest first, with their apartment loaded."""
    query = select(Booking).options(selectinload(Booking.apartment))
    if status is not None:
        query = query.where(Booking.status == status)
    try:
        result = await db.execute(query.order_by(Booking.created_at.desc()))
    except SQLAlchemyError:
        logger.exception("Error fetching bookings")
        return []
    return list(result.scalars().all())


async def list_bookings_for_apartment(db: AsyncSession, apartment_id: uuid.UUID) -> list[Booking]:
    """Bookings of one apartment ordered by check-in date."""
    query = (
        select(Booking)
        .options(selectinload(Booking.apartment))
        .where(Booking.apartment_id == apartment_id)
        .order_by(Booking.check_in.asc())
    )
    try:
        result = await db.execute(query)
    except SQLAlchemyError:
        logger.exception("Error fetching bookings for apartment %s", apartment_id)
        return []
    return list(result.scalars().all())


async def update_booking_status(db: AsyncSession, booking: Booking, status: BookingStatus) -> Booking | None:
    """Overwrite the status. There are no transition rules."""
    booking_id = booking.id
    previous = booking.status
    booking.status = status
    try:
        db.add(booking)
        await db.flush()
        await db.refresh(booking)
    except SQLAlchemyError:
        logger.exception("Error updating status of booking %s", booking_id)
        await db.rollback()
        return None
    logger.info("Booking %s status %s -> %s", booking_id, previous, status)
    return booking


async def delete_booking(db: AsyncSession, booking: Booking) -> bool:
    booking_id = booking.id
    try:
        await db.delete(booking)
        await db.flush()
    except SQLAlchemyError:
        logger.exception("Error deleting booking %s", booking_id)
        await db.rollback()
        return False
    return True
