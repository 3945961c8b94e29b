"""Availability search over active apartments.

The listing query fails closed: any error yields no results. The two
exclusion lookups (owner-blocked periods and confirmed bookings) fail open:
an error there is logged and the search proceeds without that exclusion.
"""

import logging
import uuid
from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mendoza.models.apartment import Apartment
from mendoza.models.availability import ApartmentAvailability
from mendoza.models.booking import Booking
from mendoza.schemas.search import SearchFilters

logger = logging.getLogger(__name__)


def filter_by_amenities(apartments: Iterable[Apartment], required: Sequence[str]) -> list[Apartment]:
    """Keep apartments whose characteristics have every required key set truthy.

    Characteristics are free-form, so this runs in memory after the query.
    A missing key counts as not having the amenity.
    """
    if not required:
        return list(apartments)
    return [apt for apt in apartments if all((apt.characteristics or {}).get(key) for key in required)]


def blocked_periods_query(check_in: date, check_out: date) -> Select:
    """Apartment ids with any availability period overlapping the stay (inclusive)."""
    return select(ApartmentAvailability.apartment_id).where(
        ApartmentAvailability.start_date <= check_out,
        ApartmentAvailability.end_date >= check_in,
    )


def confirmed_bookings_query(check_in: date, check_out: date) -> Select:
    """Apartment ids with a confirmed booking overlapping the stay (inclusive).

    Pending requests are not guaranteed and never hide an apartment.
    """
    return select(Booking.apartment_id).where(
        Booking.status == "confirmed",
        Booking.check_in <= check_out,
        Booking.check_out >= check_in,
    )


async def _collect_excluded_ids(db: AsyncSession, query: Select, label: str) -> set[uuid.UUID]:
    try:
        result = await db.execute(query)
    except SQLAlchemyError as exc:
        logger.warning("Error checking %s, continuing without that exclusion: %s", label, exc)
        # Search is read-only; rolling back clears an aborted transaction.
        await db.rollback()
        return set()
    return set(result.scalars().all())


async def search_available_apartments(db: AsyncSession, filters: SearchFilters) -> list[Apartment]:
    """Return active apartments that fit the party and are free for the dates.

    Results are ordered newest listing first. Nothing is cached; every call
    queries the database.
    """
    query = select(Apartment).where(
        Apartment.is_active.is_(True),
        Apartment.max_guests >= filters.guests,
    )

    if filters.has_dates:
        check_in, check_out = filters.check_in, filters.check_out
        logger.info("Checking availability for %s to %s", check_in, check_out)

        excluded = await _collect_excluded_ids(
            db, blocked_periods_query(check_in, check_out), "availability periods"
        )
        excluded |= await _collect_excluded_ids(
            db, confirmed_bookings_query(check_in, check_out), "confirmed bookings"
        )

        if excluded:
            logger.info("Excluding %d unavailable apartment(s)", len(excluded))
            query = query.where(Apartment.id.not_in(excluded))

    try:
        result = await db.execute(query.order_by(Apartment.created_at.desc()))
        apartments = list(result.scalars().all())
    except SQLAlchemyError:
        logger.exception("Apartment search query failed")
        return []

    if filters.amenities:
        apartments = filter_by_amenities(apartments, filters.amenities)
        logger.info("Filtered to %d apartment(s) with amenities %s", len(apartments), filters.amenities)

    logger.info("Found %d available apartment(s)", len(apartments))
    return apartments
