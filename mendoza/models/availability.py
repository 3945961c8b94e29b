"""Availability period model: owner-defined date ranges, separate from bookings."""

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from mendoza.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ApartmentAvailability(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A blocked (or explicitly open) period for an apartment.

    Any period overlapping a search window removes the apartment from search
    results, whatever its ``is_available`` value.
    """

    __tablename__ = "apartment_availability"

    apartment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("apartments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ApartmentAvailability(id={self.id}, apartment_id={self.apartment_id}, "
            f"{self.start_date}..{self.end_date}, available={self.is_available})>"
        )
