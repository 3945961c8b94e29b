"""Booking model: a reservation request made from the public site."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mendoza.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "cancelled")
_STATUS_CHECK = "status IN ({})".format(", ".join(f"'{s}'" for s in BOOKING_STATUSES))


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guest's request to stay at an apartment for a date range."""

    __tablename__ = "bookings"

    apartment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("apartments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    total_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Computed by the client as nights x nightly rate; stored as supplied.
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Many-to-one only; loaded explicitly with selectinload where needed.
    apartment: Mapped["Apartment"] = relationship(lazy="raise")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        Index("ix_bookings_dates", "check_in", "check_out"),
        CheckConstraint(_STATUS_CHECK, name="ck_bookings_status"),
    )

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, apartment_id={self.apartment_id}, status={self.status})>"
