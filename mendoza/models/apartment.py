"""Apartment model: a rental unit listing."""

from decimal import Decimal

from sqlalchemy import JSON, Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mendoza.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Apartment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A bookable apartment shown on the public site."""

    __tablename__ = "apartments"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    address: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    latitude: Mapped[float | None] = mapped_column(default=None)
    longitude: Mapped[float | None] = mapped_column(default=None)
    google_maps_url: Mapped[str | None] = mapped_column(String(1024), default=None)

    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Ordered public URLs. principal_image_index is denormalized and may point
    # outside the list after images are removed; readers clamp it.
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    principal_image_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Open-ended amenity map (wifi, pool, bedrooms, ...). Missing keys are falsy.
    characteristics: Mapped[dict[str, bool | int | float]] = mapped_column(JSON, default=dict, nullable=False)

    contact_email: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_phone: Mapped[str | None] = mapped_column(String(50), default=None)
    whatsapp_number: Mapped[str | None] = mapped_column(String(50), default=None)

    def __repr__(self) -> str:
        return f"<Apartment(id={self.id}, title={self.title!r}, active={self.is_active})>"
