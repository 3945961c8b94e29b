"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

BookingStatus = Literal["pending", "confirmed", "cancelled"]

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Booking request submitted from the public booking form.

    ``total_price`` is computed by the client (nights x nightly rate) and
    stored as supplied.
    """

    apartment_id: uuid.UUID
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: str | None = Field(None, max_length=50)
    check_in: date
    check_out: date
    total_guests: int = Field(..., ge=1)
    total_price: Decimal = Field(..., gt=0)
    notes: str | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingStatusUpdate(BaseModel):
    """Admin status change. Any status may follow any other."""

    status: BookingStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    apartment_id: uuid.UUID
    guest_name: str
    guest_email: str
    guest_phone: str | None = None
    check_in: date
    check_out: date
    total_guests: int
    total_price: Decimal
    status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingApartmentSummary(BaseModel):
    id: uuid.UUID
    title: str
    address: str

    model_config = ConfigDict(from_attributes=True)


class BookingWithApartmentResponse(BookingResponse):
    """Booking with the apartment title and address, for the reservations view."""

    apartment: BookingApartmentSummary | None = None


class BookingListResponse(BaseModel):
    items: list[BookingWithApartmentResponse]
    total: int


class EmailResults(BaseModel):
    owner_sent: bool
    guest_sent: bool


class BookingCreatedResponse(BaseModel):
    """Reply to the public booking form."""

    success: bool = True
    booking: BookingResponse
    emails: EmailResults
