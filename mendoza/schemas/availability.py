"""Pydantic v2 schemas for apartment availability periods."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, model_validator


class AvailabilityCreate(BaseModel):
    """Schema for blocking (or marking open) a date range on an apartment."""

    start_date: date
    end_date: date
    is_available: bool = False
    notes: str | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "AvailabilityCreate":
        """Validate that end_date is not before start_date."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class AvailabilityResponse(BaseModel):
    id: uuid.UUID
    apartment_id: uuid.UUID
    start_date: date
    end_date: date
    is_available: bool
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
