"""Search filters for the public availability search."""

from datetime import date

from pydantic import BaseModel, Field, model_validator


class SearchFilters(BaseModel):
    """Date range, party size and required amenities.

    Dates only narrow the search when both are given.
    """

    check_in: date | None = None
    check_out: date | None = None
    guests: int = Field(1, ge=1)
    amenities: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self) -> "SearchFilters":
        """Reject zero-night and inverted ranges."""
        if self.check_in is not None and self.check_out is not None and self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self

    @property
    def has_dates(self) -> bool:
        return self.check_in is not None and self.check_out is not None
