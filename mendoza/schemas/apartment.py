"""Pydantic v2 request/response schemas for apartment endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, model_validator

from mendoza.services.contact import whatsapp_url as build_whatsapp_url
from mendoza.services.maps import best_coordinates

# Characteristic values are flags (wifi, pool) or counts (bedrooms).
Characteristics = dict[str, bool | int | float]

# Columns stored as NOT NULL: an update may omit them but not clear them.
_NON_NULLABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "address",
        "price_per_night",
        "max_guests",
        "images",
        "principal_image_index",
        "characteristics",
        "contact_email",
        "is_active",
    }
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def resolve_cover_index(images: list[str], index: int | None) -> int | None:
    """Clamp a stored principal image index into ``[0, len(images) - 1]``.

    Negative values map to the first image, values past the end to the last.
    Returns ``None`` when there are no images.
    """
    if not images:
        return None
    return min(max(0, index or 0), len(images) - 1)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ApartmentCreate(BaseModel):
    """Schema for creating an apartment from the admin form."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    address: str = Field("", max_length=512)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    google_maps_url: str | None = Field(None, max_length=1024)
    price_per_night: Decimal = Field(..., gt=0)
    max_guests: int = Field(..., ge=1)
    images: list[str] = Field(default_factory=list)
    principal_image_index: int = 0
    characteristics: Characteristics = Field(default_factory=dict)
    contact_email: EmailStr
    contact_phone: str | None = Field(None, max_length=50)
    whatsapp_number: str | None = Field(None, max_length=50)
    is_active: bool = True


class ApartmentUpdate(BaseModel):
    """Schema for partially updating an apartment. All fields optional, but required columns cannot be set to null."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(None, max_length=512)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    google_maps_url: str | None = Field(None, max_length=1024)
    price_per_night: Decimal | None = Field(None, gt=0)
    max_guests: int | None = Field(None, ge=1)
    images: list[str] | None = None
    principal_image_index: int | None = None
    characteristics: Characteristics | None = None
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)
    whatsapp_number: str | None = Field(None, max_length=50)
    is_active: bool | None = None

    @model_validator(mode="after")
    def _reject_cleared_required_fields(self) -> "ApartmentUpdate":
        cleared = sorted(name for name in _NON_NULLABLE_FIELDS & self.model_fields_set if getattr(self, name) is None)
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CoordinatesResponse(BaseModel):
    lat: float
    lng: float


class ApartmentResponse(BaseModel):
    """Apartment as shown on the public site and in the admin list."""

    id: uuid.UUID
    title: str
    description: str
    address: str
    latitude: float | None = None
    longitude: float | None = None
    google_maps_url: str | None = None
    price_per_night: Decimal
    max_guests: int
    images: list[str]
    principal_image_index: int
    characteristics: Characteristics
    contact_email: str
    contact_phone: str | None = None
    whatsapp_number: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cover_image_index(self) -> int | None:
        return resolve_cover_index(self.images, self.principal_image_index)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cover_image(self) -> str | None:
        index = self.cover_image_index
        return None if index is None else self.images[index]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ordered_images(self) -> list[str]:
        """Images with the cover first, the rest in their stored order."""
        index = self.cover_image_index
        if index is None:
            return []
        return [self.images[index], *self.images[:index], *self.images[index + 1 :]]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def coordinates(self) -> CoordinatesResponse | None:
        coords = best_coordinates(self.latitude, self.longitude, self.google_maps_url)
        return None if coords is None else CoordinatesResponse(lat=coords.lat, lng=coords.lng)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def whatsapp_url(self) -> str | None:
        return build_whatsapp_url(self)


class ApartmentListResponse(BaseModel):
    """List of apartments with a total count."""

    items: list[ApartmentResponse]
    total: int


class ImageUploadResponse(BaseModel):
    """Result of a multi-file image upload: the updated apartment plus per-file errors."""

    apartment: ApartmentResponse
    uploaded: list[str]
    errors: dict[str, str]
