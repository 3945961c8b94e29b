"""SQLAlchemy models for Mendoza Apartments.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from mendoza.models.apartment import Apartment
from mendoza.models.availability import ApartmentAvailability
from mendoza.models.booking import BOOKING_STATUSES, Booking
from mendoza.models.user import User

__all__ = [
    "BOOKING_STATUSES",
    "Apartment",
    "ApartmentAvailability",
    "Booking",
    "User",
]
