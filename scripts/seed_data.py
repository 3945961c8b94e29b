"""Seed the database with an admin account and sample Mendoza apartments.

Creates every table, one admin user, a handful of apartments around Mendoza
city and Chacras de Coria, owner-blocked periods, and bookings in each status
so that the search exclusions can be tried out by hand.

Run from the project root:
    python -m scripts.seed_data
"""

import asyncio
import os
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add project root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from mendoza.auth.security import hash_password
from mendoza.config import settings
from mendoza.database import Database
from mendoza.models import Apartment, ApartmentAvailability, Booking, User

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN_USER = {
    "email": os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com"),
    "password": os.environ.get("SEED_ADMIN_PASSWORD", "admin1234"),
    "name": "Site Admin",
}

APARTMENTS = [
    {
        "title": "Departamento Plaza Independencia",
        "description": (
            "Bright one-bedroom apartment facing Plaza Independencia, two blocks from "
            "Avenida Arístides Villanueva. Walk to wine bars, the pedestrian mall and "
            "the central market."
        ),
        "address": "Av. Sarmiento 120, Ciudad de Mendoza",
        "google_maps_url": "https://www.google.com/maps?q=-32.8894,-68.8458",
        "price_per_night": Decimal("65.00"),
        "max_guests": 2,
        "characteristics": {"wifi": True, "air_conditioning": True, "kitchen": True, "bedrooms": 1},
        "contact_phone": "+54 261 555-0101",
        "whatsapp_number": "+54 9 261 555-0101",
    },
    {
        "title": "Casa Chacras de Coria",
        "description": (
            "Three-bedroom house with garden and pool in Chacras de Coria, surrounded by "
            "vineyards. Fifteen minutes to Luján de Cuyo wineries."
        ),
        "address": "Viamonte 4800, Chacras de Coria, Luján de Cuyo",
        "google_maps_url": "https://www.google.com/maps/place/Chacras+de+Coria/@-32.9876,-68.8731,15z",
        "price_per_night": Decimal("140.00"),
        "max_guests": 6,
        "characteristics": {
            "wifi": True,
            "pool": True,
            "parking": True,
            "kitchen": True,
            "bbq": True,
            "bedrooms": 3,
        },
        "contact_phone": "+54 261 555-0102",
        "whatsapp_number": None,
    },
    {
        "title": "Loft Quinta Sección",
        "description": (
            "Modern loft near Parque General San Martín with a balcony and Andes views. "
            "Ideal for couples visiting for Vendimia."
        ),
        "address": "Emilio Civit 350, Ciudad de Mendoza",
        "latitude": -32.8905,
        "longitude": -68.8610,
        "price_per_night": Decimal("80.00"),
        "max_guests": 3,
        "characteristics": {"wifi": True, "balcony": True, "air_conditioning": True, "bedrooms": 1},
        "contact_phone": None,
        "whatsapp_number": "+54 9 261 555-0103",
    },
    {
        "title": "Cabaña Potrerillos",
        "description": "Mountain cabin overlooking the Potrerillos reservoir. Wood stove, no air conditioning.",
        "address": "Ruta 82 km 48, Potrerillos, Luján de Cuyo",
        "google_maps_url": "https://www.google.com/maps/@-32.9611,-69.2005,13z",
        "price_per_night": Decimal("95.00"),
        "max_guests": 4,
        "characteristics": {"wifi": False, "parking": True, "fireplace": True, "bedrooms": 2},
        "contact_phone": "+54 261 555-0104",
        "whatsapp_number": "+54 9 261 555-0104",
        "is_active": False,
    },
]


def _build_periods(apartments: dict[str, Apartment], today: date) -> list[ApartmentAvailability]:
    """Owner-blocked periods (maintenance, family use)."""
    return [
        ApartmentAvailability(
            apartment_id=apartments["Casa Chacras de Coria"].id,
            start_date=today + timedelta(days=40),
            end_date=today + timedelta(days=47),
            is_available=False,
            notes="Pool maintenance",
        ),
        ApartmentAvailability(
            apartment_id=apartments["Departamento Plaza Independencia"].id,
            start_date=today + timedelta(days=60),
            end_date=today + timedelta(days=62),
            is_available=False,
            notes="Family visit",
        ),
    ]


def _build_bookings(apartments: dict[str, Apartment], today: date) -> list[dict]:
    """Bookings in each status; only the confirmed ones block search results."""
    return [
        {
            "apartment": apartments["Departamento Plaza Independencia"],
            "guest_name": "Lucía Fernández",
            "guest_email": "lucia.fernandez@example.com",
            "guest_phone": "+54 11 5555-0201",
            "check_in": today + timedelta(days=10),
            "check_out": today + timedelta(days=14),
            "total_guests": 2,
            "status": "confirmed",
            "notes": "Arriving on the late flight from Buenos Aires",
        },
        {
            "apartment": apartments["Casa Chacras de Coria"],
            "guest_name": "Tom Becker",
            "guest_email": "tom.becker@example.com",
            "guest_phone": None,
            "check_in": today + timedelta(days=20),
            "check_out": today + timedelta(days=27),
            "total_guests": 5,
            "status": "pending",
            "notes": "Interested in a winery tour recommendation",
        },
        {
            "apartment": apartments["Loft Quinta Sección"],
            "guest_name": "Camila Rojas",
            "guest_email": "camila.rojas@example.com",
            "guest_phone": "+56 9 5555 0203",
            "check_in": today + timedelta(days=5),
            "check_out": today + timedelta(days=8),
            "total_guests": 2,
            "status": "cancelled",
            "notes": None,
        },
    ]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample data.

    Idempotent: the admin user and the sample apartments (matched by title)
    are deleted first, together with their bookings and periods.
    """
    database = Database(settings.async_database_url)
    await database.create_all()

    async with database.session() as session:
        titles = [apt["title"] for apt in APARTMENTS]
        existing = await session.execute(select(Apartment.id).where(Apartment.title.in_(titles)))
        existing_ids = list(existing.scalars().all())
        if existing_ids:
            print(f"⚠️  {len(existing_ids)} sample apartment(s) already exist. Deleting and re-seeding...")
            # Bulk deletes bypass the ORM, so remove dependents explicitly.
            await session.execute(delete(Booking).where(Booking.apartment_id.in_(existing_ids)))
            await session.execute(
                delete(ApartmentAvailability).where(ApartmentAvailability.apartment_id.in_(existing_ids))
            )
            await session.execute(delete(Apartment).where(Apartment.id.in_(existing_ids)))
        await session.execute(delete(User).where(User.email == ADMIN_USER["email"]))
        await session.flush()

        # ------------------------------------------------------------------
        # 1. Create admin user
        # ------------------------------------------------------------------
        user = User(
            email=ADMIN_USER["email"],
            hashed_password=hash_password(ADMIN_USER["password"]),
            name=ADMIN_USER["name"],
            is_active=True,
            role="admin",
        )
        session.add(user)
        await session.flush()
        print(f"✅ Created admin user: {user.email} (id={user.id})")

        # ------------------------------------------------------------------
        # 2. Create apartments
        # ------------------------------------------------------------------
        created: dict[str, Apartment] = {}
        for apt_data in APARTMENTS:
            apartment = Apartment(contact_email=ADMIN_USER["email"], **apt_data)
            session.add(apartment)
            await session.flush()
            created[apartment.title] = apartment
            print(f"   🏠 {apartment.title} (${apartment.price_per_night}/night, up to {apartment.max_guests})")

        # ------------------------------------------------------------------
        # 3. Availability periods and bookings
        # ------------------------------------------------------------------
        today = date.today()
        periods = _build_periods(created, today)
        session.add_all(periods)

        bookings_data = _build_bookings(created, today)
        for bdata in bookings_data:
            apartment = bdata.pop("apartment")
            nights = (bdata["check_out"] - bdata["check_in"]).days
            session.add(
                Booking(
                    apartment_id=apartment.id,
                    total_price=apartment.price_per_night * nights,
                    **bdata,
                )
            )
        await session.flush()

    await database.dispose()

    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    print(f"   Admin:         {ADMIN_USER['email']} / {ADMIN_USER['password']}")
    print(f"   Apartments:    {len(created)}")
    print(f"   Periods:       {len(periods)}")
    print(f"   Bookings:      {len(bookings_data)}")
    print("=" * 60)
    print("🎉 Done! You can now log in at /api/v1/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
