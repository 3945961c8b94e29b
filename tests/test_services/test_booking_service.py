"""Tests for booking persistence error paths."""

from datetime import date

from mendoza.services import bookings as service


class TestStatusUpdate:
    async def test_status_persisted(self, db_session, make_apartment, make_booking):
        apartment = await make_apartment()
        booking = await make_booking(apartment, date(2025, 3, 1), date(2025, 3, 4))

        updated = await service.update_booking_status(db_session, booking, "confirmed")

        assert updated.status == "confirmed"

    async def test_status_rejected_by_database_returns_none(self, db_session, make_apartment, make_booking):
        apartment = await make_apartment()
        booking = await make_booking(apartment, date(2025, 3, 1), date(2025, 3, 4))

        # The check constraint refuses values outside pending/confirmed/cancelled.
        assert await service.update_booking_status(db_session, booking, "archived") is None
