"""Tests for the admin reservations endpoints."""

import uuid
from datetime import date

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestListBookings:
    async def test_all_bookings_with_apartment_summary(
        self, client: AsyncClient, admin_headers, make_apartment, make_booking
    ):
        loft = await make_apartment(title="Loft Quinta", address="Emilio Civit 350")
        await make_booking(loft, date(2025, 3, 10), date(2025, 3, 12))

        response = await client.get("/api/v1/admin/bookings", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["apartment"]["title"] == "Loft Quinta"
        assert data["items"][0]["apartment"]["address"] == "Emilio Civit 350"

    async def test_filter_by_status(self, client: AsyncClient, admin_headers, make_apartment, make_booking):
        apartment = await make_apartment()
        await make_booking(apartment, date(2025, 3, 10), date(2025, 3, 12), status="pending")
        confirmed = await make_booking(apartment, date(2025, 4, 10), date(2025, 4, 12), status="confirmed")

        response = await client.get("/api/v1/admin/bookings", params={"status": "confirmed"}, headers=admin_headers)

        assert [item["id"] for item in response.json()["items"]] == [str(confirmed.id)]

    async def test_apartment_bookings_ordered_by_check_in(
        self, client: AsyncClient, admin_headers, make_apartment, make_booking
    ):
        apartment = await make_apartment()
        other = await make_apartment(title="Other")
        late = await make_booking(apartment, date(2025, 5, 1), date(2025, 5, 3))
        early = await make_booking(apartment, date(2025, 2, 1), date(2025, 2, 3))
        await make_booking(other, date(2025, 3, 1), date(2025, 3, 3))

        response = await client.get(f"/api/v1/admin/apartments/{apartment.id}/bookings", headers=admin_headers)

        assert [item["id"] for item in response.json()["items"]] == [str(early.id), str(late.id)]


class TestBookingStatus:
    async def test_confirming_hides_apartment_from_search(
        self, client: AsyncClient, admin_headers, make_apartment, make_booking
    ):
        apartment = await make_apartment()
        booking = await make_booking(apartment, date(2025, 3, 10), date(2025, 3, 15))
        search = {"check_in": "2025-03-12", "check_out": "2025-03-20"}

        before = await client.get("/api/v1/apartments/search", params=search)
        response = await client.patch(
            f"/api/v1/admin/bookings/{booking.id}/status", json={"status": "confirmed"}, headers=admin_headers
        )
        after = await client.get("/api/v1/apartments/search", params=search)

        assert before.json()["total"] == 1
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert after.json()["total"] == 0

    @pytest.mark.parametrize(("start", "end"), [("confirmed", "pending"), ("cancelled", "confirmed")])
    async def test_any_transition_allowed(
        self, client: AsyncClient, admin_headers, make_apartment, make_booking, start, end
    ):
        booking = await make_booking(await make_apartment(), date(2025, 3, 10), date(2025, 3, 15), status=start)

        response = await client.patch(
            f"/api/v1/admin/bookings/{booking.id}/status", json={"status": end}, headers=admin_headers
        )

        assert response.json()["status"] == end

    async def test_unknown_status_is_422(self, client: AsyncClient, admin_headers, make_apartment, make_booking):
        booking = await make_booking(await make_apartment(), date(2025, 3, 10), date(2025, 3, 15))
        response = await client.patch(
            f"/api/v1/admin/bookings/{booking.id}/status", json={"status": "checked_in"}, headers=admin_headers
        )
        assert response.status_code == 422

    async def test_unknown_booking_is_404(self, client: AsyncClient, admin_headers):
        response = await client.patch(
            f"/api/v1/admin/bookings/{uuid.uuid4()}/status", json={"status": "confirmed"}, headers=admin_headers
        )
        assert response.status_code == 404


class TestDeleteBooking:
    async def test_delete(self, client: AsyncClient, admin_headers, make_apartment, make_booking):
        booking = await make_booking(await make_apartment(), date(2025, 3, 10), date(2025, 3, 15))

        response = await client.delete(f"/api/v1/admin/bookings/{booking.id}", headers=admin_headers)
        listed = await client.get("/api/v1/admin/bookings", headers=admin_headers)

        assert response.status_code == 204
        assert listed.json()["total"] == 0

    async def test_delete_unknown_is_404(self, client: AsyncClient, admin_headers):
        response = await client.delete(f"/api/v1/admin/bookings/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404
