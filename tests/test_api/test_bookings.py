"""Tests for the public booking request endpoint."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mendoza.config import settings
from mendoza.models import Booking

pytestmark = pytest.mark.asyncio


def _payload(apartment_id, **overrides) -> dict:
    payload = {
        "apartment_id": str(apartment_id),
        "guest_name": "Camila Rojas",
        "guest_email": "camila@example.com",
        "guest_phone": "+56 9 5555 0203",
        "check_in": "2025-03-10",
        "check_out": "2025-03-15",
        "total_guests": 2,
        "total_price": 500.00,
        "notes": "Late check-in",
    }
    payload.update(overrides)
    return payload


class TestCreateBooking:
    async def test_created_pending_and_emails_sent(
        self, client: AsyncClient, make_apartment, email_sender, owner_address
    ):
        apartment = await make_apartment(title="Loft Quinta")

        response = await client.post("/api/v1/bookings", json=_payload(apartment.id))

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["emails"] == {"owner_sent": True, "guest_sent": True}
        booking = data["booking"]
        assert booking["status"] == "pending"
        assert booking["apartment_id"] == str(apartment.id)
        assert float(booking["total_price"]) == 500.0
        subjects = {subject for _, subject, _ in email_sender.sent}
        assert subjects == {
            "New Booking Request - Loft Quinta",
            "Booking Request Confirmation - Loft Quinta",
        }

    async def test_client_cannot_choose_status(self, client: AsyncClient, make_apartment, owner_address):
        apartment = await make_apartment()

        response = await client.post("/api/v1/bookings", json=_payload(apartment.id, status="confirmed"))

        assert response.status_code == 201
        assert response.json()["booking"]["status"] == "pending"

    async def test_booking_committed_before_emails(
        self, client: AsyncClient, make_apartment, email_sender, owner_address, monkeypatch
    ):
        apartment = await make_apartment()
        emails_at_commit: list[int] = []
        original_commit = AsyncSession.commit

        async def recording_commit(self) -> None:
            emails_at_commit.append(len(email_sender.sent))
            await original_commit(self)

        monkeypatch.setattr(AsyncSession, "commit", recording_commit)

        response = await client.post("/api/v1/bookings", json=_payload(apartment.id))

        assert response.status_code == 201
        assert emails_at_commit[0] == 0
        assert len(email_sender.sent) == 2

    async def test_failed_commit_sends_no_emails(
        self, client: AsyncClient, make_apartment, email_sender, owner_address, database, monkeypatch
    ):
        apartment = await make_apartment()

        async def failing_commit(self) -> None:
            raise SQLAlchemyError("database went away")

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)

        response = await client.post("/api/v1/bookings", json=_payload(apartment.id))

        assert response.status_code == 500
        assert email_sender.sent == []

        monkeypatch.undo()
        async with database.session() as session:
            result = await session.execute(select(Booking))
            assert result.scalars().all() == []

    async def test_email_failure_keeps_booking(
        self, client: AsyncClient, make_apartment, email_sender, owner_address, database
    ):
        apartment = await make_apartment()
        email_sender.outcomes[owner_address] = False
        email_sender.outcomes["camila@example.com"] = RuntimeError("smtp down")

        response = await client.post("/api/v1/bookings", json=_payload(apartment.id))

        assert response.status_code == 201
        assert response.json()["emails"] == {"owner_sent": False, "guest_sent": False}
        async with database.session() as session:
            stored = (await session.execute(select(Booking))).scalars().all()
        assert len(stored) == 1

    async def test_missing_owner_address_reports_not_sent(
        self, client: AsyncClient, make_apartment, email_sender, monkeypatch
    ):
        monkeypatch.setattr(settings, "email_recipient", "")
        apartment = await make_apartment()

        response = await client.post("/api/v1/bookings", json=_payload(apartment.id))

        assert response.status_code == 201
        assert response.json()["emails"] == {"owner_sent": False, "guest_sent": False}
        assert email_sender.sent == []

    async def test_unknown_apartment_is_404(self, client: AsyncClient):
        response = await client.post("/api/v1/bookings", json=_payload(uuid.uuid4()))
        assert response.status_code == 404

    async def test_inactive_apartment_is_404(self, client: AsyncClient, make_apartment):
        apartment = await make_apartment(is_active=False)
        response = await client.post("/api/v1/bookings", json=_payload(apartment.id))
        assert response.status_code == 404

    @pytest.mark.parametrize(
        "overrides",
        [
            {"check_out": "2025-03-10"},
            {"check_out": "2025-03-01"},
            {"guest_email": "not-an-email"},
            {"total_guests": 0},
            {"total_price": 0},
            {"guest_name": ""},
        ],
    )
    async def test_invalid_payload_is_422(self, client: AsyncClient, make_apartment, overrides):
        apartment = await make_apartment()
        response = await client.post("/api/v1/bookings", json=_payload(apartment.id, **overrides))
        assert response.status_code == 422
