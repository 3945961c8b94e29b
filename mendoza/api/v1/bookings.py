"""Public booking request route."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mendoza.api.deps import get_db, get_email_sender
from mendoza.config import settings
from mendoza.schemas.booking import BookingCreate, BookingCreatedResponse, BookingResponse, EmailResults
from mendoza.services.apartments import get_apartment
from mendoza.services.bookings import create_booking
from mendoza.services.email import EmailSender, send_booking_emails

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
)
async def request_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
) -> BookingCreatedResponse:
    """Store a pending booking and notify the owner and the guest.

    The booking stays stored whatever happens to the e-mails; their outcome
    is reported in ``emails``.
    """
    apartment = await get_apartment(db, body.apartment_id)
    if apartment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Apartment not found",
        )

    booking = await create_booking(db, body)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking",
        )

    # The booking must be committed before any e-mail goes out.
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        logger.exception("Error committing booking for apartment %s", body.apartment_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking",
        ) from exc

    emails = await send_booking_emails(sender, booking, apartment, settings.email_recipient)

    return BookingCreatedResponse(
        booking=BookingResponse.model_validate(booking),
        emails=EmailResults(owner_sent=emails.owner_sent, guest_sent=emails.guest_sent),
    )
