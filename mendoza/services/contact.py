"""WhatsApp deep links for contacting an apartment's owner."""

import logging
import re
from datetime import date
from decimal import Decimal
from typing import Protocol
from urllib.parse import quote

from mendoza.services.dates import format_long_date, pluralize

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")


class HasContact(Protocol):
    id: object
    title: str
    whatsapp_number: str | None
    contact_phone: str | None


class HasStay(Protocol):
    check_in: date
    check_out: date
    total_guests: int
    total_price: Decimal
    nights: int


def clean_phone_number(phone: str | None) -> str:
    """Strip everything except digits (``+54 9 261-555`` -> ``549261555``)."""
    return _NON_DIGITS.sub("", phone or "")


def contact_number(apartment: HasContact) -> str:
    """Digits of the WhatsApp number, falling back to the contact phone."""
    return clean_phone_number(apartment.whatsapp_number) or clean_phone_number(apartment.contact_phone)


def whatsapp_message(apartment: HasContact, booking: HasStay | None = None) -> str:
    if booking is None:
        return (
            f"Hi! I'm interested in {apartment.title}. "
            "Could you please provide more information about availability and pricing?"
        )
    return (
        f"Hi! I'm interested in booking {apartment.title} for {pluralize(booking.nights, 'night')} "
        f"({format_long_date(booking.check_in)} to {format_long_date(booking.check_out)}) "
        f"for {pluralize(booking.total_guests, 'guest')}. Total: ${booking.total_price}. "
        "Please let me know about availability and payment details."
    )


def whatsapp_url(apartment: HasContact, booking: HasStay | None = None) -> str | None:
    """Build a ``wa.me`` chat link with a prefilled message, or ``None`` without a number."""
    number = contact_number(apartment)
    if not number:
        logger.debug("No WhatsApp or contact phone for apartment %s", apartment.id)
        return None
    return f"https://wa.me/{number}?text={quote(whatsapp_message(apartment, booking), safe='')}"
