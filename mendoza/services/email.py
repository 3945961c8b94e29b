"""Booking notification e-mails sent over SMTP.

A booking request triggers two messages, one to the owner's inbox and one to
the guest. They are sent concurrently and independently: a failure of one
never cancels the other, and neither affects the stored booking.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from html import escape

from mendoza.models.apartment import Apartment
from mendoza.models.booking import Booking
from mendoza.services.contact import whatsapp_url
from mendoza.services.dates import format_long_date, pluralize

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(RuntimeError):
    """SMTP sender address or app password is missing."""


@dataclass(frozen=True)
class EmailMessageContent:
    subject: str
    html: str


@dataclass(frozen=True)
class BookingEmailResult:
    owner_sent: bool
    guest_sent: bool


class EmailSender:
    """SMTP (STARTTLS) sender authenticated with an app password."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        password: str,
        from_name: str = "Mendoza Apartments",
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self._password = password
        self.from_name = from_name
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.from_name, self.sender))
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=self.sender.rpartition("@")[2] or None)
        message.set_content("This message requires an HTML-capable e-mail client.")
        message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            smtp.login(self.sender, self._password)
            smtp.send_message(message)

    async def send(self, to: str, subject: str, html: str) -> str:
        """Send one HTML message and return its Message-ID.

        Raises:
            EmailNotConfiguredError: credentials are not set.
            smtplib.SMTPException, OSError: delivery failed.
        """
        if not self.sender or not self._password:
            raise EmailNotConfiguredError(
                "Email credentials not configured. Set EMAIL_SENDER and GOOGLE_APP_PASSWORD."
            )
        message = self._build_message(to, subject, html)
        await asyncio.to_thread(self._deliver, message)
        return message["Message-ID"]

    async def send_email(self, to: str, subject: str, html: str) -> bool:
        """Like :meth:`send` but reports success as a boolean and never raises."""
        try:
            message_id = await self.send(to, subject, html)
        except (EmailNotConfiguredError, smtplib.SMTPException, OSError) as exc:
            logger.error("Error sending email to %s: %s", to, exc)
            return False
        logger.info("Email sent successfully to %s: %s", to, message_id)
        return True


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
<div style="max-width: 600px; margin: 0 auto; padding: 20px;">
{body}
</div>
</body>
</html>
"""

_SECTION = (
    '<div style="background: {background}; border-radius: 8px; padding: 15px; margin-bottom: 15px;">'
    "<h2>{heading}</h2>{rows}</div>"
)

_PRICE_BANNER = (
    '<div style="background: {background}; color: white; padding: 15px; border-radius: 8px; '
    'text-align: center; font-size: 18px; font-weight: bold;">Total Amount: ${total}</div>'
)

_WHATSAPP_BUTTON = (
    '<div style="text-align: center;"><a href="{url}" target="_blank" '
    'style="background: #25d366; color: white; padding: 12px 24px; border-radius: 6px; '
    'text-decoration: none; display: inline-block; margin-top: 15px;">{label}</a></div>'
)

_FOOTER = (
    '<div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd; '
    'font-size: 14px; color: #666;">{lines}</div>'
)


def _row(label: str, value: object) -> str:
    return f"<p><strong>{escape(label)}:</strong> {escape(str(value))}</p>"


def _section(heading: str, rows: list[str], background: str = "#f8f9fa") -> str:
    return _SECTION.format(background=background, heading=escape(heading), rows="".join(rows))


def _stay_rows(booking: Booking, notes_label: str) -> list[str]:
    rows = [
        _row("Check-in", format_long_date(booking.check_in)),
        _row("Check-out", format_long_date(booking.check_out)),
        _row("Duration", pluralize(booking.nights, "night")),
        _row("Guests", pluralize(booking.total_guests, "guest")),
        _row("Total Price", f"${booking.total_price}"),
    ]
    if booking.notes:
        rows.append(_row(notes_label, booking.notes))
    return rows


def _whatsapp_button(apartment: Apartment, booking: Booking, label: str) -> str:
    url = whatsapp_url(apartment, booking)
    return _WHATSAPP_BUTTON.format(url=escape(url), label=label) if url else ""


def owner_email(booking: Booking, apartment: Apartment) -> EmailMessageContent:
    """Notification for the owner's inbox about a new booking request."""
    body = "".join(
        [
            f"<h1>New Booking Request</h1><p>A new booking request has been submitted for "
            f"<strong>{escape(apartment.title)}</strong></p>",
            _section("Booking Details", _stay_rows(booking, "Guest Notes"), background="#fff"),
            _section(
                "Guest Information",
                [
                    _row("Name", booking.guest_name),
                    _row("Email", booking.guest_email),
                    _row("Phone", booking.guest_phone or "Not provided"),
                ],
            ),
            _section(
                "Apartment Details",
                [
                    _row("Title", apartment.title),
                    _row("Address", apartment.address),
                    _row("Price per night", f"${apartment.price_per_night}"),
                    _row("Max guests", apartment.max_guests),
                ],
                background="#e3f2fd",
            ),
            _PRICE_BANNER.format(background="#4caf50", total=escape(str(booking.total_price))),
            _whatsapp_button(apartment, booking, "Contact on WhatsApp"),
            _FOOTER.format(
                lines="<p>Please contact the guest to confirm the booking and arrange payment.</p>"
                "<p>You can manage this booking in your admin panel.</p>"
            ),
        ]
    )
    return EmailMessageContent(
        subject=f"New Booking Request - {apartment.title}",
        html=_LAYOUT.format(title="New Booking Request", body=body),
    )


def guest_email(booking: Booking, apartment: Apartment) -> EmailMessageContent:
    """Acknowledgement sent to the guest who submitted the request."""
    contact_rows = [
        "<p>We have received your booking request and will contact you shortly to confirm "
        "availability and arrange payment.</p>",
        _row("Email", apartment.contact_email),
    ]
    if apartment.contact_phone:
        contact_rows.append(_row("Phone", apartment.contact_phone))

    body = "".join(
        [
            f"<h1>Booking Request Received!</h1><p>Thank you for your interest in "
            f"<strong>{escape(apartment.title)}</strong></p>",
            _section("Your Booking Details", _stay_rows(booking, "Your Notes"), background="#fff"),
            _section(
                "Apartment Information",
                [
                    _row("Title", apartment.title),
                    _row("Address", apartment.address),
                    _row("Description", apartment.description),
                    _row("Price per night", f"${apartment.price_per_night}"),
                ],
            ),
            _PRICE_BANNER.format(background="#ff9800", total=escape(str(booking.total_price))),
            _section("Next Steps", contact_rows, background="#e3f2fd"),
            _whatsapp_button(apartment, booking, "Contact Us on WhatsApp"),
            _FOOTER.format(
                lines="<p>We look forward to hosting you in beautiful Mendoza!</p>"
                "<p>If you have any questions, please don't hesitate to contact us.</p>"
            ),
        ]
    )
    return EmailMessageContent(
        subject=f"Booking Request Confirmation - {apartment.title}",
        html=_LAYOUT.format(title="Booking Confirmation", body=body),
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _sent(outcome: bool | BaseException, recipient: str) -> bool:
    if isinstance(outcome, BaseException):
        logger.error("Error sending booking email to %s: %s", recipient, outcome)
        return False
    return bool(outcome)


async def send_booking_emails(
    sender: EmailSender,
    booking: Booking,
    apartment: Apartment,
    owner_address: str | None,
) -> BookingEmailResult:
    """Send the owner and guest e-mails concurrently and report each outcome.

    Never raises. Without an owner address nothing is sent.
    """
    if not owner_address:
        logger.error("EMAIL_RECIPIENT is not set; booking emails not sent for %s", booking.id)
        return BookingEmailResult(owner_sent=False, guest_sent=False)

    to_owner = owner_email(booking, apartment)
    to_guest = guest_email(booking, apartment)

    owner_outcome, guest_outcome = await asyncio.gather(
        sender.send_email(owner_address, to_owner.subject, to_owner.html),
        sender.send_email(booking.guest_email, to_guest.subject, to_guest.html),
        return_exceptions=True,
    )
    result = BookingEmailResult(
        owner_sent=_sent(owner_outcome, owner_address),
        guest_sent=_sent(guest_outcome, booking.guest_email),
    )
    logger.info("Booking %s email results: %s", booking.id, result)
    return result
