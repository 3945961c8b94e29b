"""Shared test configuration and fixtures.

Every test gets its own in-memory SQLite database (foreign keys enabled) so
the application sessions and the test session share one connection and no
cleanup is needed. Object storage is a real ``StorageClient`` over an
``httpx.MockTransport``; e-mail goes to a recording sender.
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from decimal import Decimal
from io import BytesIO

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from mendoza.api.deps import get_email_sender, get_storage
from mendoza.auth.security import create_token_pair, hash_password
from mendoza.config import settings
from mendoza.database import Database
from mendoza.images.files import ImageFile
from mendoza.main import app
from mendoza.models import Apartment, ApartmentAvailability, Booking, User
from mendoza.services.email import EmailSender
from mendoza.storage import StorageClient

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
STORAGE_URL = "https://storage.test"
STORAGE_BUCKET = "apartment-images"
OWNER_ADDRESS = "owner@example.com"
EXIF_ORIENTATION = 0x0112


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Enable SQLite foreign key constraints (ON DELETE CASCADE)."""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    db = Database(TEST_DATABASE_URL, engine=engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging test data. Commit before calling the API."""
    async with database.session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class FakeStorageBackend:
    """Records storage REST calls; set ``fail`` to answer every call with 500."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, json={"error": "storage unavailable"})
        return httpx.Response(200, json={"Key": request.url.path})

    def calls(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]


class RecordingEmailSender(EmailSender):
    """EmailSender that records messages instead of talking SMTP.

    ``outcomes`` maps a recipient to the value ``send_email`` returns for it,
    or to an exception it raises. Unlisted recipients succeed.
    """

    def __init__(self) -> None:
        super().__init__("smtp.test", 587, "sender@example.com", "app-password")
        self.sent: list[tuple[str, str, str]] = []
        self.outcomes: dict[str, bool | BaseException] = {}

    async def send_email(self, to: str, subject: str, html: str) -> bool:
        self.sent.append((to, subject, html))
        outcome = self.outcomes.get(to, True)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def storage_backend() -> FakeStorageBackend:
    return FakeStorageBackend()


@pytest_asyncio.fixture
async def storage(storage_backend: FakeStorageBackend) -> AsyncGenerator[StorageClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(storage_backend)) as http:
        yield StorageClient(http, base_url=STORAGE_URL, service_key="service-key", bucket=STORAGE_BUCKET)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def owner_address(monkeypatch: pytest.MonkeyPatch) -> str:
    """Configure the owner's inbox for booking notifications."""
    monkeypatch.setattr(settings, "email_recipient", OWNER_ADDRESS)
    return OWNER_ADDRESS


@pytest_asyncio.fixture
async def client(
    database: Database,
    storage: StorageClient,
    email_sender: RecordingEmailSender,
) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient wired to the test database and fake collaborators.

    ASGITransport does not run the lifespan, so ``app.state`` is filled here.
    """
    app.state.db = database
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


async def _create_user(db_session: AsyncSession, *, role: str = "admin", is_active: bool = True) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=f"Test {role.title()}",
        is_active=is_active,
        role=role,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session)


@pytest_asyncio.fixture
async def viewer_user(db_session: AsyncSession) -> User:
    """Signed-in account without admin rights."""
    return await _create_user(db_session, role="viewer")


@pytest_asyncio.fixture
async def inactive_admin(db_session: AsyncSession) -> User:
    return await _create_user(db_session, is_active=False)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    """Authorization headers for the admin user."""
    tokens = create_token_pair(str(admin_user.id), admin_user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


# ---------------------------------------------------------------------------
# Domain factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_apartment(db_session: AsyncSession) -> Callable[..., Awaitable[Apartment]]:
    """Factory that stores and commits an apartment; keyword arguments override defaults."""

    async def _make(**overrides) -> Apartment:
        values = {
            "title": "Departamento Centro",
            "description": "Bright apartment near Plaza Independencia.",
            "address": "Av. Sarmiento 120, Mendoza",
            "price_per_night": Decimal("100.00"),
            "max_guests": 4,
            "images": [],
            "characteristics": {},
            "contact_email": OWNER_ADDRESS,
            "contact_phone": "+54 261 555-0101",
            "whatsapp_number": None,
            "is_active": True,
        }
        values.update(overrides)
        apartment = Apartment(**values)
        db_session.add(apartment)
        await db_session.commit()
        await db_session.refresh(apartment)
        return apartment

    return _make


@pytest.fixture
def make_booking(db_session: AsyncSession) -> Callable[..., Awaitable[Booking]]:
    async def _make(apartment: Apartment, check_in: date, check_out: date, **overrides) -> Booking:
        values = {
            "guest_name": "Lucía Fernández",
            "guest_email": "lucia@example.com",
            "total_guests": 2,
            "total_price": Decimal("400.00"),
            "status": "pending",
        }
        values.update(overrides)
        booking = Booking(apartment_id=apartment.id, check_in=check_in, check_out=check_out, **values)
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking

    return _make


@pytest.fixture
def make_period(db_session: AsyncSession) -> Callable[..., Awaitable[ApartmentAvailability]]:
    async def _make(apartment: Apartment, start: date, end: date, is_available: bool = False) -> ApartmentAvailability:
        period = ApartmentAvailability(
            apartment_id=apartment.id,
            start_date=start,
            end_date=end,
            is_available=is_available,
        )
        db_session.add(period)
        await db_session.commit()
        await db_session.refresh(period)
        return period

    return _make


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def encode_image(
    size: tuple[int, int], fmt: str = "PNG", noise: bool = True, orientation: int | None = None
) -> bytes:
    """Encode a random-noise (hard to compress) or solid-colour image.

    ``orientation`` writes an EXIF Orientation tag, as phone cameras do.
    """
    if noise:
        img = Image.effect_noise(size, 64).convert("RGB")
    else:
        img = Image.new("RGB", size, (180, 40, 60))
    options = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[EXIF_ORIENTATION] = orientation
        options["exif"] = exif
    buf = BytesIO()
    img.save(buf, format=fmt, **options)
    return buf.getvalue()


@pytest.fixture
def png_file() -> ImageFile:
    return ImageFile(name="living-room.png", content_type="image/png", data=encode_image((64, 48)))


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    """The ``encode_image`` helper, for tests that need custom sizes or formats."""
    return encode_image
