"""Mendoza Apartments: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mendoza.api.v1.admin import router as admin_router
from mendoza.api.v1.apartments import router as apartments_router
from mendoza.api.v1.auth import router as auth_router
from mendoza.api.v1.bookings import router as bookings_router
from mendoza.config import settings
from mendoza.database import Database
from mendoza.services.email import EmailSender
from mendoza.storage import StorageClient

# Configure root logger so all mendoza.* loggers output to stderr.
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the database, storage and e-mail collaborators; release them on shutdown."""
    app.state.db = Database(settings.async_database_url, echo=settings.debug)
    http = httpx.AsyncClient(timeout=settings.storage_timeout_seconds)
    app.state.storage = StorageClient(
        http,
        base_url=settings.storage_url,
        service_key=settings.storage_service_key,
        bucket=settings.storage_bucket,
    )
    app.state.email_sender = EmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.email_sender,
        password=settings.google_app_password,
        from_name=settings.email_from_name,
    )
    if not settings.email_configured:
        logger.warning("Email credentials not configured; booking notifications will not be sent")

    yield

    # Shutdown: close HTTP connections and dispose engine connections
    await http.aclose()
    await app.state.db.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Apartment search, booking requests and listing management for Mendoza vacation rentals.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router)
app.include_router(apartments_router)
app.include_router(bookings_router)
app.include_router(admin_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
