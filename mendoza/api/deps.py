"""Shared API dependencies: single import point for all routers.

Re-exports the database session and authentication dependencies, and exposes
the collaborators built in the application lifespan (storage and e-mail) so
tests can swap them through ``app.dependency_overrides``::

    from mendoza.api.deps import get_db, get_current_admin, get_storage
"""

from fastapi import Request

from mendoza.auth.dependencies import get_current_admin, get_current_user
from mendoza.database import get_db
from mendoza.services.email import EmailSender
from mendoza.storage import StorageClient


def get_storage(request: Request) -> StorageClient:
    return request.app.state.storage


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


__all__ = [
    "get_db",
    "get_current_user",
    "get_current_admin",
    "get_storage",
    "get_email_sender",
]
