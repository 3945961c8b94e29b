"""Password hashing (bcrypt) and JWT access/refresh tokens for admin sign-in."""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt

from mendoza.config import settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def _encode(subject: str, token_type: str, lifetime: timedelta, extra: dict | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {**(extra or {}), "sub": subject, "iat": now, "exp": now + lifetime, "type": token_type}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, role: str = "admin", expires_delta: timedelta | None = None) -> str:
    """Short-lived token sent as ``Authorization: Bearer``."""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(user_id, ACCESS_TOKEN, lifetime, {"role": role})


def create_refresh_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Long-lived token accepted only by the refresh endpoint."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(user_id, REFRESH_TOKEN, lifetime)


def decode_token(token: str) -> dict:
    """Decode and verify a token.

    Raises:
        jose.JWTError: invalid signature, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def create_token_pair(user_id: str, role: str = "admin") -> dict[str, str]:
    return {
        "access_token": create_access_token(user_id, role),
        "refresh_token": create_refresh_token(user_id),
        "token_type": "bearer",
    }
