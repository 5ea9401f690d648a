# teashop/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt
from passlib.context import CryptContext

from teashop.core.config import get_settings

settings = get_settings()

pwd = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    # Passwordless accounts (code-only sign-in) never match.
    if not hashed:
        return False
    return pwd.verify(password, hashed)


def create_access_token(user_id: int, email: str) -> str:
    """
    Issue a signed access token.

    Claims:
      - sub: user id (string, as required by RFC 7519)
      - email: login identity
      - exp: now + JWT_EXPIRE_DAYS

    The role is deliberately not embedded; it is read from the database
    on every request so demotions take effect immediately.
    """
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=settings.JWT_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
