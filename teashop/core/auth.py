# teashop/core/auth.py
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from teashop.core.config import get_settings
from teashop.core.errors import ForbiddenError, UnauthorizedError
from teashop.database import get_session
from teashop.models.user import User

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support "guest" mode (anonymous purchases).
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token (JWT).

    Verification:
      - signature (JWT_ALG using JWT_SECRET)
      - expiration time (exp)

    There is no fallback path: a token whose signature does not verify is
    rejected, whatever its payload claims.

    Raises:
        UnauthorizedError(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
        )
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from a bearer token.

    Flow:
      1. If no Authorization header => guest => return None.
      2. Decode JWT => extract 'sub' (user id) and 'email'.
      3. Load the user row; it must exist and its email must match.

    Returns:
        User instance if authenticated, else None for guests.

    Raises:
        UnauthorizedError(401): if token is malformed, stale or refers to
        a missing user.
    """
    if credentials is None:
        return None  # guest mode

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise UnauthorizedError("Token missing sub/email")

    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid sub in token")

    user = session.get(User, user_id)
    if user is None or user.email != email:
        raise UnauthorizedError("Unknown user")

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        UnauthorizedError(401): if no token was sent.
        ForbiddenError(403): if the account is disabled.
    """
    if user is None:
        raise UnauthorizedError("Authentication required")
    if user.status == "disabled":
        raise ForbiddenError("Account is disabled")
    return user


def require_manager(user: User = Depends(require_auth)) -> User:
    """
    Enforce manager role, as stored in the database.

    Raises:
        ForbiddenError(403): if role is not manager.
    """
    if user.role != "manager":
        raise ForbiddenError("Manager access required")
    return user


def get_active_user_or_guest(user: User | None = Depends(get_current_user)) -> User | None:
    """
    Like get_current_user, but a disabled account cannot act as a guest
    by keeping its token.
    """
    if user is not None and user.status == "disabled":
        raise ForbiddenError("Account is disabled")
    return user
