# teashop/routers/auth.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from teashop.core.auth import require_auth
from teashop.database import get_session
from teashop.models.user import User
from teashop.repositories.order_repo import OrderRepository
from teashop.repositories.user_repo import UserRepository
from teashop.repositories.verification_repo import VerificationCodeRepository
from teashop.schemas.auth import CodeRequest, CodeVerify, LoginRequest, TokenResponse
from teashop.schemas.common import MessageResponse
from teashop.schemas.user import (
    HasPasswordResponse,
    PasswordChange,
    ProfileRead,
    ProfileResponse,
    ProfileUpdate,
    UserPublic,
)
from teashop.services.auth_service import AuthService
from teashop.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

user_repo = UserRepository()
service = AuthService(user_repo, VerificationCodeRepository())
user_service = UserService(user_repo, OrderRepository())


# -------- Sign-in --------


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    """
    Email + password sign-in.
    """
    user, token = service.login(session, payload)
    return TokenResponse(
        message="Login successful",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/request-code", response_model=MessageResponse)
def request_code(
    payload: CodeRequest,
    session: Session = Depends(get_session),
):
    """
    Email a 6-digit one-time code.

    - 429 if a code was sent to this email within the resend window.
    - 502 if the email could not be delivered.
    """
    service.request_code(session, payload.email)
    return MessageResponse(message="A login code has been sent to your email")


@router.post("/verify-code", response_model=TokenResponse)
def verify_code(
    payload: CodeVerify,
    session: Session = Depends(get_session),
):
    """
    Sign in with an emailed code. Creates the account on first use
    (a password is then required).
    """
    user, token = service.verify_code(session, payload)
    return TokenResponse(
        message="Login successful",
        token=token,
        user=UserPublic.model_validate(user),
    )


# -------- Self profile --------


@router.get("/profile", response_model=ProfileResponse)
def read_profile(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.
    """
    return ProfileResponse(user=ProfileRead.model_validate(current_user))


@router.put("/profile", response_model=MessageResponse)
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    user_service.update_profile(session, current_user, payload)
    return MessageResponse(message="Profile updated")


@router.put("/password", response_model=MessageResponse)
def change_password(
    payload: PasswordChange,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Change the password, or set a first one for code-only accounts.
    """
    changed = user_service.change_password(session, current_user, payload)
    return MessageResponse(message="Password changed" if changed else "Password set")


@router.get("/has-password", response_model=HasPasswordResponse)
def has_password(current_user: User = Depends(require_auth)):
    return HasPasswordResponse(has_password=current_user.password_hash is not None)
