# teashop/services/auth_service.py
import logging
import secrets
import smtplib
from datetime import timedelta

from sqlmodel import Session

from teashop.core.clock import utcnow
from teashop.core.config import get_settings
from teashop.core.email_client import send_verification_code
from teashop.core.errors import (
    BadRequestError,
    EmailDeliveryError,
    ForbiddenError,
    TooManyRequestsError,
    UnauthorizedError,
)
from teashop.core.security import create_access_token, hash_password, verify_password
from teashop.models.user import User, VerificationCode
from teashop.repositories.user_repo import UserRepository
from teashop.repositories.verification_repo import VerificationCodeRepository
from teashop.schemas.auth import CodeVerify, LoginRequest
from teashop.services.user_service import default_username

logger = logging.getLogger(__name__)

settings = get_settings()


def generate_code() -> str:
    """Random 6-digit code (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


class AuthService:
    """
    Sign-in flows.

      - email + password
      - email + one-time code (also the sign-up path)

    Both return (user, access token).
    """

    def __init__(self, user_repo: UserRepository, code_repo: VerificationCodeRepository):
        self.user_repo = user_repo
        self.code_repo = code_repo

    # ----- Helpers -----

    def _issue_token(self, session: Session, user: User) -> str:
        user.last_login = utcnow()
        self.user_repo.update(session, user)
        return create_access_token(user.id, user.email)

    @staticmethod
    def _ensure_active(user: User) -> None:
        if user.status == "disabled":
            raise ForbiddenError("Account is disabled")

    def _check_new_password(self, password: str | None, message: str) -> str:
        if not password or len(password) < settings.PASSWORD_MIN_LENGTH:
            raise BadRequestError(message)
        return password

    # ----- Password login -----

    def login(self, session: Session, payload: LoginRequest) -> tuple[User, str]:
        """
        Unknown email and wrong password produce the same 401 so the
        endpoint does not reveal which emails have accounts.
        """
        user = self.user_repo.get_by_email(session, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        self._ensure_active(user)

        return user, self._issue_token(session, user)

    # ----- Email code -----

    def request_code(self, session: Session, email: str) -> None:
        """
        Issue and email a one-time code.

        Steps:
          1. Throttle: one code per CODE_RESEND_SECONDS per email (429).
          2. Invalidate older unused codes for the email.
          3. Store the new code (valid CODE_TTL_MINUTES) and commit.
          4. Send the email; failure => 502 and the stored code is removed,
             so the caller can retry at once.
        """
        now = utcnow()
        recent = self.code_repo.latest_since(
            session, email, now - timedelta(seconds=settings.CODE_RESEND_SECONDS)
        )
        if recent is not None:
            raise TooManyRequestsError(
                "A code was sent recently, please wait before requesting another"
            )

        code = generate_code()
        self.code_repo.invalidate_unused(session, email)
        stored = self.code_repo.add(
            session,
            VerificationCode(
                email=email,
                code=code,
                expires_at=now + timedelta(minutes=settings.CODE_TTL_MINUTES),
            ),
        )
        session.commit()

        try:
            send_verification_code(email, code, settings.CODE_TTL_MINUTES)
        except (RuntimeError, smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send login code to %s: %s", email, exc)
            # An undelivered code must not hold the resend window
            self.code_repo.delete(session, stored)
            raise EmailDeliveryError()

        logger.info("Sent login code to %s", email)

    def verify_code(self, session: Session, payload: CodeVerify) -> tuple[User, str]:
        """
        Sign in (or sign up) with an emailed code.

        Steps:
          1. Find the newest unused, unexpired matching code (401 if none).
          2. Check password rules before consuming the code:
             - new email: password of PASSWORD_MIN_LENGTH required
             - existing passwordless user: optional password is validated
          3. Consume the code (single use; a concurrent verify loses).
          4. Create the user / set the password; commit with step 3.
          5. Issue a token.
        """
        now = utcnow()
        found = self.code_repo.find_valid(session, payload.email, payload.code, now)
        if found is None:
            raise UnauthorizedError("Invalid or expired code")

        user = self.user_repo.get_by_email(session, payload.email)
        if user is None:
            password = self._check_new_password(
                payload.password,
                f"New accounts need a password of at least "
                f"{settings.PASSWORD_MIN_LENGTH} characters",
            )
        else:
            self._ensure_active(user)
            password = None
            if user.password_hash is None and payload.password:
                password = self._check_new_password(
                    payload.password,
                    f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
                )

        if not self.code_repo.consume(session, found.id):
            session.rollback()
            raise UnauthorizedError("Invalid or expired code")

        if user is None:
            role = "manager" if payload.email in settings.manager_emails else "user"
            user = User(
                email=payload.email,
                username=default_username(payload.email),
                password_hash=hash_password(password),
                role=role,
            )
            session.add(user)
            logger.info("Created account %s (role=%s)", payload.email, role)
        elif password is not None:
            user.password_hash = hash_password(password)
            session.add(user)

        session.commit()
        session.refresh(user)

        return user, self._issue_token(session, user)

    def purge_expired_codes(self, session: Session) -> int:
        removed = self.code_repo.delete_expired(session, utcnow())
        if removed:
            logger.info("Purged %d expired login codes", removed)
        return removed
