# teashop/services/user_service.py
import logging
import secrets
from datetime import timedelta

from sqlalchemy.engine import Connection, Engine
from sqlmodel import Session

from teashop.core.clock import as_utc, utcnow
from teashop.core.config import get_settings
from teashop.core.errors import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError
from teashop.core.security import hash_password, verify_password
from teashop.models.user import User
from teashop.repositories.order_repo import OrderRepository
from teashop.repositories.user_repo import UserRepository
from teashop.schemas.order import OrderRead
from teashop.schemas.user import (
    NicknameUpdate,
    PasswordChange,
    ProfileUpdate,
    RoleUpdate,
    StatusUpdate,
    UserOrderStats,
)

logger = logging.getLogger(__name__)

settings = get_settings()


def default_username(email: str) -> str:
    """
    Derive a default display name from email if the user has not
    completed their profile yet.
    """
    if "@" in email:
        return email.split("@", 1)[0][:50]
    return email[:50]


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - profile and password management for the signed-in user
      - manager administration (role, status, nickname)
      - the cached per-user order aggregates (total_orders / total_spent)
    """

    def __init__(self, repo: UserRepository, order_repo: OrderRepository):
        self.repo = repo
        self.order_repo = order_repo

    # ----- Self profile -----

    def update_profile(
        self,
        session: Session,
        current_user: User,
        payload: ProfileUpdate,
    ) -> User:
        current_user.username = payload.username
        if payload.avatar:
            current_user.avatar = payload.avatar
        return self.repo.update(session, current_user)

    def change_password(
        self,
        session: Session,
        current_user: User,
        payload: PasswordChange,
    ) -> bool:
        """
        Set or change the password.

        - If a password is already set, the current one must be given
          and must match.
        - Passwordless accounts (code sign-in only) may set one directly.

        Returns:
            True if an existing password was changed, False if a first
            password was set.
        """
        if len(payload.new_password) < settings.PASSWORD_MIN_LENGTH:
            raise BadRequestError(
                f"New password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )

        had_password = current_user.password_hash is not None
        if had_password:
            if not payload.current_password:
                raise BadRequestError("Current password is required")
            if not verify_password(payload.current_password, current_user.password_hash):
                raise UnauthorizedError("Current password is incorrect")

        current_user.password_hash = hash_password(payload.new_password)
        self.repo.update(session, current_user)
        return had_password

    # ----- Cached order stats -----

    def should_update_user_stats(self, session: Session, email: str) -> bool:
        """
        True if the cached aggregates are missing or older than
        STATS_CACHE_MINUTES.
        """
        user = self.repo.get_by_email(session, email)
        if user is None or user.stats_updated_at is None:
            return True
        age = utcnow() - as_utc(user.stats_updated_at)
        return age > timedelta(minutes=settings.STATS_CACHE_MINUTES)

    def update_user_stats(self, session: Session, email: str) -> User | None:
        """
        Re-aggregate all orders for `email` and overwrite the cache.

        Returns the refreshed user, or None if no account has this email
        (e.g. the guest address before seeding).
        """
        user = self.repo.get_by_email(session, email)
        if user is None:
            return None

        count, total, _ = self.order_repo.stats_for_email(session, email)
        user.total_orders = count
        user.total_spent = total
        user.stats_updated_at = utcnow()
        user = self.repo.update(session, user)
        logger.debug("Refreshed stats for %s: %d orders, %.2f spent", email, count, total)
        return user

    def refresh_stats_in_background(self, bind: Engine | Connection, email: str) -> None:
        """
        BackgroundTasks entry point: runs after the response is sent, so
        it opens its own session on the request's engine.
        """
        with Session(bind) as session:
            self.update_user_stats(session, email)

    # ----- Manager operations -----

    def list_users(self, session: Session) -> list[User]:
        """
        All users, refreshing any stale cached stats first.
        """
        users = self.repo.list_all(session)
        refreshed: list[User] = []
        for user in users:
            if self.should_update_user_stats(session, user.email):
                user = self.update_user_stats(session, user.email) or user
            refreshed.append(user)
        return refreshed

    def get_user(self, session: Session, user_id: int) -> User:
        """
        Raises:
            NotFoundError(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_user_detail(
        self,
        session: Session,
        user_id: int,
    ) -> tuple[User, UserOrderStats, list[OrderRead]]:
        """User row, live order stats and full order history."""
        user = self.get_user(session, user_id)
        count, total, last_at = self.order_repo.stats_for_email(session, user.email)
        orders = self.order_repo.list_for_email(session, user.email)
        stats = UserOrderStats(
            order_count=count,
            total_amount=total,
            last_order_date=last_at,
        )
        return user, stats, [OrderRead.model_validate(o) for o in orders]

    def update_role(
        self,
        session: Session,
        acting_user: User,
        user_id: int,
        payload: RoleUpdate,
    ) -> User:
        """
        Change a user's role. A manager cannot demote themselves, so the
        shop always keeps the manager performing the change.
        """
        if acting_user.id == user_id and payload.role != "manager":
            raise ForbiddenError("You cannot remove your own manager role")
        user = self.get_user(session, user_id)
        user.role = payload.role
        return self.repo.update(session, user)

    def update_status(
        self,
        session: Session,
        acting_user: User,
        user_id: int,
        payload: StatusUpdate,
    ) -> User:
        if acting_user.id == user_id and payload.status == "disabled":
            raise ForbiddenError("You cannot disable your own account")
        user = self.get_user(session, user_id)
        user.status = payload.status
        return self.repo.update(session, user)

    def update_nickname(
        self,
        session: Session,
        user_id: int,
        payload: NicknameUpdate,
    ) -> User:
        user = self.get_user(session, user_id)
        user.nickname = payload.nickname
        return self.repo.update(session, user)

    def upgrade_to_manager(self, session: Session, email: str, code: str) -> User:
        """
        Grant the manager role using the shared MANAGER_UPGRADE_CODE.

        Disabled unless the code is configured. Creates a passwordless
        account when the email is unknown.
        """
        expected = settings.MANAGER_UPGRADE_CODE
        if not expected:
            raise ForbiddenError("Manager upgrade is disabled")
        if not secrets.compare_digest(code.encode(), expected.encode()):
            raise ForbiddenError("Invalid upgrade code")

        user = self.repo.get_by_email(session, email)
        if user is None:
            user = User(email=email, username=default_username(email), role="manager")
            user = self.repo.create(session, user)
        elif user.role != "manager":
            user.role = "manager"
            user = self.repo.update(session, user)

        logger.warning("Granted manager role to %s via upgrade code", email)
        return user
