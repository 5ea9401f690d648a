# teashop/models/user.py
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Shop account.

    Identity:
      - email is the login identity; password_hash is optional because
        accounts can be created and used through email codes alone.

    Role:
      - "user" | "manager"
      - anonymous shoppers have no row; their orders are recorded under
        the configured guest email.

    Cached stats:
      - total_orders / total_spent are denormalized aggregates over the
        orders table, refreshed lazily (see UserService).
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)

    email: str = Field(
        unique=True,
        index=True,
        description="Login email (lowercase)",
    )

    phone: str | None = Field(default=None, max_length=32)

    username: str = Field(
        max_length=50,
        description="Display name; first part of email by default",
    )

    password_hash: str | None = Field(default=None)

    avatar: str = Field(default="👤", max_length=16)

    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | manager",
    )

    # Manager-only remark about the customer
    nickname: str | None = Field(default=None, max_length=50)

    # active | disabled
    status: str = Field(default="active")

    total_orders: int = Field(default=0)
    total_spent: float = Field(default=0.0)
    stats_updated_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        description="Creation timestamp (UTC)",
    )
    last_login: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class VerificationCode(SQLModel, table=True):
    """
    One-time login code sent by email.

    - single use (used flag)
    - time boxed (expires_at)
    - issuing a new code marks older unused codes for the email as used
    """

    __tablename__ = "verification_codes"

    id: int | None = Field(default=None, primary_key=True)

    email: str = Field(index=True)
    code: str = Field(max_length=6)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True))
    used: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        index=True,
    )
