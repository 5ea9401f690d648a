# teashop/schemas/user.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from teashop.schemas.order import OrderRead

Role = Literal["user", "manager"]
AccountStatus = Literal["active", "disabled"]


class UserPublic(SQLModel):
    """
    Identity fields returned after login.
    """

    id: int
    email: str
    username: str
    avatar: str
    role: Role


class ProfileRead(UserPublic):
    created_at: datetime
    last_login: datetime | None


class UserAdminRead(ProfileRead):
    """
    Row in the manager's user list, including cached order stats.
    """

    phone: str | None
    nickname: str | None
    status: AccountStatus
    total_orders: int
    total_spent: float
    stats_updated_at: datetime | None


class ProfileUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(max_length=50)
    avatar: str | None = Field(default=None, max_length=16)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        return v


class PasswordChange(SQLModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    current_password: str | None = Field(default=None, alias="currentPassword")
    new_password: str = Field(alias="newPassword")


class RoleUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    role: Role


class StatusUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    status: AccountStatus


class NicknameUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    nickname: str | None = Field(default=None, max_length=50)

    @field_validator("nickname")
    @classmethod
    def blank_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


# ----- Response envelopes -----


class ProfileResponse(SQLModel):
    success: bool = True
    user: ProfileRead


class HasPasswordResponse(SQLModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    has_password: bool = Field(alias="hasPassword")


class RoleResponse(SQLModel):
    success: bool = True
    role: Role


class PurchaseStats(SQLModel):
    model_config = ConfigDict(populate_by_name=True)

    order_count: int = Field(alias="orderCount")
    total_amount: float = Field(alias="totalAmount")


class UserOrderStats(PurchaseStats):
    last_order_date: datetime | None = Field(default=None, alias="lastOrderDate")


class PurchasesResponse(SQLModel):
    success: bool = True
    stats: PurchaseStats
    orders: list[OrderRead]


class UserListResponse(SQLModel):
    success: bool = True
    users: list[UserAdminRead]


class UserDetailResponse(SQLModel):
    success: bool = True
    user: UserAdminRead
    stats: UserOrderStats
    orders: list[OrderRead]
