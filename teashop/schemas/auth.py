# teashop/schemas/auth.py
from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from teashop.schemas.user import UserPublic


class EmailPayload(SQLModel):
    """
    Base for payloads keyed by login email (stored lowercase).
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(EmailPayload):
    password: str = Field(min_length=1)


class CodeRequest(EmailPayload):
    pass


class CodeVerify(EmailPayload):
    """
    Email code sign-in.

    password is required when the email has no account yet, and may be
    supplied by an existing passwordless account to set one.
    """

    code: str
    password: str | None = None

    @field_validator("code")
    @classmethod
    def six_digits(cls, v: str) -> str:
        v = v.strip()
        if len(v) != 6 or not (v.isascii() and v.isdigit()):
            raise ValueError("code must be 6 digits")
        return v


class TokenResponse(SQLModel):
    success: bool = True
    message: str
    token: str
    user: UserPublic


class ManagerUpgradeRequest(EmailPayload):
    code: str = Field(min_length=1)
