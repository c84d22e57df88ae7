"""
User Schemas
Pydantic models for user API contracts
Source: https://docs.pydantic.dev/latest/
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from claimdesk.core.enums import Role

SPECIAL_CHARS = set("!@#$%^&*()_+-=[]{}|;:,.<>?")


def check_password_strength(v: str) -> str:
    """
    Validate password strength against OWASP recommendations.

    Requirements:
    - Minimum 12 characters
    - At least one uppercase letter, one lowercase letter and one digit
    - At least one special character

    Source: https://cheatsheetseries.owasp.org/cheatsheets/Password_Storage_Cheat_Sheet.html
    """
    if len(v) < 12:
        raise ValueError("Password must be at least 12 characters long")
    if not any(c.isupper() for c in v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not any(c.islower() for c in v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one digit")
    if not any(c in SPECIAL_CHARS for c in v):
        raise ValueError(
            "Password must contain at least one special character (!@#$%^&*()_+-=[]{}|;:,.<>?)"
        )
    return v


class UserBase(BaseModel):
    """Base user schema with common fields"""

    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    full_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=32)
    address: str | None = None


class UserCreate(UserBase):
    """Schema for self-registration. New accounts are customers."""

    password: str = Field(..., min_length=12, max_length=100, description="Password (min 12 chars)")

    @field_validator("username")
    @classmethod
    def username_not_email(cls, v: str) -> str:
        # Login accepts a username or an email; keep the two namespaces apart
        if "@" in v:
            raise ValueError("Username must not contain '@'")
        return v

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class AdminUserCreate(UserCreate):
    """Schema for accounts created by an administrator with an explicit role."""

    role: Role = Role.CUSTOMER


class UserUpdate(BaseModel):
    """Schema for profile updates. ``role`` is honoured for administrators only."""

    email: EmailStr | None = None
    full_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=32)
    address: str | None = None
    role: Role | None = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=12, max_length=100)

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class UserResponse(UserBase):
    """Schema for user responses (excludes password)"""

    id: UUID
    role: Role
    enabled: bool
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None = None

    model_config = {"from_attributes": True}
