"""
User Model
Accounts for every role: administrators, agents, claim adjusters and customers.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from claimdesk.core.enums import Role
from claimdesk.models.base import Base, TimeStampedModel, UUIDModel


class User(Base, UUIDModel, TimeStampedModel):
    """
    User account.

    Username and email are globally unique. Disabled users may not
    authenticate; their records stay in place for history.
    """

    __tablename__ = "users"

    # Authentication
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Authorization
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=32),
        default=Role.CUSTOMER,
        nullable=False,
        index=True,
    )
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Profile
    full_name: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(Text)

    # Activity Tracking
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"
