"""User model for authentication."""

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.session import Base
from app.models.otp import OtpState

if TYPE_CHECKING:
    from app.models.auth_token import AuthToken


class User(Base):
    """User identity, credentials, OTP state and active sessions."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    # Identity
    name: Mapped[str] = mapped_column(String(255))
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    dob: Mapped[date] = mapped_column(Date)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    # Plain text until the first save, a bcrypt hash afterwards
    password: Mapped[str] = mapped_column(String(255))

    # Avatar
    avatar_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # OTP (see OtpState)
    otp_value: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)
    otp_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True, index=True
    )
    otp_remain_chance: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    otp_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    tokens: Mapped[List["AuthToken"]] = relationship(
        "AuthToken",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AuthToken.id",
    )

    @property
    def otp(self) -> OtpState:
        return OtpState(
            value=self.otp_value,
            expires_at=self.otp_expires_at,
            remain_chance=self.otp_remain_chance,
            verified=bool(self.otp_verified),
        )

    @otp.setter
    def otp(self, state: OtpState) -> None:
        self.otp_value = state.value
        self.otp_expires_at = state.expires_at
        self.otp_remain_chance = state.remain_chance
        self.otp_verified = state.verified

    @property
    def avatar(self) -> Optional[dict]:
        if not self.avatar_path:
            return None
        return {"name": self.avatar_name, "path": self.avatar_path}

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
