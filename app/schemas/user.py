"""User schemas for API validation."""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from app.core.config import get_settings

settings = get_settings()


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; responses carry the offset."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ─── Requests ────────────────────────────────────
# Presence and policy rules live in AuthGateway, so every field is optional here.

class SignupRequest(CamelModel):
    name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[date] = None


class VerifyOtpRequest(CamelModel):
    otp: Optional[str] = None

    @field_validator("otp", mode="before")
    @classmethod
    def numeric_otp_as_digits(cls, value):
        # {"otp": 42} is the code "000042"
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return str(value).zfill(settings.otp_length)
        return value


class LoginRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UpdateUserRequest(CamelModel):
    """Only keys present in the body are applied."""
    name: Optional[str] = None
    username: Optional[str] = None
    new_password: Optional[str] = None
    dob: Optional[date] = None
    old_password: Optional[str] = None


# ─── Responses ───────────────────────────────────

class MessageResponse(CamelModel):
    message: str


class SignupUser(CamelModel):
    name: str
    username: str
    email: str


class SignupResponse(CamelModel):
    message: str
    user: SignupUser
    otp_expiry_time: datetime
    otp_expiry_in_min: int
    is_mail_sent: bool

    @field_serializer("otp_expiry_time")
    def serialize_expiry(self, value: datetime) -> datetime:
        return as_utc(value)


class RegenerateOtpResponse(CamelModel):
    message: str
    is_mail_sent: bool
    otp_expiry_time: datetime

    @field_serializer("otp_expiry_time")
    def serialize_expiry(self, value: datetime) -> datetime:
        return as_utc(value)


class LoginResponse(CamelModel):
    message: str
    token: str


class Avatar(CamelModel):
    name: Optional[str] = None
    path: str


class ProfileResponse(CamelModel):
    """Own profile; the password is never part of it."""
    id: str
    name: str
    username: str
    email: str
    dob: date
    is_admin: bool
    avatar: Optional[Avatar] = None
    otp_verified: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, value: datetime) -> datetime:
        return as_utc(value)


class PublicProfileResponse(CamelModel):
    id: str
    username: str
    name: str
    avatar: Optional[Avatar] = None

    model_config = ConfigDict(from_attributes=True)
