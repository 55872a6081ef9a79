"""Database models."""

from app.models.user import User
from app.models.auth_token import AuthToken
from app.models.otp import OtpState

__all__ = [
    "User",
    "AuthToken",
    "OtpState",
]
