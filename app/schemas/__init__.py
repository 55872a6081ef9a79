"""Pydantic schemas for API request/response validation."""

from app.schemas.user import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    PublicProfileResponse,
    RegenerateOtpResponse,
    SignupRequest,
    SignupResponse,
    UpdateUserRequest,
    VerifyOtpRequest,
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "ProfileResponse",
    "PublicProfileResponse",
    "RegenerateOtpResponse",
    "SignupRequest",
    "SignupResponse",
    "UpdateUserRequest",
    "VerifyOtpRequest",
]
