"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Response, status

from app.core.config import get_settings
from app.core.dependencies import AuthTokenCookie, CurrentUser, Gateway
from app.schemas.user import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    PublicProfileResponse,
    RegenerateOtpResponse,
    SignupRequest,
    SignupResponse,
    SignupUser,
    UpdateUserRequest,
    VerifyOtpRequest,
)
from app.services.auth_gateway import ProfileUpdate

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.cookie_max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


# ─────────────────────────────────────────────
# Signup
# ─────────────────────────────────────────────

@router.post("/signup", response_model=SignupResponse)
async def signup(body: SignupRequest, response: Response, gateway: Gateway):
    """
    Create an account, issue an OTP and start a session.

    The session cookie is set right away, but authenticated routes stay
    closed until the OTP is verified. A failed email send does not undo
    the signup; it is reported as ``isMailSent: false``.
    """
    result = await gateway.signup(
        name=body.name,
        username=body.username,
        password=body.password,
        email=body.email,
        dob=body.dob,
    )
    set_auth_cookie(response, result.token)

    return SignupResponse(
        message="Signup successful.",
        user=SignupUser(
            name=result.user.name,
            username=result.user.username,
            email=result.user.email,
        ),
        otp_expiry_time=result.otp_expires_at,
        otp_expiry_in_min=settings.otp_expire_minutes,
        is_mail_sent=result.is_mail_sent,
    )


# ─────────────────────────────────────────────
# OTP
# ─────────────────────────────────────────────

@router.post("/verifyOtp", response_model=MessageResponse)
async def verify_otp(body: VerifyOtpRequest, gateway: Gateway, auth_token: AuthTokenCookie = None):
    """Verify the pending OTP, given as digits or a number. A mismatch reports ``remainChance``."""
    user = await gateway.verify_otp(auth_token, body.otp)
    return MessageResponse(message=f"Hello {user.username}, welcome to your profile!")


@router.post("/regenerateOtp", response_model=RegenerateOtpResponse)
async def regenerate_otp(gateway: Gateway, auth_token: AuthTokenCookie = None):
    """Replace the pending OTP and reset the attempt budget."""
    result = await gateway.regenerate_otp(auth_token)
    return RegenerateOtpResponse(
        message="A new OTP has been generated and sent to your registered contact",
        is_mail_sent=result.is_mail_sent,
        otp_expiry_time=result.otp_expires_at,
    )


# ─────────────────────────────────────────────
# Login / Logout
# ─────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, response: Response, gateway: Gateway):
    """Log in with username and password; requires a verified OTP."""
    result = await gateway.login(body.username, body.password)
    set_auth_cookie(response, result.token)
    return LoginResponse(message="Login successful", token=result.token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    current_user: CurrentUser,
    gateway: Gateway,
    auth_token: AuthTokenCookie = None,
):
    """Revoke the token this request was made with."""
    await gateway.logout(current_user, auth_token)
    clear_auth_cookie(response)
    return MessageResponse(message="Successfully logged out")


@router.post("/logoutAll", response_model=MessageResponse)
async def logout_all(response: Response, current_user: CurrentUser, gateway: Gateway):
    """Revoke every token of the current user."""
    await gateway.logout_all(current_user)
    clear_auth_cookie(response)
    return MessageResponse(message="Successfully logged out from all devices")


# ─────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────

@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: CurrentUser):
    """Return the authenticated user's profile."""
    return ProfileResponse.model_validate(current_user)


@router.get("/profile/{user_id}", response_model=PublicProfileResponse)
async def get_public_profile(user_id: str, gateway: Gateway):
    """Public subset of any user's profile."""
    user = await gateway.get_public_profile(user_id)
    return PublicProfileResponse.model_validate(user)


@router.put("/updateUser", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def update_user(body: UpdateUserRequest, current_user: CurrentUser, gateway: Gateway):
    """
    Update name, username, password or date of birth.

    Requires ``oldPassword``. Only keys present in the body are applied,
    so an empty string is an update (and is validated), not a skip.
    """
    sent = body.model_dump(exclude_unset=True)
    changes = ProfileUpdate(
        old_password=sent.get("old_password"),
        name=sent.get("name"),
        username=sent.get("username"),
        new_password=sent.get("new_password"),
        dob=sent.get("dob"),
    )
    await gateway.update_profile(current_user, changes)
    return MessageResponse(message="User updated successfully")
