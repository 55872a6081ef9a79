"""
Signup, OTP verification, login, logout and profile flows.

Each flow checks its preconditions in order and raises the matching
AuthError before anything is written. Writes go through
CredentialStore.save, one per flow.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Protocol

from app.core.clock import utcnow
from app.core.config import get_settings
from app.core.exceptions import (
    DuplicateKeyError,
    InvalidCredentialsError,
    InvalidOtpError,
    NotFoundError,
    OtpAlreadyVerifiedError,
    OtpAttemptsExhaustedError,
    OtpExpiredError,
    OtpUnverifiedError,
    UnauthorizedError,
    ValidationError,
)
from app.models.user import User
from app.services.credential_store import (
    FAKE_HASHED_PASSWORD,
    MIN_PASSWORD_LENGTH,
    CredentialStore,
)
from app.services.otp_service import OtpService
from app.services.session_service import SessionService
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)
settings = get_settings()


class Mailer(Protocol):
    async def send_otp(self, to_email: str, username: str, otp: str) -> bool:
        ...


@dataclass
class SignupResult:
    user: User
    token: str
    otp_expires_at: datetime
    is_mail_sent: bool


@dataclass
class RegenerateResult:
    otp_expires_at: datetime
    is_mail_sent: bool


@dataclass
class LoginResult:
    user: User
    token: str


@dataclass
class ProfileUpdate:
    """Partial profile change. ``None`` means the field was not sent."""

    old_password: Optional[str] = None
    name: Optional[str] = None
    username: Optional[str] = None
    new_password: Optional[str] = None
    dob: Optional[date] = None

    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.name, self.username, self.new_password, self.dob)
        )


def calculate_age(dob: date, today: Optional[date] = None) -> int:
    """Whole years elapsed since ``dob``."""
    today = today or utcnow().date()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


class AuthGateway:
    """Orchestrates the auth state machine over the store, OTP and sessions."""

    def __init__(
        self,
        store: CredentialStore,
        mailer: Mailer,
        storage: Optional[StorageService] = None,
    ):
        self.store = store
        self.mailer = mailer
        self.storage = storage

    # ─── Helpers ─────────────────────────────────
    @staticmethod
    def _check_username(username: str) -> None:
        if any(ch.isspace() for ch in username):
            raise ValidationError(
                "Username cannot contain spaces. Please enter a valid username.",
                field="username",
            )
        if len(username) < settings.min_username_length:
            raise ValidationError(
                f"Username must be at least {settings.min_username_length} characters long.",
                field="username",
            )

    async def _dispatch_otp(self, user: User, code: str) -> bool:
        """Mail the code; a failed send never undoes the enclosing flow."""
        try:
            return bool(await self.mailer.send_otp(user.email, user.username, code))
        except Exception as e:
            logger.error(f"Failed to send OTP email for user {user.id[:8]}...: {e}")
            return False

    # ─── Signup ──────────────────────────────────
    async def signup(
        self,
        name: Optional[str],
        username: Optional[str],
        password: Optional[str],
        email: Optional[str],
        dob: Optional[date],
    ) -> SignupResult:
        if not (name and username and password and email and dob):
            raise ValidationError("All fields are required.")

        self._check_username(username)

        if calculate_age(dob) < settings.min_signup_age:
            raise ValidationError(
                f"You must be at least {settings.min_signup_age} years old to sign up.",
                field="dob",
            )

        user = await self.store.create_user(name, username, password, email, dob)
        code = OtpService.issue(user)
        token = SessionService.mint(user)
        await self.store.save(user)
        logger.info(f"User signed up: {user.id[:8]}...")

        is_mail_sent = await self._dispatch_otp(user, code)
        return SignupResult(
            user=user,
            token=token,
            otp_expires_at=user.otp_expires_at,
            is_mail_sent=is_mail_sent,
        )

    # ─── OTP ─────────────────────────────────────
    async def verify_otp(self, token: Optional[str], supplied: Optional[str]) -> User:
        if not token or not supplied:
            raise ValidationError("Missing authentication token or OTP")

        user = await self.store.find_by_token(token)
        if not user:
            raise UnauthorizedError()

        now = utcnow()
        otp = user.otp
        if otp.verified:
            raise OtpAlreadyVerifiedError()
        if not otp.has_code:
            raise OtpExpiredError()
        if otp.is_exhausted:
            raise OtpAttemptsExhaustedError()
        if otp.is_expired(now):
            raise OtpExpiredError()

        matched = OtpService.verify(user, supplied, now)
        # saved either way so a spent attempt is recorded
        await self.store.save(user, now)

        if not matched:
            logger.info(
                f"OTP mismatch for user {user.id[:8]}..., {user.otp_remain_chance} attempts left"
            )
            raise InvalidOtpError(user.otp_remain_chance)
        return user

    async def regenerate_otp(self, token: Optional[str]) -> RegenerateResult:
        if not token:
            raise ValidationError("Missing authentication token")

        user = await self.store.find_by_token(token)
        if not user:
            raise UnauthorizedError()

        code = OtpService.regenerate(user)
        await self.store.save(user)

        is_mail_sent = await self._dispatch_otp(user, code)
        return RegenerateResult(otp_expires_at=user.otp_expires_at, is_mail_sent=is_mail_sent)

    # ─── Login / session gate ────────────────────
    async def login(self, username: Optional[str], password: Optional[str]) -> LoginResult:
        if not username or not password:
            raise ValidationError("Username and password are required.")

        user = await self.store.get_user_by_username(username)
        hashed_password = user.password if user else FAKE_HASHED_PASSWORD
        password_correct = self.store.verify_password(password, hashed_password)

        if not user or not password_correct:
            raise InvalidCredentialsError()
        if not user.otp_verified:
            raise OtpUnverifiedError()

        token = SessionService.mint(user)
        await self.store.save(user)
        logger.info(f"User logged in: {user.id[:8]}... ({len(user.tokens)} active sessions)")
        return LoginResult(user=user, token=token)

    async def authenticate(self, token: Optional[str]) -> User:
        """Shared gate for every authenticated route."""
        user = await self.store.find_by_token(token)
        if not user:
            raise UnauthorizedError()
        if not user.otp_verified:
            raise OtpUnverifiedError()
        return user

    async def logout(self, user: User, token: str) -> None:
        SessionService.revoke(user, token)
        await self.store.save(user)

    async def logout_all(self, user: User) -> int:
        count = SessionService.revoke_all(user)
        await self.store.save(user)
        logger.info(f"Revoked {count} sessions for user {user.id[:8]}...")
        return count

    # ─── Profile ─────────────────────────────────
    async def update_profile(self, user: User, changes: ProfileUpdate) -> User:
        if not changes.has_changes():
            raise ValidationError("Please provide at least one field for update")
        if not changes.old_password:
            raise ValidationError("Please provide your old password.", field="oldPassword")
        if changes.new_password is not None and len(changes.new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Please provide a new password with a minimum of {MIN_PASSWORD_LENGTH} characters",
                field="newPassword",
            )

        if changes.username is not None:
            self._check_username(changes.username)
            holder = await self.store.get_user_by_username(changes.username.strip())
            # keeping one's own username is a no-op, not a conflict
            if holder is not None and holder.id != user.id:
                raise DuplicateKeyError("username", "Username already exists")

        if not self.store.verify_password(changes.old_password, user.password):
            raise InvalidCredentialsError("Incorrect old password.")

        if changes.name is not None:
            user.name = changes.name
        if changes.username is not None:
            user.username = changes.username
        if changes.new_password is not None:
            user.password = changes.new_password
        if changes.dob is not None:
            user.dob = changes.dob

        await self.store.save(user)
        return user

    async def get_public_profile(self, user_id: str) -> User:
        user = await self.store.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_avatar(
        self,
        user: User,
        file_name: str,
        content_type: Optional[str],
        content: bytes,
    ) -> User:
        if self.storage is None:
            raise RuntimeError("AuthGateway was built without a storage service")

        stored_name, path = await self.storage.save_avatar(file_name, content_type, content)
        previous_path = user.avatar_path

        user.avatar_name = stored_name
        user.avatar_path = path
        await self.store.save(user)

        if previous_path:
            await self.storage.delete_file(previous_path)
        return user
