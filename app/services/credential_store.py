"""Persistence of users, their OTP state and their auth tokens."""

import logging
import uuid
from datetime import date, datetime
from typing import Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from passlib.context import CryptContext
from sqlalchemy import delete, inspect, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.config import get_settings
from app.core.exceptions import DuplicateKeyError, StoreError, ValidationError
from app.models.auth_token import AuthToken
from app.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# Precomputed fake hash to mitigate timing attacks
FAKE_HASHED_PASSWORD = pwd_context.hash(
    "this_is_a_fake_user_that_never_exists_2025"
)

MIN_USERNAME_LENGTH = 4
MIN_PASSWORD_LENGTH = 8


class CredentialStore:
    """
    Reads and writes the User aggregate.

    Every write goes through ``save``, which drops expired tokens, hashes
    the password if it was changed, and commits. Uniqueness violations
    surface as DuplicateKeyError, any other database failure as StoreError.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Password ────────────────────────────────
    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain: str, hashed: str) -> bool:
        return pwd_context.verify(plain, hashed)

    # ─── Validation ──────────────────────────────
    @staticmethod
    def normalize_email(email: str) -> str:
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required", field="email")
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            raise ValidationError(f"{email} is not a valid email.", field="email")
        return email

    @staticmethod
    def _validate(user: User, password_changed: bool) -> None:
        user.name = (user.name or "").strip()
        if not user.name:
            raise ValidationError("Name is required", field="name")

        user.username = (user.username or "").strip()
        if not user.username:
            raise ValidationError("Username is required", field="username")
        if len(user.username) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters long",
                field="username",
            )

        user.email = CredentialStore.normalize_email(user.email)

        if not isinstance(user.dob, date):
            raise ValidationError("Date of birth is required", field="dob")

        if password_changed:
            if not user.password:
                raise ValidationError("Password is required", field="password")
            if len(user.password) < MIN_PASSWORD_LENGTH:
                raise ValidationError(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                    field="password",
                )

    @staticmethod
    def _password_changed(user: User) -> bool:
        return inspect(user).attrs.password.history.has_changes()

    @staticmethod
    def _duplicate_field(exc: IntegrityError) -> str:
        detail = str(exc.orig).lower()
        for field in ("username", "email", "token"):
            if field in detail:
                return field
        return "unknown"

    # ─── Lookups ─────────────────────────────────
    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_token(self, token: Optional[str], now: Optional[datetime] = None) -> Optional[User]:
        """
        Owner of ``token`` if it is stored and unexpired, else None.

        Unknown and expired tokens look the same to the caller.
        """
        if not token:
            return None
        now = now or utcnow()
        result = await self.db.execute(
            select(User)
            .join(User.tokens)
            .where(AuthToken.token == token, AuthToken.expires_at > now)
        )
        return result.scalars().first()

    # ─── Writes ──────────────────────────────────
    async def create_user(
        self,
        name: str,
        username: str,
        password: str,
        email: str,
        dob: date,
    ) -> User:
        """
        Build and stage a new user; it is written by the next ``save``.

        Raises ValidationError for malformed fields and DuplicateKeyError if
        the username or email is taken.
        """
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            username=username,
            password=password,
            email=email,
            dob=dob,
            is_admin=False,
            otp_verified=False,
            tokens=[],
        )
        self._validate(user, password_changed=True)

        result = await self.db.execute(
            select(User.username, User.email).where(
                or_(User.username == user.username, User.email == user.email)
            )
        )
        for existing_username, existing_email in result.all():
            if existing_username == user.username:
                raise DuplicateKeyError("username")
            if existing_email == user.email:
                raise DuplicateKeyError("email")

        self.db.add(user)
        return user

    async def save(self, user: User, now: Optional[datetime] = None) -> User:
        """Persist ``user`` as one write, pruning expired tokens first."""
        now = now or utcnow()
        user_id = str(user.id)
        password_changed = self._password_changed(user)
        self._validate(user, password_changed)

        for expired in [t for t in user.tokens if not t.is_active(now)]:
            user.tokens.remove(expired)

        if password_changed:
            user.password = self.hash_password(user.password)

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            field = self._duplicate_field(e)
            logger.warning(f"Duplicate {field} rejected for user {user_id[:8]}...")
            raise DuplicateKeyError(field) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save user {user_id[:8]}...: {e}")
            raise StoreError() from e
        return user

    async def purge_expired(self, now: Optional[datetime] = None) -> Tuple[int, int]:
        """
        Best-effort removal of expired tokens and expired OTP codes.

        Reads never depend on this having run; it only reclaims space.
        Returns (tokens_deleted, otp_codes_cleared).
        """
        now = now or utcnow()
        tokens = await self.db.execute(
            delete(AuthToken).where(AuthToken.expires_at <= now)
        )
        codes = await self.db.execute(
            update(User)
            .where(User.otp_value.is_not(None), User.otp_expires_at <= now)
            .values(otp_value=None, otp_expires_at=None, otp_remain_chance=None)
        )
        await self.db.commit()

        if tokens.rowcount or codes.rowcount:
            logger.info(
                f"Purged {tokens.rowcount} expired tokens and {codes.rowcount} expired OTP codes"
            )
        return tokens.rowcount, codes.rowcount
