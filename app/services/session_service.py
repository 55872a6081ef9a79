"""Bearer token issuance and revocation."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt

from app.core.clock import utcnow
from app.core.config import get_settings
from app.core.exceptions import NotFoundError
from app.models.auth_token import AuthToken
from app.models.user import User

settings = get_settings()


class SessionService:
    """
    Mint and revoke per-user auth tokens.

    Token validity is decided by the stored ``expires_at`` (see
    CredentialStore.find_by_token); the JWT is only a signed, unique string.
    Concurrent sessions per user are unlimited.
    """

    @staticmethod
    def _create_jwt(user_id: str, issued_at: datetime, expires_at: datetime) -> str:
        payload = {
            "sub": str(user_id),
            "jti": str(uuid.uuid4()),
            "iat": issued_at.replace(tzinfo=timezone.utc),
            "exp": expires_at.replace(tzinfo=timezone.utc),
        }
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    @staticmethod
    def mint(user: User, now: Optional[datetime] = None) -> str:
        now = now or utcnow()
        expires_at = now + timedelta(days=settings.auth_token_expire_days)
        token = SessionService._create_jwt(user.id, now, expires_at)
        user.tokens.append(AuthToken(token=token, created_at=now, expires_at=expires_at))
        return token

    @staticmethod
    def revoke(user: User, token: str) -> None:
        """Remove exactly the entry whose string matches ``token``."""
        for existing in user.tokens:
            if existing.token == token:
                user.tokens.remove(existing)
                return
        raise NotFoundError("Token not found")

    @staticmethod
    def revoke_all(user: User) -> int:
        count = len(user.tokens)
        user.tokens.clear()
        return count
