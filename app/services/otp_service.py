"""
One-time code lifecycle for signup verification.

States per user: no code -> pending -> verified. A pending code loses one
attempt per mismatch and is replaced wholesale on regenerate. Codes are
compared in plain text against the stored value and are never logged.
"""

import logging
import secrets
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Tuple

from app.core.clock import utcnow
from app.core.config import get_settings
from app.core.exceptions import OtpAlreadyVerifiedError
from app.models.otp import OtpState
from app.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()


class OtpService:
    """Issue, verify and regenerate OTP codes on a User."""

    @staticmethod
    def generate_code(length: Optional[int] = None) -> str:
        """Uniform random numeric code over the full range, zero-padded."""
        length = length or settings.otp_length
        return str(secrets.randbelow(10 ** length)).zfill(length)

    @staticmethod
    def new_state(code: str, now: datetime) -> OtpState:
        return OtpState(
            value=code,
            expires_at=now + timedelta(minutes=settings.otp_expire_minutes),
            remain_chance=settings.otp_max_attempts,
            verified=False,
        )

    @staticmethod
    def attempt(state: OtpState, supplied: str, now: datetime) -> Tuple[bool, OtpState]:
        """
        Apply one verification attempt to ``state``.

        Returns (matched, next_state). Attempts are only spent on a live
        code: an absent, expired or exhausted code fails without change.
        """
        if not state.is_usable(now):
            return False, state

        supplied = (supplied or "").strip()
        if secrets.compare_digest(state.value.encode(), supplied.encode()):
            return True, OtpState(verified=True)

        return False, replace(state, remain_chance=state.remain_chance - 1)

    # ─── Operations on a User ───────────────────
    @staticmethod
    def issue(user: User, now: Optional[datetime] = None) -> str:
        """Give ``user`` a fresh pending code and return it for delivery."""
        code = OtpService.generate_code()
        user.otp = OtpService.new_state(code, now or utcnow())
        return code

    @staticmethod
    def verify(user: User, supplied: str, now: Optional[datetime] = None) -> bool:
        matched, user.otp = OtpService.attempt(user.otp, supplied, now or utcnow())
        if matched:
            logger.info(f"OTP verified for user {str(user.id)[:8]}...")
        return matched

    @staticmethod
    def regenerate(user: User, now: Optional[datetime] = None) -> str:
        """Replace any pending code and reset the attempt budget."""
        if user.otp_verified:
            raise OtpAlreadyVerifiedError()
        return OtpService.issue(user, now)
