"""OTP state embedded in the User record."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class OtpState:
    """
    Immutable snapshot of a user's one-time code.

    ``value``, ``expires_at`` and ``remain_chance`` are all None once the
    code has been consumed; ``verified`` only ever goes from False to True,
    except when a fresh code is issued.
    """

    value: Optional[str] = None
    expires_at: Optional[datetime] = None
    remain_chance: Optional[int] = None
    verified: bool = False

    @property
    def has_code(self) -> bool:
        return self.value is not None

    @property
    def is_exhausted(self) -> bool:
        return (self.remain_chance or 0) <= 0

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        return self.has_code and not self.is_expired(now) and not self.is_exhausted
