"""Bearer token owned by a user."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.session import Base

if TYPE_CHECKING:
    from app.models.user import User


class AuthToken(Base):
    """One login session. Rows past ``expires_at`` are dead even if still stored."""

    __tablename__ = "auth_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(512), unique=True, index=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    user: Mapped["User"] = relationship("User", back_populates="tokens")

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now

    def __repr__(self) -> str:
        return f"<AuthToken(user_id={self.user_id}, expires_at={self.expires_at})>"
