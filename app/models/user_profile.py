"""
UserProfile model.

App account as far as the back-office needs it: tier and promo expiry.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import UserTier


class UserProfile(Base):
    """
    UserProfile entity.

    promo_tier_expires_at is set when Pro comes from a trial or promo; a Pro
    profile without it is a paid subscriber.
    """

    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    tier: Mapped[str] = mapped_column(
        String(16), nullable=False, default=UserTier.CORE.value
    )
    promo_tier_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<UserProfile(id={self.id}, email={self.email}, tier={self.tier})>"
