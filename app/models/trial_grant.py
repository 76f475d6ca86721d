"""
TrialGrant model.

Audit trail of admin-granted Pro trials.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class TrialGrant(Base):
    """
    TrialGrant entity.

    Attributes:
        granted_by: Source of the grant (fb_outreach, x_outreach, admin)
        source_record_id: Outreach record that triggered the grant
        expires_at: End of Pro access
        grace_period_ends_at: End of the downgrade grace period
        revoked_at: Set when an admin revokes the trial early
    """

    __tablename__ = "trial_grants"
    __table_args__ = (
        Index("idx_trial_grants_email_source", "user_email", "granted_by"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_profile_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    granted_by: Mapped[str] = mapped_column(String(32), nullable=False)
    source_record_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    grace_period_ends_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<TrialGrant(id={self.id}, email={self.user_email}, "
            f"source={self.granted_by}, expires={self.expires_at})>"
        )
