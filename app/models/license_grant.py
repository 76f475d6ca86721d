"""
LicenseGrant model.

One seat license per team, optionally owned by an organization license.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import SubscriptionStatus
from app.models.types import MoneyType, PercentType


if TYPE_CHECKING:
    from app.models.organization_license import OrganizationLicense
    from app.models.redemption_code import RedemptionCode


class LicenseGrant(Base):
    """
    LicenseGrant entity.

    Seats are consumed by member-code redemptions; seats_consumed is derived
    from the member code's uses_count (see LicenseService.get_seat_usage)
    rather than stored here.

    Attributes:
        id: Primary key
        organization_license_id: Parent organization (None for single teams)
        team_name: Display name, temporary until the coach renames the team
        team_index: Position within the organization (0 for single teams)
        admin_email: Purchaser email, receives the codes
        seat_total: Current seat capacity
        purchased_seats: Seats bought at checkout (basis for add-seat cap)
        discount_percentage: Volume discount applied at checkout
        price_per_seat: Discounted price per seat
        subscription_status: active / inactive / cancelled
        stripe_subscription_id: Provider subscription
        stripe_customer_id: Provider customer
        source_session_id: Checkout session that created the grant
        extra: Referral/promo/billing metadata carried from checkout
    """

    __tablename__ = "license_grants"
    __table_args__ = (
        CheckConstraint("seat_total >= 1", name="seat_total_positive"),
        Index("idx_license_grants_subscription", "stripe_subscription_id"),
        Index("idx_license_grants_session", "source_session_id"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    organization_license_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("organization_licenses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    team_name: Mapped[str] = mapped_column(String(255), nullable=False)
    team_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    admin_email: Mapped[str] = mapped_column(String(255), nullable=False)

    seat_total: Mapped[int] = mapped_column(Integer, nullable=False)
    purchased_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_percentage: Mapped[Decimal] = mapped_column(
        PercentType, nullable=False, default=Decimal("0")
    )
    price_per_seat: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    subscription_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=SubscriptionStatus.ACTIVE.value,
    )
    stripe_subscription_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    stripe_customer_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    source_session_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    extra: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    organization: Mapped["OrganizationLicense | None"] = relationship(
        "OrganizationLicense", back_populates="grants"
    )
    codes: Mapped[list["RedemptionCode"]] = relationship(
        "RedemptionCode", back_populates="license_grant"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<LicenseGrant(id={self.id}, team={self.team_name!r}, "
            f"seats={self.seat_total}, status={self.subscription_status})>"
        )
