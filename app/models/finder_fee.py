"""
FinderFeeRecord model.

Commission owed to a finder partner for one referred purchase.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import FinderFeeStatus
from app.models.types import MoneyType, PercentType


class FinderFeeRecord(Base):
    """
    FinderFeeRecord entity.

    fee_amount is always purchase_amount * fee_percentage / 100 rounded
    half-up to cents; records are written through FinderFeeService which
    takes both from the commission calculator.

    There is no unique constraint on (finder_code,
    referred_party): recurring partners get one record per renewal. The
    one-per-party rule for standard partners is a pre-insert check.
    """

    __tablename__ = "finder_fee_records"
    __table_args__ = (
        CheckConstraint("purchase_amount > 0", name="purchase_amount_positive"),
        Index("idx_finder_fees_code_party", "finder_code", "referred_party"),
        Index("idx_finder_fees_status", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    finder_code: Mapped[str] = mapped_column(String(64), nullable=False)
    partner_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("finder_partners.id", ondelete="SET NULL"),
        nullable=True,
    )
    referred_party: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Referred organization email"
    )

    purchase_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    fee_percentage: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    fee_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    is_first_purchase: Mapped[bool] = mapped_column(Boolean, nullable=False)
    is_recurring_partner: Mapped[bool] = mapped_column(Boolean, nullable=False)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=FinderFeeStatus.PENDING.value
    )

    purchase_session_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True,
        comment="Checkout session or invoice id that produced the fee",
    )
    stripe_subscription_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

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
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<FinderFeeRecord(id={self.id}, finder={self.finder_code}, "
            f"party={self.referred_party}, fee={self.fee_amount}, "
            f"status={self.status})>"
        )
