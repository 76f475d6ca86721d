"""
RedemptionCode model.

Team join codes handed out after a license purchase.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import CodeKind


if TYPE_CHECKING:
    from app.models.license_grant import LicenseGrant


class RedemptionCode(Base):
    """
    RedemptionCode entity.

    Codes are created in coach/member pairs, one pair per team:
    - coach code: single use, redeemer becomes the team owner
    - member code: max_uses equals the purchased seat count
    Each code of a pair points at the other through linked_code_id.

    Attributes:
        id: Primary key
        code: PREFIX-XXXX-XXXX-XXXX
        kind: coach or member
        license_grant_id: Team license the code belongs to
        max_uses: Redemption capacity
        uses_count: Redemptions consumed so far (never decremented)
        linked_code_id: The other code of the pair
        is_active: Deactivated codes are kept for history
        allow_parent_linking: Member codes let parents link read-only
        created_at: Creation timestamp
    """

    __tablename__ = "redemption_codes"
    __table_args__ = (
        CheckConstraint("max_uses >= 1", name="max_uses_positive"),
        CheckConstraint(
            "uses_count >= 0 AND uses_count <= max_uses",
            name="uses_within_capacity",
        ),
        Index("idx_redemption_codes_grant_kind", "license_grant_id", "kind"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    code: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)

    license_grant_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("license_grants.id", ondelete="CASCADE"),
        nullable=True,
    )

    max_uses: Mapped[int] = mapped_column(Integer, nullable=False)
    uses_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    linked_code_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("redemption_codes.id", ondelete="SET NULL"),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    allow_parent_linking: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    deactivated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    license_grant: Mapped["LicenseGrant | None"] = relationship(
        "LicenseGrant", back_populates="codes"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<RedemptionCode(id={self.id}, code={self.code}, kind={self.kind}, "
            f"uses={self.uses_count}/{self.max_uses})>"
        )

    @property
    def is_coach(self) -> bool:
        return self.kind == CodeKind.COACH

    @property
    def remaining_uses(self) -> int:
        """Redemptions left before the code is exhausted."""
        return max(self.max_uses - self.uses_count, 0)

    @property
    def is_exhausted(self) -> bool:
        return self.uses_count >= self.max_uses
