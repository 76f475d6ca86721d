"""
OrganizationLicense model.

Parent license for multi-team purchases.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


if TYPE_CHECKING:
    from app.models.license_grant import LicenseGrant


class OrganizationLicense(Base):
    """
    OrganizationLicense entity.

    Owns one LicenseGrant per team. Teams that failed to provision have no
    grant, so len(grants) may be lower than number_of_teams.
    """

    __tablename__ = "organization_licenses"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    admin_email: Mapped[str] = mapped_column(String(255), nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_teams: Mapped[int] = mapped_column(Integer, nullable=False)

    stripe_subscription_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    source_session_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    grants: Mapped[list["LicenseGrant"]] = relationship(
        "LicenseGrant",
        back_populates="organization",
        order_by="LicenseGrant.team_index",
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<OrganizationLicense(id={self.id}, name={self.name!r}, "
            f"teams={self.number_of_teams}, seats={self.total_seats})>"
        )
