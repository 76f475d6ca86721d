"""Pydantic models for the pricing calculator."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class SeatDiscountTier(BaseModel):
    """Per-seat list-price discount band.

    A tier applies to seat counts in [min_seats, max_seats]; the top tier has
    no upper bound.
    """

    model_config = ConfigDict(frozen=True)

    min_seats: int = Field(..., ge=0, description="Lowest seat count in the band")
    max_seats: int | None = Field(
        default=None, ge=0, description="Highest seat count in the band (None = open)"
    )
    discount_percent: Decimal = Field(
        ..., ge=0, le=100, description="Discount off list price (e.g., 10 = 10%)"
    )

    def contains(self, seat_count: int) -> bool:
        """Check whether seat_count falls inside this band."""
        if seat_count < self.min_seats:
            return False
        return self.max_seats is None or seat_count <= self.max_seats


class FeeResult(BaseModel):
    """Finder fee for one purchase."""

    model_config = ConfigDict(frozen=True)

    fee_percentage: Decimal = Field(..., ge=0, description="Applied fee rate")
    fee_amount: Decimal = Field(..., ge=0, description="Fee in dollars, 2 dp")

    def as_tuple(self) -> tuple[Decimal, Decimal]:
        return self.fee_percentage, self.fee_amount


class SeatQuote(BaseModel):
    """Price quote for a team license purchase.

    Combines the seat count, the discount band it falls into and the
    resulting prices.
    """

    model_config = ConfigDict(frozen=True)

    seat_count: int = Field(..., ge=1, description="Seats requested")
    billing_type: str = Field(..., description="upfront or monthly")
    list_price_per_seat: Decimal = Field(..., ge=0, description="Undiscounted price")
    discount_percent: Decimal = Field(..., ge=0, description="Volume discount applied")
    price_per_seat: Decimal = Field(..., ge=0, description="Discounted price per seat")
    total: Decimal = Field(..., ge=0, description="price_per_seat * seat_count")
    savings: Decimal = Field(..., ge=0, description="Difference from list price total")


class PartnerCommission(BaseModel):
    """Partner program commission for a referred purchase."""

    model_config = ConfigDict(frozen=True)

    referred_seats: int = Field(..., ge=0, description="Seats in the referred purchase")
    commission_rate: Decimal = Field(..., ge=0, description="Applied rate")
    commission_amount: Decimal = Field(..., ge=0, description="Commission in dollars, 2 dp")
