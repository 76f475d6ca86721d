"""
Integration tests for finder partners and the fee workflow.
"""

from decimal import Decimal

import pytest

from app.models.enums import FinderFeeStatus
from app.services.finder_fee_service import FinderFeeService
from app.utils.exceptions import NotFoundError, ValidationError


async def record(session_maker, **kwargs):
    async with session_maker() as session:
        service = FinderFeeService(session)
        fee = await service.record_finder_fee(**kwargs)
        await service.commit()
        return fee


class TestPartners:
    """Partner registration."""

    @pytest.mark.asyncio
    async def test_enable_partner(self, session_maker) -> None:
        async with session_maker() as session:
            partner = await FinderFeeService(session).enable_partner(
                finder_code="jordan42",
                partner_email="Jordan@Example.com",
                partner_name=" Jordan ",
                is_recurring=True,
            )

        assert partner.finder_code == "JORDAN42"
        assert partner.partner_email == "jordan@example.com"
        assert partner.partner_name == "Jordan"
        assert partner.fee_percentage_first == Decimal("10")
        assert partner.fee_percentage_renewal == Decimal("5")

    @pytest.mark.asyncio
    async def test_duplicate_code(self, session_maker, standard_partner) -> None:
        async with session_maker() as session:
            with pytest.raises(ValidationError):
                await FinderFeeService(session).enable_partner(
                    finder_code="abc123",
                    partner_email="other@example.com",
                    partner_name="Other",
                )

    @pytest.mark.parametrize(
        "finder_code,email",
        [("AB", "a@example.com"), ("ABC-1", "a@example.com"), ("ABC123X", "bad")],
    )
    @pytest.mark.asyncio
    async def test_invalid_input(self, session_maker, finder_code, email) -> None:
        async with session_maker() as session:
            with pytest.raises(ValidationError):
                await FinderFeeService(session).enable_partner(
                    finder_code=finder_code, partner_email=email, partner_name="X"
                )

    @pytest.mark.asyncio
    async def test_disable_partner(self, session_maker, standard_partner) -> None:
        async with session_maker() as session:
            partner = await FinderFeeService(session).set_partner_enabled(
                standard_partner.id, False
            )
        assert partner.enabled is False
        assert partner.disabled_at is not None

        fee = await record(
            session_maker,
            finder_code="ABC123",
            referred_party="club@example.com",
            purchase_amount=Decimal("100"),
        )
        assert fee is None

    @pytest.mark.asyncio
    async def test_disable_unknown_partner(self, session) -> None:
        with pytest.raises(NotFoundError):
            await FinderFeeService(session).set_partner_enabled(999, False)

    @pytest.mark.asyncio
    async def test_list_partners_with_earnings(
        self, session_maker, standard_partner, recurring_partner
    ) -> None:
        first = await record(
            session_maker,
            finder_code="ABC123",
            referred_party="a@example.com",
            purchase_amount=Decimal("1000"),
        )
        await record(
            session_maker,
            finder_code="ABC123",
            referred_party="b@example.com",
            purchase_amount=Decimal("500"),
        )
        async with session_maker() as session:
            await FinderFeeService(session).update_status(
                first.id, FinderFeeStatus.PAID
            )

        async with session_maker() as session:
            summaries = await FinderFeeService(
                session, site_url="https://example.test"
            ).list_partners()

        by_code = {s.partner.finder_code: s for s in summaries}
        abc = by_code["ABC123"]
        assert abc.referral_count == 2
        assert abc.total_earned == Decimal("150")
        assert abc.total_paid == Decimal("100")
        assert abc.total_outstanding == Decimal("50")
        assert abc.finder_link == "https://example.test/team-licensing?finder=ABC123"

        vip = by_code["VIP777"]
        assert vip.referral_count == 0
        assert vip.total_earned == Decimal("0")


class TestRecordFinderFee:
    """Fee recording rules."""

    @pytest.mark.asyncio
    async def test_standard_partner_paid_once_per_party(
        self, session_maker, standard_partner
    ) -> None:
        first = await record(
            session_maker,
            finder_code="abc123",
            referred_party="Club@Example.com",
            purchase_amount=Decimal("1200.00"),
            purchase_session_id="cs_1",
        )
        second = await record(
            session_maker,
            finder_code="ABC123",
            referred_party="club@example.com",
            purchase_amount=Decimal("800.00"),
            purchase_session_id="cs_2",
        )

        assert first.fee_amount == Decimal("120.00")
        assert first.referred_party == "club@example.com"
        assert first.partner_id == standard_partner.id
        assert second is None

    @pytest.mark.asyncio
    async def test_recurring_partner_first_then_renewal_rate(
        self, session_maker, recurring_partner
    ) -> None:
        first = await record(
            session_maker,
            finder_code="VIP777",
            referred_party="club@example.com",
            purchase_amount=Decimal("1000"),
            purchase_session_id="cs_1",
        )
        renewal = await record(
            session_maker,
            finder_code="VIP777",
            referred_party="club@example.com",
            purchase_amount=Decimal("1000"),
            purchase_session_id="in_2",
            is_renewal=True,
        )

        assert (first.fee_percentage, first.fee_amount) == (
            Decimal("10"),
            Decimal("100.00"),
        )
        assert first.is_first_purchase and first.is_recurring_partner
        assert (renewal.fee_percentage, renewal.fee_amount) == (
            Decimal("5"),
            Decimal("50.00"),
        )
        assert not renewal.is_first_purchase

    @pytest.mark.asyncio
    async def test_same_purchase_recorded_once(
        self, session_maker, recurring_partner
    ) -> None:
        kwargs = dict(
            finder_code="VIP777",
            referred_party="club@example.com",
            purchase_amount=Decimal("1000"),
            purchase_session_id="cs_1",
        )
        assert await record(session_maker, **kwargs) is not None
        assert await record(session_maker, **kwargs) is None

    @pytest.mark.asyncio
    async def test_renewal_for_standard_partner(
        self, session_maker, standard_partner
    ) -> None:
        fee = await record(
            session_maker,
            finder_code="ABC123",
            referred_party="club@example.com",
            purchase_amount=Decimal("100"),
            is_renewal=True,
        )
        assert fee is None

    @pytest.mark.asyncio
    async def test_unknown_partner_skipped(self, session_maker) -> None:
        fee = await record(
            session_maker,
            finder_code="NOPE99",
            referred_party="club@example.com",
            purchase_amount=Decimal("100"),
        )
        assert fee is None

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    @pytest.mark.asyncio
    async def test_non_positive_amount(
        self, session_maker, standard_partner, amount
    ) -> None:
        with pytest.raises(ValidationError):
            await record(
                session_maker,
                finder_code="ABC123",
                referred_party="club@example.com",
                purchase_amount=amount,
            )


class TestManualFees:
    """Admin-entered fees."""

    @pytest.mark.asyncio
    async def test_create_manual_fee(self, session_maker, standard_partner) -> None:
        async with session_maker() as session:
            fee = await FinderFeeService(session).create_manual_fee(
                finder_code="ABC123",
                referred_party="club@example.com",
                purchase_amount=Decimal("450.50"),
                admin_notes="Invoiced offline",
            )

        assert fee.fee_amount == Decimal("45.05")
        assert fee.admin_notes == "Invoiced offline"
        assert fee.status == FinderFeeStatus.PENDING

    @pytest.mark.asyncio
    async def test_manual_duplicate_rejected(
        self, session_maker, standard_partner
    ) -> None:
        async with session_maker() as session:
            await FinderFeeService(session).create_manual_fee(
                finder_code="ABC123",
                referred_party="club@example.com",
                purchase_amount=Decimal("100"),
            )

        async with session_maker() as session:
            with pytest.raises(ValidationError):
                await FinderFeeService(session).create_manual_fee(
                    finder_code="ABC123",
                    referred_party="club@example.com",
                    purchase_amount=Decimal("100"),
                )

    @pytest.mark.asyncio
    async def test_manual_unknown_partner(self, session_maker) -> None:
        async with session_maker() as session:
            with pytest.raises(NotFoundError):
                await FinderFeeService(session).create_manual_fee(
                    finder_code="NOPE99",
                    referred_party="club@example.com",
                    purchase_amount=Decimal("100"),
                )


class TestStatusWorkflow:
    """Approval and payout."""

    @pytest.mark.asyncio
    async def test_approve_then_pay(self, session_maker, standard_partner) -> None:
        fee = await record(
            session_maker,
            finder_code="ABC123",
            referred_party="club@example.com",
            purchase_amount=Decimal("100"),
        )

        async with session_maker() as session:
            approved = await FinderFeeService(session).update_status(
                fee.id, FinderFeeStatus.APPROVED, notes="Checked"
            )
        assert approved.status == FinderFeeStatus.APPROVED
        assert approved.approved_at is not None
        assert approved.admin_notes == "Checked"

        async with session_maker() as session:
            paid = await FinderFeeService(session).update_status(
                fee.id, FinderFeeStatus.PAID
            )
        assert paid.status == FinderFeeStatus.PAID
        assert paid.paid_at is not None

        async with session_maker() as session:
            fees = await FinderFeeService(session).list_fees(
                status=FinderFeeStatus.PAID
            )
        assert [f.id for f in fees] == [fee.id]

    @pytest.mark.asyncio
    async def test_rejected_is_terminal(self, session_maker, standard_partner) -> None:
        fee = await record(
            session_maker,
            finder_code="ABC123",
            referred_party="club@example.com",
            purchase_amount=Decimal("100"),
        )
        async with session_maker() as session:
            await FinderFeeService(session).update_status(
                fee.id, FinderFeeStatus.REJECTED
            )

        async with session_maker() as session:
            with pytest.raises(ValidationError):
                await FinderFeeService(session).update_status(
                    fee.id, FinderFeeStatus.APPROVED
                )

    @pytest.mark.asyncio
    async def test_unknown_fee(self, session) -> None:
        with pytest.raises(NotFoundError):
            await FinderFeeService(session).update_status(
                999, FinderFeeStatus.APPROVED
            )
