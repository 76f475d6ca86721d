"""
Tests for the email client, partner tracker and templates.

HTTP providers are replaced by a local aiohttp test server.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from app.services.notification import (
    EmailClient,
    PartnerTracker,
    TeamCodes,
    finder_fee_admin_email,
    finder_fee_approved_email,
    organization_codes_email,
    team_codes_email,
)
from app.utils.exceptions import NotificationFailure


@pytest_asyncio.fixture
async def provider():
    """Fake provider recording requests; status is configurable per test."""
    state = {"requests": [], "status": 200}

    async def handler(request: web.Request) -> web.Response:
        state["requests"].append(
            {
                "authorization": request.headers.get("Authorization"),
                "json": await request.json(),
            }
        )
        if state.get("text") is not None:
            return web.Response(text=state["text"], status=state["status"])
        return web.json_response({"id": "msg_123"}, status=state["status"])

    app = web.Application()
    app.router.add_post("/emails", handler)
    app.router.add_post("/transactions", handler)
    server = TestServer(app)
    await server.start_server()
    state["url"] = str(server.make_url("/emails"))
    state["tracking_url"] = str(server.make_url("/transactions"))
    yield state
    await server.close()


class TestEmailClient:
    """EmailClient behaviour."""

    @pytest.mark.asyncio
    async def test_send(self, provider) -> None:
        client = EmailClient("re_test", "Ledger <noreply@example.test>", provider["url"])
        try:
            message_id = await client.send(
                "coach@example.com", "Subject", "<p>hi</p>", "hi"
            )
        finally:
            await client.close()

        assert message_id == "msg_123"
        request = provider["requests"][0]
        assert request["authorization"] == "Bearer re_test"
        assert request["json"] == {
            "from": "Ledger <noreply@example.test>",
            "to": ["coach@example.com"],
            "subject": "Subject",
            "html": "<p>hi</p>",
            "text": "hi",
        }

    @pytest.mark.asyncio
    async def test_provider_error_raises(self, provider) -> None:
        provider["status"] = 422
        client = EmailClient("re_test", "noreply@example.test", provider["url"])
        try:
            with pytest.raises(NotificationFailure):
                await client.send("coach@example.com", "Subject", "<p>hi</p>")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_send_safely_swallows_provider_error(self, provider) -> None:
        provider["status"] = 500
        client = EmailClient("re_test", "noreply@example.test", provider["url"])
        try:
            assert await client.send_safely(
                "coach@example.com", "Subject", "<p>hi</p>"
            ) is False
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_accepted_without_json_body(self, provider) -> None:
        provider["text"] = "OK"
        client = EmailClient("re_test", "noreply@example.test", provider["url"])
        try:
            assert await client.send(
                "coach@example.com", "Subject", "<p>hi</p>"
            ) is None
            assert await client.send_safely(
                "coach@example.com", "Subject", "<p>hi</p>"
            ) is True
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_send_safely_swallows_unexpected_error(self) -> None:
        client = EmailClient("re_test", "noreply@example.test")
        with patch.object(
            EmailClient, "send", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            assert await client.send_safely(
                ["coach@example.com"], "Subject", "<p>hi</p>"
            ) is False

    @pytest.mark.asyncio
    async def test_unconfigured(self) -> None:
        client = EmailClient(None, "noreply@example.test")
        assert not client.is_configured
        with pytest.raises(NotificationFailure):
            await client.send("coach@example.com", "Subject", "<p>hi</p>")
        assert await client.send_safely("coach@example.com", "S", "<p>hi</p>") is False


class TestPartnerTracker:
    """PartnerTracker behaviour."""

    @pytest.mark.asyncio
    async def test_disabled_without_key(self) -> None:
        tracker = PartnerTracker(None, "http://unused.invalid")
        assert await tracker.track_conversion(
            customer_email="coach@example.com",
            amount=Decimal("10"),
            source_id="cs_1",
        ) is False

    @pytest.mark.asyncio
    async def test_reports_amount_in_cents(self, provider) -> None:
        tracker = PartnerTracker("tolt_test", provider["tracking_url"])
        try:
            assert await tracker.track_conversion(
                customer_email="coach@example.com",
                amount=Decimal("1200.00"),
                source_id="cs_1",
                partner_ref="ABC123",
            )
        finally:
            await tracker.close()

        payload = provider["requests"][0]["json"]
        assert payload["amount"] == 120000
        assert payload["partner_ref"] == "ABC123"
        assert payload["billing_type"] == "one_time"

    @pytest.mark.asyncio
    async def test_provider_error_not_raised(self, provider) -> None:
        provider["status"] = 503
        tracker = PartnerTracker("tolt_test", provider["tracking_url"])
        try:
            assert await tracker.track_conversion(
                customer_email="coach@example.com",
                amount=Decimal("5"),
                source_id="in_1",
                is_renewal=True,
            ) is False
        finally:
            await tracker.close()

    @pytest.mark.asyncio
    async def test_unexpected_error_not_raised(self) -> None:
        tracker = PartnerTracker("tolt_test", "http://unused.invalid")
        with patch.object(
            PartnerTracker,
            "_get_session",
            AsyncMock(side_effect=RuntimeError("boom")),
        ):
            assert await tracker.track_conversion(
                customer_email="coach@example.com",
                amount=Decimal("5"),
                source_id="cs_2",
            ) is False


class TestTemplates:
    """Email templates."""

    def test_team_codes(self) -> None:
        team = TeamCodes(
            "Tigers", 12, "COACH-AAAA-BBBB-CCCC", "TEAM-DDDD-EEEE-FFFF"
        )
        subject, html, text = team_codes_email(team, "https://example.test")

        assert "Tigers" in subject
        for body in (html, text):
            assert "COACH-AAAA-BBBB-CCCC" in body
            assert "TEAM-DDDD-EEEE-FFFF" in body

    def test_team_name_escaped(self) -> None:
        team = TeamCodes("<b>X</b>", 1, "COACH-A", "TEAM-B")
        _, html, _ = team_codes_email(team, "https://example.test")
        assert "<b>X</b>" not in html
        assert "&lt;b&gt;" in html

    def test_organization_codes_lists_failed_teams(self) -> None:
        teams = [
            TeamCodes("Org - Team 1", 13, "COACH-1", "TEAM-1"),
            TeamCodes("Org - Team 2", 13, "COACH-2", "TEAM-2"),
        ]
        subject, html, text = organization_codes_email(
            "Org", teams, ["Org - Team 3"], "https://example.test"
        )
        assert "Org" in subject
        assert "COACH-2" in text
        assert "Org - Team 3" in text
        assert "Org - Team 3" in html

    def test_finder_fee_admin_notice(self) -> None:
        subject, html, text = finder_fee_admin_email(
            finder_code="ABC123",
            partner_name="Jordan",
            referred_party="club@example.com",
            purchase_amount=Decimal("1200.00"),
            fee_percentage=Decimal("10"),
            fee_amount=Decimal("120.00"),
            is_first_purchase=True,
            site_url="https://example.test",
        )
        assert subject == "Finder fee pending: $120.00 for ABC123"
        assert "$1,200.00 (first purchase)" in text
        assert "10%" in text
        assert "Approve" not in text

    def test_finder_fee_admin_notice_with_actions(self) -> None:
        links = {
            "approve": "https://example.test/api/finder-fees/action?fee=1&action=approve&token=a",
            "reject": "https://example.test/api/finder-fees/action?fee=1&action=reject&token=r",
        }
        _, html, text = finder_fee_admin_email(
            finder_code="ABC123",
            partner_name="Jordan",
            referred_party="club@example.com",
            purchase_amount=Decimal("1200.00"),
            fee_percentage=Decimal("10"),
            fee_amount=Decimal("120.00"),
            is_first_purchase=True,
            site_url="https://example.test",
            action_links=links,
        )
        assert f"Approve: {links['approve']}" in text
        assert f"Reject: {links['reject']}" in text
        assert "action=approve&amp;token=a" in html

    def test_finder_fee_approved_follow_up(self) -> None:
        subject, html, text = finder_fee_approved_email(
            finder_code="ABC123",
            referred_party="club@example.com",
            fee_amount=Decimal("120.00"),
            paid_link="https://example.test/paid",
        )
        assert subject == "Approved: pay ABC123 $120.00"
        assert "Mark as paid: https://example.test/paid" in text
        assert "club@example.com" in html
