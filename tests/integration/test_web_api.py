"""
HTTP tests for the aiohttp application.

The app runs against the per-test SQLite database with a mocked email
client; Stripe signatures are computed locally with the test secret.
"""

import hashlib
import hmac
import json
import time
from decimal import Decimal

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from app.config.settings import Settings
from app.services.finder_fee_service import FinderFeeService
from app.services.license_service import LicenseService
from app.utils.security import fee_action_token
from web.app_factory import create_app
from web.context import AppContext


WEBHOOK_SECRET = "whsec_test_secret"
ADMIN_PASSWORD = "test-admin-password"
ADMIN_HEADERS = {"X-Admin-Password": ADMIN_PASSWORD}
FEE_ACTION_SECRET = "fee-action-secret"


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        environment="test",
        stripe_webhook_secret=WEBHOOK_SECRET,
        admin_dashboard_password=ADMIN_PASSWORD,
        site_url="https://example.test",
        admin_email="admin@example.test",
        finder_fee_action_secret=FEE_ACTION_SECRET,
    )


@pytest_asyncio.fixture
async def client(settings, session_maker, mock_email_client):
    context = AppContext(
        settings=settings,
        session_maker=session_maker,
        email_client=mock_email_client,
    )
    client = TestClient(TestServer(create_app(context)))
    await client.start_server()
    yield client
    await client.close()


async def create_team(session_maker, seats: int = 1):
    async with session_maker() as session:
        service = LicenseService(session)
        team = await service.create_team_license(
            admin_email="coach@example.com", seat_count=seats, team_name="Tigers"
        )
        await service.commit()
        return team


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client) -> None:
        response = await client.get("/health")
        assert response.status == 200
        assert await response.json() == {"status": "healthy", "database": "ok"}


class TestStripeWebhook:
    """Signature verification and event handling over HTTP."""

    def _payload(self, session_id: str = "cs_web_1") -> str:
        return json.dumps(
            {
                "id": "evt_web_1",
                "type": "checkout.session.completed",
                "data": {
                    "object": {
                        "id": session_id,
                        "amount_total": 120000,
                        "customer_details": {"email": "coach@example.com"},
                        "metadata": {"seat_count": "12", "team_name": "Tigers"},
                    }
                },
            }
        )

    @pytest.mark.asyncio
    async def test_valid_signature(self, client, mock_email_client) -> None:
        payload = self._payload()
        response = await client.post(
            "/api/webhooks/stripe",
            data=payload,
            headers={"Stripe-Signature": sign(payload)},
        )

        assert response.status == 200
        body = await response.json()
        assert body["received"] is True
        assert body["status"] == "processed"
        assert body["license_grant_id"] is not None
        mock_email_client.send_safely.assert_awaited()

    @pytest.mark.asyncio
    async def test_invalid_signature(self, client, mock_email_client) -> None:
        payload = self._payload()
        response = await client.post(
            "/api/webhooks/stripe",
            data=payload,
            headers={"Stripe-Signature": sign(payload, secret="whsec_wrong")},
        )

        assert response.status == 400
        assert (await response.json())["error"] == "invalid_signature"
        mock_email_client.send_safely.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_tampered_payload(self, client) -> None:
        payload = self._payload()
        signature = sign(payload)
        response = await client.post(
            "/api/webhooks/stripe",
            data=payload.replace("12", "99"),
            headers={"Stripe-Signature": signature},
        )
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_stale_signature(self, client) -> None:
        payload = self._payload()
        response = await client.post(
            "/api/webhooks/stripe",
            data=payload,
            headers={"Stripe-Signature": sign(payload, timestamp=int(time.time()) - 3600)},
        )
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_missing_signature(self, client) -> None:
        response = await client.post("/api/webhooks/stripe", data=self._payload())
        assert response.status == 400
        assert (await response.json())["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unconfigured_secret(self, client, settings) -> None:
        settings.stripe_webhook_secret = ""
        payload = self._payload()
        response = await client.post(
            "/api/webhooks/stripe",
            data=payload,
            headers={"Stripe-Signature": sign(payload)},
        )
        assert response.status == 500


class TestCodes:
    """Public redeem / verify routes."""

    @pytest.mark.asyncio
    async def test_redeem_then_capacity(self, client, session_maker) -> None:
        team = await create_team(session_maker, seats=1)
        code = team.member_code.code

        first = await client.post("/api/codes/redeem", json={"code": code})
        assert first.status == 200
        body = await first.json()
        assert body["kind"] == "member"
        assert body["remaining_uses"] == 0
        assert body["linked_code"] == team.coach_code.code

        second = await client.post("/api/codes/redeem", json={"code": code})
        assert second.status == 409
        assert (await second.json())["error"] == "at_capacity"

    @pytest.mark.asyncio
    async def test_redeem_unknown(self, client) -> None:
        response = await client.post(
            "/api/codes/redeem", json={"code": "TEAM-ZZZZ-ZZZZ-ZZZZ"}
        )
        assert response.status == 404
        assert (await response.json())["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_redeem_without_code(self, client) -> None:
        response = await client.post("/api/codes/redeem", json={})
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_redeem_bad_json(self, client) -> None:
        response = await client.post("/api/codes/redeem", data="not json")
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_verify(self, client, session_maker) -> None:
        team = await create_team(session_maker)
        response = await client.post(
            "/api/codes/verify", json={"code": team.coach_code.code}
        )
        assert response.status == 200
        assert await response.json() == {"valid": True, "kind": "coach"}


class TestPricingAndPromo:
    """Public pricing and promo routes."""

    @pytest.mark.asyncio
    async def test_quote(self, client) -> None:
        response = await client.post(
            "/api/pricing/quote", json={"seat_count": 12, "billing_type": "upfront"}
        )
        assert response.status == 200
        body = await response.json()
        assert body["discount_percent"] == "10"
        assert body["price_per_seat"] == "71.99"
        assert body["total"] == "863.88"

    @pytest.mark.asyncio
    async def test_quote_invalid(self, client) -> None:
        response = await client.post(
            "/api/pricing/quote", json={"seat_count": 12, "billing_type": "weekly"}
        )
        assert response.status == 400
        response = await client.post("/api/pricing/quote", json={"seat_count": 0})
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_promo_validate(self, client, discount_promo) -> None:
        response = await client.post(
            "/api/promo-codes/validate",
            json={"code": "spring20", "email": "coach@example.com"},
        )
        assert response.status == 200
        body = await response.json()
        assert body["code"] == "SPRING20"
        assert body["discount_percent"].startswith("20")

        response = await client.post(
            "/api/promo-codes/validate",
            json={"code": "MISSING1", "email": "coach@example.com"},
        )
        assert response.status == 404


class TestAdminAuth:
    """Admin password middleware."""

    @pytest.mark.parametrize(
        "headers",
        [{}, {"X-Admin-Password": "wrong"}, {"X-Admin-Password": ""}],
    )
    @pytest.mark.asyncio
    async def test_rejected(self, client, headers) -> None:
        response = await client.get("/api/admin/promo-codes", headers=headers)
        assert response.status == 401
        assert (await response.json())["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_unset_password_never_matches(self, client, settings) -> None:
        settings.admin_dashboard_password = ""
        response = await client.get(
            "/api/admin/promo-codes", headers={"X-Admin-Password": ""}
        )
        assert response.status == 401

    @pytest.mark.asyncio
    async def test_accepted(self, client) -> None:
        response = await client.get("/api/admin/promo-codes", headers=ADMIN_HEADERS)
        assert response.status == 200
        assert await response.json() == {"promo_codes": []}

    @pytest.mark.asyncio
    async def test_public_routes_need_no_password(self, client) -> None:
        response = await client.get("/health")
        assert response.status == 200


class TestAdminRoutes:
    """Admin API over HTTP."""

    @pytest.mark.asyncio
    async def test_finder_partner_lifecycle(self, client) -> None:
        response = await client.post(
            "/api/admin/finder-fees/partners",
            json={
                "finder_code": "abc123",
                "partner_email": "finder@example.com",
                "partner_name": "Jordan",
            },
            headers=ADMIN_HEADERS,
        )
        assert response.status == 201
        partner = (await response.json())["partner"]
        assert partner["finder_code"] == "ABC123"
        assert partner["finder_link"] == (
            "https://example.test/team-licensing?finder=ABC123"
        )

        response = await client.post(
            "/api/admin/finder-fees",
            json={
                "finder_code": "ABC123",
                "referred_party": "club@example.com",
                "purchase_amount": "1200.00",
            },
            headers=ADMIN_HEADERS,
        )
        assert response.status == 201
        fee = (await response.json())["finder_fee"]
        assert fee["fee_amount"] == "120.00"
        assert fee["status"] == "pending"

        response = await client.post(
            f"/api/admin/finder-fees/{fee['id']}/status",
            json={"status": "approved"},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 200
        assert (await response.json())["finder_fee"]["status"] == "approved"

        response = await client.post(
            f"/api/admin/finder-fees/{fee['id']}/status",
            json={"status": "bogus"},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 400

        response = await client.patch(
            f"/api/admin/finder-fees/partners/{partner['id']}",
            json={"enabled": False},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 200
        assert (await response.json())["enabled"] is False

        response = await client.get(
            "/api/admin/finder-fees/partners", headers=ADMIN_HEADERS
        )
        partners = (await response.json())["partners"]
        assert partners[0]["referral_count"] == 1
        assert partners[0]["total_outstanding"] == "120.00"

    @pytest.mark.asyncio
    async def test_promo_code_admin(self, client) -> None:
        response = await client.post(
            "/api/admin/promo-codes",
            json={"code_type": "discount", "code": "fall10", "discount_percent": 10},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 201
        promo = (await response.json())["promo_code"]
        assert promo["code"] == "FALL10"
        assert promo["status"] == "active"

        response = await client.patch(
            f"/api/admin/promo-codes/{promo['id']}",
            json={"is_active": False},
            headers=ADMIN_HEADERS,
        )
        assert (await response.json())["promo_code"]["status"] == "inactive"

    @pytest.mark.asyncio
    async def test_trials_admin(self, client, core_user) -> None:
        response = await client.post(
            "/api/admin/trials/grant",
            json={"email": "athlete@example.com"},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 201

        response = await client.get(
            "/api/admin/trials",
            params={"email": "athlete@example.com"},
            headers=ADMIN_HEADERS,
        )
        assert (await response.json())["trial"]["is_trial_active"] is True

        response = await client.post(
            "/api/admin/trials/revoke",
            json={"email": "athlete@example.com"},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 200

        response = await client.post(
            "/api/admin/trials/grant",
            json={"email": "nobody@example.com"},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_organization_and_seats(self, client) -> None:
        response = await client.post(
            "/api/admin/organizations",
            json={
                "org_name": "Metro League",
                "admin_email": "Director@Example.com",
                "total_seats": 20,
                "number_of_teams": 2,
            },
            headers=ADMIN_HEADERS,
        )
        assert response.status == 201
        organization = (await response.json())["organization"]
        assert [t["seats"] for t in organization["teams"]] == [10, 10]
        team = organization["teams"][0]

        response = await client.post(
            f"/api/admin/teams/{team['license_grant_id']}/seats",
            json={"additional_seats": 5},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 200
        body = await response.json()
        assert body["team"]["seat_total"] == 15
        assert body["seats_remaining"] == 15

        response = await client.post(
            f"/api/admin/teams/{team['license_grant_id']}/seats",
            json={"additional_seats": 6},
            headers=ADMIN_HEADERS,
        )
        assert response.status == 400

        response = await client.post(
            f"/api/admin/codes/{team['member_code']}/deactivate",
            headers=ADMIN_HEADERS,
        )
        assert response.status == 200
        assert (await response.json())["code"]["is_active"] is False

        response = await client.post(
            "/api/codes/redeem", json={"code": team["member_code"]}
        )
        assert response.status == 404


async def create_pending_fee(session_maker) -> int:
    async with session_maker() as session:
        service = FinderFeeService(session)
        await service.enable_partner(
            finder_code="ABC123",
            partner_email="finder@example.com",
            partner_name="Jordan",
        )
        fee = await service.create_manual_fee(
            finder_code="ABC123",
            referred_party="club@example.com",
            purchase_amount=Decimal("1200.00"),
        )
        return fee.id


def action_url(fee_id: int, action: str, token: str | None = None) -> str:
    token = token or fee_action_token(FEE_ACTION_SECRET, fee_id, action)
    return f"/api/finder-fees/action?fee={fee_id}&action={action}&token={token}"


class TestFinderFeeActions:
    """Signed one-click links from finder fee emails."""

    @pytest.mark.asyncio
    async def test_approve_then_mark_paid(
        self, client, session_maker, mock_email_client
    ) -> None:
        fee_id = await create_pending_fee(session_maker)

        response = await client.get(action_url(fee_id, "approve"))
        assert response.status == 200
        assert "now approved" in await response.text()

        # Follow-up to the admin carries the mark-paid link
        to, subject, _, text = mock_email_client.send_safely.await_args.args
        assert to == "admin@example.test"
        assert subject == "Approved: pay ABC123 $120.00"
        assert action_url(fee_id, "paid") in text

        response = await client.get(action_url(fee_id, "paid"))
        assert response.status == 200
        assert "now paid" in await response.text()

        response = await client.get(
            "/api/admin/finder-fees", headers=ADMIN_HEADERS
        )
        fee = (await response.json())["finder_fees"][0]
        assert fee["status"] == "paid"
        assert fee["approved_at"] is not None
        assert fee["paid_at"] is not None

    @pytest.mark.asyncio
    async def test_reject_is_final(self, client, session_maker) -> None:
        fee_id = await create_pending_fee(session_maker)

        response = await client.get(action_url(fee_id, "reject"))
        assert response.status == 200

        response = await client.get(action_url(fee_id, "approve"))
        assert response.status == 409
        assert "Already processed" in await response.text()

    @pytest.mark.asyncio
    async def test_token_bound_to_action(
        self, client, session_maker, mock_email_client
    ) -> None:
        fee_id = await create_pending_fee(session_maker)
        approve_token = fee_action_token(FEE_ACTION_SECRET, fee_id, "approve")

        response = await client.get(action_url(fee_id, "paid", approve_token))
        assert response.status == 403

        response = await client.get(action_url(fee_id, "approve", "forged"))
        assert response.status == 403
        mock_email_client.send_safely.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disabled_without_secret(
        self, client, settings, session_maker
    ) -> None:
        fee_id = await create_pending_fee(session_maker)
        settings.finder_fee_action_secret = ""

        response = await client.get(
            action_url(fee_id, "approve", fee_action_token("", fee_id, "approve"))
        )
        assert response.status == 403

    @pytest.mark.asyncio
    async def test_bad_parameters(self, client) -> None:
        response = await client.get("/api/finder-fees/action?action=approve")
        assert response.status == 400
        response = await client.get(action_url(1, "delete"))
        assert response.status == 400
        response = await client.get(action_url(999, "approve"))
        assert response.status == 404
