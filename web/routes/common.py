"""
Shared request parsing and response serialization.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from aiohttp import web

from app.models.finder_fee import FinderFeeRecord
from app.models.license_grant import LicenseGrant
from app.models.promo_code import PromoCode
from app.models.redemption_code import RedemptionCode
from app.models.trial_grant import TrialGrant
from app.services.finder_fee_service import PartnerSummary
from app.services.organization_service import OrganizationProvisionResult
from app.services.trial_service import TrialStatus
from app.utils.datetime_utils import as_utc, isoformat_or_none
from app.utils.exceptions import ValidationError
from app.validators import parse_amount, parse_positive_int


async def read_json(request: web.Request) -> dict[str, Any]:
    """
    Read a JSON object body.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Request body must be valid JSON") from e

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def require_str(body: dict[str, Any], field: str) -> str:
    """Get a required non-empty string field."""
    value = body.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def require_int(body: dict[str, Any], field: str) -> int:
    """Get a required positive integer field."""
    try:
        return parse_positive_int(body.get(field), field)
    except ValueError as e:
        raise ValidationError(str(e), field=field) from e


def optional_int(body: dict[str, Any], field: str) -> int | None:
    if body.get(field) in (None, ""):
        return None
    return require_int(body, field)


def require_amount(body: dict[str, Any], field: str) -> Decimal:
    """Get a required money field."""
    try:
        return parse_amount(body.get(field))
    except ValueError as e:
        raise ValidationError(str(e), field=field) from e


def optional_datetime(body: dict[str, Any], field: str) -> datetime | None:
    """Parse an optional ISO-8601 datetime field."""
    value = body.get(field)
    if value in (None, ""):
        return None
    try:
        return as_utc(datetime.fromisoformat(str(value)))
    except ValueError as e:
        raise ValidationError(f"{field} must be an ISO-8601 datetime") from e


def match_int(request: web.Request, name: str) -> int:
    """Get an integer path parameter."""
    try:
        return int(request.match_info[name])
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer") from e


def money(value: Decimal | None) -> str | None:
    """Serialize money as a 2 dp string."""
    return None if value is None else f"{Decimal(value):.2f}"


def serialize_code(code: RedemptionCode) -> dict[str, Any]:
    return {
        "code": code.code,
        "kind": code.kind,
        "max_uses": code.max_uses,
        "uses_count": code.uses_count,
        "is_active": code.is_active,
        "license_grant_id": code.license_grant_id,
    }


def serialize_grant(grant: LicenseGrant) -> dict[str, Any]:
    return {
        "id": grant.id,
        "team_name": grant.team_name,
        "seat_total": grant.seat_total,
        "purchased_seats": grant.purchased_seats,
        "subscription_status": grant.subscription_status,
        "organization_license_id": grant.organization_license_id,
    }


def serialize_organization(result: OrganizationProvisionResult) -> dict[str, Any]:
    organization = result.organization
    return {
        "id": organization.id,
        "name": organization.name,
        "total_seats": organization.total_seats,
        "number_of_teams": organization.number_of_teams,
        "teams": [
            {
                "team_index": team.team_index,
                "team_name": team.team_name,
                "seats": team.seats,
                "succeeded": team.succeeded,
                "license_grant_id": team.license_grant_id,
                "coach_code": team.coach_code,
                "member_code": team.member_code,
                "error": team.error,
            }
            for team in result.teams
        ],
    }


def serialize_partner(summary: PartnerSummary) -> dict[str, Any]:
    partner = summary.partner
    return {
        "id": partner.id,
        "finder_code": partner.finder_code,
        "partner_name": partner.partner_name,
        "partner_email": partner.partner_email,
        "is_recurring": partner.is_recurring,
        "enabled": partner.enabled,
        "fee_percentage_first": str(partner.fee_percentage_first),
        "fee_percentage_renewal": str(partner.fee_percentage_renewal),
        "referral_count": summary.referral_count,
        "total_earned": money(summary.total_earned),
        "total_paid": money(summary.total_paid),
        "total_outstanding": money(summary.total_outstanding),
        "finder_link": summary.finder_link,
        "created_at": isoformat_or_none(partner.created_at),
    }


def serialize_fee(fee: FinderFeeRecord) -> dict[str, Any]:
    return {
        "id": fee.id,
        "finder_code": fee.finder_code,
        "referred_party": fee.referred_party,
        "purchase_amount": money(fee.purchase_amount),
        "fee_percentage": str(fee.fee_percentage),
        "fee_amount": money(fee.fee_amount),
        "is_first_purchase": fee.is_first_purchase,
        "is_recurring_partner": fee.is_recurring_partner,
        "status": fee.status,
        "purchase_session_id": fee.purchase_session_id,
        "admin_notes": fee.admin_notes,
        "created_at": isoformat_or_none(fee.created_at),
        "approved_at": isoformat_or_none(fee.approved_at),
        "paid_at": isoformat_or_none(fee.paid_at),
    }


def serialize_promo(promo: PromoCode) -> dict[str, Any]:
    return {
        "id": promo.id,
        "code": promo.code,
        "description": promo.description,
        "code_type": promo.code_type,
        "discount_percent": (
            str(promo.discount_percent) if promo.discount_percent is not None else None
        ),
        "tier_duration_days": promo.tier_duration_days,
        "max_redemptions": promo.max_redemptions,
        "redemptions_count": promo.redemptions_count,
        "is_active": promo.is_active,
        "status": promo.computed_status().value,
        "expires_at": isoformat_or_none(promo.expires_at),
        "created_at": isoformat_or_none(promo.created_at),
    }


def serialize_trial(grant: TrialGrant) -> dict[str, Any]:
    return {
        "id": grant.id,
        "user_email": grant.user_email,
        "granted_by": grant.granted_by,
        "source_record_id": grant.source_record_id,
        "granted_at": isoformat_or_none(grant.granted_at),
        "expires_at": isoformat_or_none(grant.expires_at),
        "grace_period_ends_at": isoformat_or_none(grant.grace_period_ends_at),
        "revoked_at": isoformat_or_none(grant.revoked_at),
    }


def serialize_trial_status(status: TrialStatus) -> dict[str, Any]:
    return {
        "email": status.email,
        "tier": status.tier,
        "is_trial_active": status.is_trial_active,
        "in_grace_period": status.in_grace_period,
        "days_remaining": status.days_remaining,
        "expires_at": isoformat_or_none(status.expires_at),
        "grace_period_ends_at": isoformat_or_none(status.grace_period_ends_at),
        "granted_by": status.granted_by,
    }
