"""
Admin license routes: manual organizations, seat expansion and code
deactivation.
"""

from aiohttp import web

from app.services.license_service import LicenseService
from app.services.organization_service import OrganizationService
from app.services.redemption_service import RedemptionService
from app.utils.exceptions import ValidationError
from web.context import get_context
from web.routes.common import (
    match_int,
    read_json,
    require_int,
    require_str,
    serialize_code,
    serialize_grant,
    serialize_organization,
)


routes = web.RouteTableDef()


@routes.post("/api/admin/organizations")
async def create_organization(request: web.Request) -> web.Response:
    """Provision an organization outside of checkout."""
    body = await read_json(request)
    context = get_context(request)

    seats_per_team = body.get("seats_per_team")
    if seats_per_team is not None and not isinstance(seats_per_team, list):
        raise ValidationError("seats_per_team must be a list of integers")

    total_seats = require_int(body, "total_seats")

    async with context.session_maker() as session:
        service = OrganizationService(
            session, context.settings.code_generation_max_attempts
        )
        result = await service.provision_organization(
            org_name=require_str(body, "org_name"),
            admin_email=require_str(body, "admin_email").lower(),
            total_seats=total_seats,
            number_of_teams=require_int(body, "number_of_teams"),
            seats_per_team=seats_per_team,
            discount_percentage=context.calculator.seat_discount_percent(total_seats),
        )
        await service.commit()

    return web.json_response(
        {"organization": serialize_organization(result)}, status=201
    )


@routes.post("/api/admin/teams/{grant_id}/seats")
async def add_seats(request: web.Request) -> web.Response:
    grant_id = match_int(request, "grant_id")
    body = await read_json(request)
    context = get_context(request)

    async with context.session_maker() as session:
        service = LicenseService(
            session,
            context.settings.code_generation_max_attempts,
            context.settings.seat_expansion_multiplier,
        )
        grant = await service.add_seats(grant_id, require_int(body, "additional_seats"))
        usage = await service.get_seat_usage(grant.id)

    return web.json_response(
        {
            "team": serialize_grant(grant),
            "seats_consumed": usage.seats_consumed,
            "seats_remaining": usage.seats_remaining,
        }
    )


@routes.post("/api/admin/codes/{code}/deactivate")
async def deactivate_code(request: web.Request) -> web.Response:
    code = request.match_info["code"]

    async with get_context(request).session_maker() as session:
        row = await RedemptionService(session).deactivate_code(code)

    return web.json_response({"code": serialize_code(row)})
