"""
Admin finder fee routes.

Partners and the fee approval workflow.
"""

from aiohttp import web

from app.models.enums import FinderFeeStatus
from app.services.finder_fee_service import FinderFeeService
from app.utils.exceptions import ValidationError
from web.context import get_context
from web.routes.common import (
    match_int,
    read_json,
    require_amount,
    require_str,
    serialize_fee,
    serialize_partner,
)


routes = web.RouteTableDef()


def _service(request: web.Request, session) -> FinderFeeService:
    context = get_context(request)
    return FinderFeeService(session, context.calculator, context.settings.site_url)


def _parse_status(value: object) -> FinderFeeStatus:
    try:
        return FinderFeeStatus(value)
    except ValueError as e:
        raise ValidationError(f"Unknown finder fee status {value!r}") from e


@routes.get("/api/admin/finder-fees/partners")
async def list_partners(request: web.Request) -> web.Response:
    async with get_context(request).session_maker() as session:
        summaries = await _service(request, session).list_partners()
    return web.json_response({"partners": [serialize_partner(s) for s in summaries]})


@routes.post("/api/admin/finder-fees/partners")
async def enable_partner(request: web.Request) -> web.Response:
    body = await read_json(request)

    async with get_context(request).session_maker() as session:
        service = _service(request, session)
        partner = await service.enable_partner(
            finder_code=require_str(body, "finder_code"),
            partner_email=require_str(body, "partner_email"),
            partner_name=require_str(body, "partner_name"),
            is_recurring=bool(body.get("is_recurring", False)),
        )
        summaries = await service.list_partners()

    summary = next(s for s in summaries if s.partner.id == partner.id)
    return web.json_response({"partner": serialize_partner(summary)}, status=201)


@routes.patch("/api/admin/finder-fees/partners/{partner_id}")
async def toggle_partner(request: web.Request) -> web.Response:
    partner_id = match_int(request, "partner_id")
    body = await read_json(request)
    if not isinstance(body.get("enabled"), bool):
        raise ValidationError("enabled must be true or false")

    async with get_context(request).session_maker() as session:
        partner = await _service(request, session).set_partner_enabled(
            partner_id, body["enabled"]
        )

    return web.json_response(
        {"id": partner.id, "finder_code": partner.finder_code, "enabled": partner.enabled}
    )


@routes.get("/api/admin/finder-fees")
async def list_fees(request: web.Request) -> web.Response:
    status_param = request.query.get("status")
    status = _parse_status(status_param) if status_param else None

    async with get_context(request).session_maker() as session:
        fees = await _service(request, session).list_fees(
            status=status, finder_code=request.query.get("finder_code")
        )

    return web.json_response({"finder_fees": [serialize_fee(fee) for fee in fees]})


@routes.post("/api/admin/finder-fees")
async def create_fee(request: web.Request) -> web.Response:
    body = await read_json(request)

    async with get_context(request).session_maker() as session:
        fee = await _service(request, session).create_manual_fee(
            finder_code=require_str(body, "finder_code"),
            referred_party=require_str(body, "referred_party"),
            purchase_amount=require_amount(body, "purchase_amount"),
            admin_notes=body.get("admin_notes"),
        )

    return web.json_response({"finder_fee": serialize_fee(fee)}, status=201)


@routes.post("/api/admin/finder-fees/{fee_id}/status")
async def update_fee_status(request: web.Request) -> web.Response:
    fee_id = match_int(request, "fee_id")
    body = await read_json(request)
    status = _parse_status(require_str(body, "status"))

    async with get_context(request).session_maker() as session:
        fee = await _service(request, session).update_status(
            fee_id, status, notes=body.get("notes")
        )

    return web.json_response({"finder_fee": serialize_fee(fee)})
