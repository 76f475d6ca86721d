"""
Admin promo code routes.
"""

from decimal import Decimal, InvalidOperation

from aiohttp import web

from app.models.enums import PromoCodeType
from app.services.promo_code_service import PromoCodeService
from app.utils.exceptions import ValidationError
from web.context import get_context
from web.routes.common import (
    match_int,
    optional_datetime,
    optional_int,
    read_json,
    serialize_promo,
)


routes = web.RouteTableDef()


@routes.get("/api/admin/promo-codes")
async def list_promo_codes(request: web.Request) -> web.Response:
    async with get_context(request).session_maker() as session:
        promos = await PromoCodeService(session).list_promo_codes()
    return web.json_response({"promo_codes": [serialize_promo(p) for p in promos]})


@routes.post("/api/admin/promo-codes")
async def create_promo_code(request: web.Request) -> web.Response:
    body = await read_json(request)

    try:
        code_type = PromoCodeType(body.get("code_type") or PromoCodeType.DISCOUNT)
    except ValueError as e:
        raise ValidationError("code_type must be discount or trial") from e

    discount = body.get("discount_percent")
    try:
        discount_percent = Decimal(str(discount)) if discount not in (None, "") else None
    except InvalidOperation as e:
        raise ValidationError("discount_percent must be a number") from e

    async with get_context(request).session_maker() as session:
        promo = await PromoCodeService(
            session, get_context(request).settings.code_generation_max_attempts
        ).create_promo_code(
            code_type=code_type,
            code=body.get("code") or None,
            discount_percent=discount_percent,
            tier_duration_days=optional_int(body, "tier_duration_days"),
            max_redemptions=optional_int(body, "max_redemptions"),
            expires_at=optional_datetime(body, "expires_at"),
            description=body.get("description"),
        )

    return web.json_response({"promo_code": serialize_promo(promo)}, status=201)


@routes.patch("/api/admin/promo-codes/{promo_id}")
async def toggle_promo_code(request: web.Request) -> web.Response:
    promo_id = match_int(request, "promo_id")
    body = await read_json(request)
    if not isinstance(body.get("is_active"), bool):
        raise ValidationError("is_active must be true or false")

    async with get_context(request).session_maker() as session:
        promo = await PromoCodeService(session).set_active(promo_id, body["is_active"])

    return web.json_response({"promo_code": serialize_promo(promo)})
