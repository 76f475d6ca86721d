"""
Public promo code validation route.
"""

from aiohttp import web

from app.services.promo_code_service import PromoCodeService
from web.context import get_context
from web.routes.common import read_json, require_str


routes = web.RouteTableDef()


@routes.post("/api/promo-codes/validate")
async def validate_promo_code(request: web.Request) -> web.Response:
    """Check a promo code for a purchaser email before checkout."""
    body = await read_json(request)
    code = require_str(body, "code")
    email = require_str(body, "email")

    async with get_context(request).session_maker() as session:
        promo = await PromoCodeService(session).validate_for_email(code, email)

    return web.json_response(
        {
            "valid": True,
            "code": promo.code,
            "code_type": promo.code_type,
            "discount_percent": (
                str(promo.discount_percent)
                if promo.discount_percent is not None
                else None
            ),
            "tier_duration_days": promo.tier_duration_days,
        }
    )
