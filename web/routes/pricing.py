"""
Seat pricing quote route.
"""

from aiohttp import web

from app.models.enums import BillingType
from app.utils.exceptions import ValidationError
from web.context import get_context
from web.routes.common import money, read_json, require_int


routes = web.RouteTableDef()


@routes.post("/api/pricing/quote")
async def quote(request: web.Request) -> web.Response:
    """Price a team license for a seat count and billing type."""
    body = await read_json(request)
    seat_count = require_int(body, "seat_count")

    try:
        billing_type = BillingType(body.get("billing_type") or BillingType.UPFRONT)
    except ValueError as e:
        raise ValidationError(
            "billing_type must be upfront or monthly",
            billing_type=body.get("billing_type"),
        ) from e

    result = get_context(request).calculator.quote(seat_count, billing_type)
    return web.json_response(
        {
            "seat_count": result.seat_count,
            "billing_type": result.billing_type,
            "discount_percent": str(result.discount_percent),
            "list_price_per_seat": money(result.list_price_per_seat),
            "price_per_seat": money(result.price_per_seat),
            "total": money(result.total),
            "savings": money(result.savings),
        }
    )
