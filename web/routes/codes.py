"""
Public code routes: redeem and verify.
"""

from aiohttp import web

from app.services.redemption_service import RedemptionService
from web.context import get_context
from web.routes.common import read_json, require_str


routes = web.RouteTableDef()


@routes.post("/api/codes/redeem")
async def redeem_code(request: web.Request) -> web.Response:
    """Consume one use of a team or coach code."""
    body = await read_json(request)
    code = require_str(body, "code")

    async with get_context(request).session_maker() as session:
        outcome = await RedemptionService(session).redeem(code)

    return web.json_response(
        {
            "success": True,
            "code": outcome.code,
            "kind": outcome.kind.value,
            "license_grant_id": outcome.license_grant_id,
            "linked_code": outcome.linked_code,
            "uses_count": outcome.uses_count,
            "max_uses": outcome.max_uses,
            "remaining_uses": outcome.remaining_uses,
            "consumes_seat": outcome.consumes_seat,
        }
    )


@routes.post("/api/codes/verify")
async def verify_code(request: web.Request) -> web.Response:
    """Check that a code exists and is active."""
    body = await read_json(request)
    code = require_str(body, "code")

    async with get_context(request).session_maker() as session:
        row = await RedemptionService(session).verify_code(code)

    return web.json_response({"valid": True, "kind": row.kind})
