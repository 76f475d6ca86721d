"""
Admin trial routes.
"""

from aiohttp import web

from app.services.trial_service import TrialService
from web.context import get_context
from web.routes.common import (
    read_json,
    require_int,
    require_str,
    serialize_trial,
    serialize_trial_status,
)


routes = web.RouteTableDef()


def _service(request: web.Request, session) -> TrialService:
    settings = get_context(request).settings
    return TrialService(session, settings.trial_days, settings.trial_grace_days)


@routes.get("/api/admin/trials")
async def list_trials(request: web.Request) -> web.Response:
    """List grants, or the status of one user with ?email=."""
    email = request.query.get("email")

    async with get_context(request).session_maker() as session:
        service = _service(request, session)
        if email:
            status = await service.get_trial_status(email)
            return web.json_response({"trial": serialize_trial_status(status)})
        grants = await service.list_trials()

    return web.json_response({"trials": [serialize_trial(g) for g in grants]})


@routes.post("/api/admin/trials/grant")
async def grant_trial(request: web.Request) -> web.Response:
    body = await read_json(request)

    async with get_context(request).session_maker() as session:
        grant = await _service(request, session).grant_trial(
            require_str(body, "email"),
            granted_by=body.get("granted_by") or "admin",
            source_record_id=body.get("source_record_id"),
        )

    return web.json_response({"trial": serialize_trial(grant)}, status=201)


@routes.post("/api/admin/trials/extend")
async def extend_trial(request: web.Request) -> web.Response:
    body = await read_json(request)

    async with get_context(request).session_maker() as session:
        grant = await _service(request, session).extend_trial(
            require_str(body, "email"), require_int(body, "days")
        )

    return web.json_response({"trial": serialize_trial(grant)})


@routes.post("/api/admin/trials/revoke")
async def revoke_trial(request: web.Request) -> web.Response:
    body = await read_json(request)

    async with get_context(request).session_maker() as session:
        grant = await _service(request, session).revoke_trial(
            require_str(body, "email")
        )

    return web.json_response({"trial": serialize_trial(grant)})
