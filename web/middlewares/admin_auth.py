"""
Admin authentication middleware.

Every /api/admin route requires the shared dashboard password in the
X-Admin-Password header.
"""

import hmac
from collections.abc import Awaitable, Callable

from aiohttp import web
from loguru import logger

from web.context import get_context


ADMIN_PREFIX = "/api/admin"
ADMIN_PASSWORD_HEADER = "X-Admin-Password"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def is_valid_admin_password(provided: str | None, expected: str) -> bool:
    """
    Compare passwords in constant time.

    An unset expected password never matches.
    """
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


@web.middleware
async def admin_auth_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Reject admin requests without the dashboard password."""
    if not request.path.startswith(ADMIN_PREFIX):
        return await handler(request)

    expected = get_context(request).settings.admin_dashboard_password
    if not is_valid_admin_password(
        request.headers.get(ADMIN_PASSWORD_HEADER), expected
    ):
        logger.warning(
            f"Rejected admin request {request.method} {request.path} "
            f"from {request.remote}"
        )
        return web.json_response(
            {"error": "unauthorized", "message": "Unauthorized"}, status=401
        )

    return await handler(request)
