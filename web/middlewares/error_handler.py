"""
Global Error Handler Middleware.

Maps ledger errors to HTTP responses. Unexpected exceptions are logged
with traceback and answered with a generic 500 - never technical details.
"""

from collections.abc import Awaitable, Callable

from aiohttp import web
from loguru import logger

from app.utils.exceptions import LedgerError, must_log


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Translate exceptions into JSON error responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except LedgerError as e:
        if must_log(e):
            logger.opt(exception=e).error(
                f"{request.method} {request.path} failed: {e.message}"
            )
        else:
            logger.info(
                f"{request.method} {request.path} -> {e.status_code} "
                f"{e.error_code}: {e.message}"
            )
        return web.json_response(e.to_dict(), status=e.status_code)
    except Exception as e:
        logger.exception(f"Unhandled error in {request.method} {request.path}: {e}")
        return web.json_response(
            {"error": "internal_error", "message": "Internal server error"},
            status=500,
        )
