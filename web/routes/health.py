"""
Health check route.
"""

from aiohttp import web
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from web.context import get_context


routes = web.RouteTableDef()


@routes.get("/health")
async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with database status
    """
    context = get_context(request)
    try:
        async with context.session_maker() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check failed: {e}")
        return web.json_response(
            {"status": "unhealthy", "database": "unavailable"},
            status=503,
        )

    return web.json_response({"status": "healthy", "database": "ok"})
