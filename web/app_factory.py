"""
aiohttp application factory.
"""

from aiohttp import web

from web.context import APP_CONTEXT, AppContext
from web.middlewares import admin_auth_middleware, error_middleware
from web.routes import setup_routes


async def _close_context(app: web.Application) -> None:
    await app[APP_CONTEXT].close()


def create_app(context: AppContext) -> web.Application:
    """Build the application around an already constructed context."""
    app = web.Application(middlewares=[error_middleware, admin_auth_middleware])
    app[APP_CONTEXT] = context
    setup_routes(app)
    app.on_cleanup.append(_close_context)
    return app
