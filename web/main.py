"""
HTTP server entry point.

Serves the Stripe webhook, code redemption, pricing quotes and the admin
API from a single aiohttp application.
"""

import sys
from pathlib import Path

from aiohttp import web
from loguru import logger


# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import settings  # noqa: E402
from web.app_factory import create_app  # noqa: E402
from web.initialization import build_context, setup_logging  # noqa: E402


def run() -> None:
    """Configure logging, build the context and serve until interrupted."""
    setup_logging(settings)

    context = build_context(settings)
    app = create_app(context)

    logger.info(
        f"Listening on {settings.http_host}:{settings.http_port}"
    )
    try:
        web.run_app(
            app,
            host=settings.http_host,
            port=settings.http_port,
            print=None,
        )
    finally:
        logger.info("Ledger server stopped")


if __name__ == "__main__":
    run()
