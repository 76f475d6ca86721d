"""
Web Initialization - Context Module.

Builds the database engine and outbound clients from settings.
"""

from loguru import logger

from app.config.database import create_engine, create_session_maker
from app.config.settings import Settings
from app.services.notification import EmailClient, PartnerTracker
from web.context import AppContext


def build_context(settings: Settings) -> AppContext:
    """Create engine, session maker and clients."""
    engine = create_engine(settings)
    context = AppContext(
        settings=settings,
        session_maker=create_session_maker(engine),
        email_client=EmailClient.from_settings(settings),
        partner_tracker=PartnerTracker.from_settings(settings),
        engine=engine,
    )

    if not context.email_client.is_configured:
        logger.warning("RESEND_API_KEY not set, emails will not be delivered")

    return context
