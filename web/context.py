"""
Application context.

Long-lived clients shared by request handlers. Created once at startup
and stored on the aiohttp application; nothing here is a module global.
"""

from dataclasses import dataclass, field

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.config.settings import Settings
from app.services.notification import EmailClient, PartnerTracker
from pricing import CommissionCalculator


@dataclass
class AppContext:
    """Dependencies injected into request handlers."""

    settings: Settings
    session_maker: async_sessionmaker[AsyncSession]
    email_client: EmailClient
    partner_tracker: PartnerTracker | None = None
    engine: AsyncEngine | None = None
    calculator: CommissionCalculator = field(default_factory=CommissionCalculator)

    async def close(self) -> None:
        """Release HTTP sessions and database connections."""
        await self.email_client.close()
        if self.partner_tracker is not None:
            await self.partner_tracker.close()
        if self.engine is not None:
            await self.engine.dispose()


APP_CONTEXT = web.AppKey("app_context", AppContext)


def get_context(request: web.Request) -> AppContext:
    """Get the application context for a request."""
    return request.app[APP_CONTEXT]
