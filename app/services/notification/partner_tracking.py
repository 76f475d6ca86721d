"""
Partner conversion tracking (Tolt).

Reports purchases and renewals attributed to a partner. Tracking is
optional: without an API key every call is a logged no-op, and provider
errors are never propagated.
"""

from decimal import Decimal

import aiohttp
from loguru import logger

from app.config.settings import Settings
from app.utils.exceptions import NotificationFailure, is_safe_to_ignore
from app.utils.security import mask_email


class PartnerTracker:
    """Tolt transactions API client."""

    def __init__(
        self,
        api_key: str | None,
        api_url: str,
        timeout_seconds: float = 15.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._session = session

    @classmethod
    def from_settings(cls, settings: Settings) -> "PartnerTracker":
        """Build tracker from application settings."""
        return cls(
            api_key=settings.tolt_api_key,
            api_url=settings.tolt_api_url,
            timeout_seconds=settings.email_timeout_seconds,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def track_conversion(
        self,
        *,
        customer_email: str,
        amount: Decimal,
        source_id: str,
        partner_ref: str | None = None,
        is_renewal: bool = False,
    ) -> bool:
        """
        Report a conversion.

        Args:
            customer_email: Purchaser email
            amount: Amount paid in dollars
            source_id: Checkout session or invoice id
            partner_ref: Referral code carried through checkout
            is_renewal: Subscription renewal rather than first purchase

        Returns:
            True if the provider accepted the conversion
        """
        if not self.api_key:
            logger.debug("Partner tracking disabled, skipping conversion")
            return False

        payload = {
            "customer_email": customer_email,
            "amount": int((amount * 100).to_integral_value()),
            "source_id": source_id,
            "billing_type": "subscription" if is_renewal else "one_time",
        }
        if partner_ref:
            payload["partner_ref"] = partner_ref

        try:
            session = await self._get_session()
            async with session.post(
                self.api_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"Authorization": f"Bearer {self.api_key}"},
            ) as response:
                if response.status >= 400:
                    raise NotificationFailure(
                        f"Partner tracking returned {response.status}",
                        status=response.status,
                    )
        except Exception as e:
            message = (
                f"Conversion for {mask_email(customer_email)} not tracked "
                f"(source={source_id})"
            )
            if is_safe_to_ignore(e):
                logger.warning(f"{message}: {e}")
            else:
                logger.opt(exception=e).error(message)
            return False

        logger.info(
            f"Tracked {'renewal' if is_renewal else 'purchase'} conversion "
            f"for {mask_email(customer_email)} (source={source_id})"
        )
        return True

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
