"""
Transactional email client.

Sends through the Resend HTTP API with aiohttp. Email is always a side
effect: callers on the purchase path use send_safely(), which logs and
swallows failures so a mail outage never undoes a committed purchase.
"""

from typing import Any

import aiohttp
from loguru import logger

from app.config.settings import Settings
from app.utils.exceptions import NotificationFailure, is_safe_to_ignore
from app.utils.security import mask_email


class EmailClient:
    """Resend API client."""

    def __init__(
        self,
        api_key: str | None,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout_seconds: float = 15.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize email client.

        Args:
            api_key: Resend API key (None disables delivery)
            sender: From header, e.g. "Name <noreply@example.com>"
            api_url: Resend emails endpoint
            timeout_seconds: Total request timeout
            session: Optional shared aiohttp session
        """
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._session = session

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailClient":
        """Build client from application settings."""
        return cls(
            api_key=settings.resend_api_key,
            sender=settings.email_from,
            api_url=settings.resend_api_url,
            timeout_seconds=settings.email_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(
        self,
        to: str | list[str],
        subject: str,
        html: str,
        text: str | None = None,
    ) -> str | None:
        """
        Send an email.

        Args:
            to: Recipient or recipients
            subject: Subject line
            html: HTML body
            text: Optional plain-text body

        Returns:
            Provider message id, if returned

        Raises:
            NotificationFailure: If delivery is not configured or rejected
        """
        if not self.is_configured:
            raise NotificationFailure("Email delivery is not configured")

        recipients = [to] if isinstance(to, str) else list(to)
        payload: dict[str, Any] = {
            "from": self.sender,
            "to": recipients,
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text

        session = await self._get_session()
        async with session.post(
            self.api_url,
            json=payload,
            timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            headers={"Authorization": f"Bearer {self.api_key}"},
        ) as response:
            if response.status >= 400:
                body = await response.text()
                raise NotificationFailure(
                    f"Email provider returned {response.status}",
                    status=response.status,
                    body=body[:500],
                )
            try:
                data = await response.json(content_type=None)
            except ValueError:
                # Accepted, but the body carries no message id
                data = None

        message_id = data.get("id") if isinstance(data, dict) else None
        logger.info(
            f"Email sent to {', '.join(mask_email(r) for r in recipients)}: "
            f"{subject!r} (id={message_id})"
        )
        return message_id

    async def send_safely(
        self,
        to: str | list[str],
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """
        Send an email, logging instead of raising on failure.

        Returns:
            True if the provider accepted the message
        """
        try:
            await self.send(to, subject, html, text)
            return True
        except Exception as e:
            recipient = mask_email(to if isinstance(to, str) else to[0])
            if is_safe_to_ignore(e):
                logger.warning(f"Email to {recipient} not sent ({subject!r}): {e}")
            else:
                logger.opt(exception=e).error(
                    f"Unexpected error sending email to {recipient} ({subject!r})"
                )
            return False

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
