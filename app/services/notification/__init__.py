"""
Notification package.

Outbound side effects of ledger operations. None of these may abort the
operation that triggered them.

Structure:
- email.py: Resend email client (send / send_safely)
- templates.py: purchase confirmation and admin notice templates
- partner_tracking.py: Tolt conversion tracking

Usage:
    from app.services.notification import EmailClient

    client = EmailClient.from_settings(settings)
    await client.send_safely(to, subject, html, text)
"""

from app.services.notification.email import EmailClient
from app.services.notification.partner_tracking import PartnerTracker
from app.services.notification.templates import (
    TeamCodes,
    finder_fee_admin_email,
    finder_fee_approved_email,
    organization_codes_email,
    team_codes_email,
)


__all__ = [
    "EmailClient",
    "PartnerTracker",
    "TeamCodes",
    "finder_fee_admin_email",
    "finder_fee_approved_email",
    "organization_codes_email",
    "team_codes_email",
]
