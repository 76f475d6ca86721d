"""
HTTP routes.

Public:
- health: liveness and database ping
- webhooks: Stripe events
- codes: redeem / verify
- pricing: seat quotes
- promo: promo code validation
- finder_fee_actions: signed one-click links from finder fee emails

Admin (X-Admin-Password):
- admin_finder_fees, admin_promo_codes, admin_trials, admin_licenses
"""

from aiohttp import web

from web.routes import (
    admin_finder_fees,
    admin_licenses,
    admin_promo_codes,
    admin_trials,
    codes,
    finder_fee_actions,
    health,
    pricing,
    promo,
    webhooks,
)


ROUTE_MODULES = (
    health,
    webhooks,
    codes,
    pricing,
    promo,
    finder_fee_actions,
    admin_finder_fees,
    admin_promo_codes,
    admin_trials,
    admin_licenses,
)


def setup_routes(app: web.Application) -> None:
    """Register every route table on the application."""
    for module in ROUTE_MODULES:
        app.add_routes(module.routes)


__all__ = ["setup_routes"]
