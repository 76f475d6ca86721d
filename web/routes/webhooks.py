"""
Stripe webhook route.

The raw body is verified against the Stripe-Signature header before
anything is parsed.
"""

import json

import stripe
from aiohttp import web
from loguru import logger

from app.services.payment_event_service import PaymentEventService
from app.utils.exceptions import ValidationError
from web.context import get_context


routes = web.RouteTableDef()


@routes.post("/api/webhooks/stripe")
async def stripe_webhook(request: web.Request) -> web.Response:
    """Verify and apply a Stripe event."""
    context = get_context(request)
    settings = context.settings

    if not settings.stripe_webhook_secret:
        logger.error("STRIPE_WEBHOOK_SECRET not set, refusing webhook")
        return web.json_response(
            {"error": "not_configured", "message": "Webhook not configured"},
            status=500,
        )

    payload = await request.text()
    signature = request.headers.get("Stripe-Signature")
    if not signature:
        raise ValidationError("Missing Stripe-Signature header")

    try:
        stripe.WebhookSignature.verify_header(
            payload,
            signature,
            settings.stripe_webhook_secret,
            settings.stripe_webhook_tolerance,
        )
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Stripe signature verification failed: {e}")
        return web.json_response(
            {"error": "invalid_signature", "message": "Invalid signature"},
            status=400,
        )

    try:
        event = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValidationError("Webhook payload is not valid JSON") from e

    logger.info(f"Stripe event {event.get('id')} ({event.get('type')})")

    async with context.session_maker() as session:
        service = PaymentEventService(
            session,
            context.email_client,
            context.partner_tracker,
            site_url=settings.site_url,
            admin_email=settings.admin_email,
            max_attempts=settings.code_generation_max_attempts,
            calculator=context.calculator,
            finder_fee_action_secret=settings.finder_fee_action_secret,
        )
        summary = await service.handle_event(event)

    return web.json_response({"received": True, **summary})
