"""
One-click finder fee actions.

The admin email carries signed approve / reject links; approving sends a
follow-up with a signed mark-paid link. Responses are small HTML pages
because the links are opened from a mail client.
"""

from html import escape

from aiohttp import web
from loguru import logger

from app.services.finder_fee_service import FEE_ACTIONS, FinderFeeService
from app.services.notification import finder_fee_approved_email
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.security import verify_fee_action_token
from pricing import format_currency
from web.context import get_context


routes = web.RouteTableDef()


def _page(title: str, message: str, status: int = 200) -> web.Response:
    return web.Response(
        text=(
            f"<!DOCTYPE html><html><head><title>{escape(title)}</title></head>"
            f"<body><h1>{escape(title)}</h1><p>{escape(message)}</p></body></html>"
        ),
        content_type="text/html",
        status=status,
    )


@routes.get("/api/finder-fees/action")
async def finder_fee_action(request: web.Request) -> web.Response:
    """Apply a signed approve / reject / paid link."""
    context = get_context(request)
    settings = context.settings
    action = request.query.get("action", "")
    token = request.query.get("token")

    try:
        fee_id = int(request.query.get("fee", ""))
    except ValueError:
        return _page("Error", "Missing or invalid fee parameter.", 400)

    new_status = FEE_ACTIONS.get(action)
    if new_status is None:
        return _page("Error", f"Unknown action {action!r}.", 400)

    if not verify_fee_action_token(
        settings.finder_fee_action_secret, fee_id, action, token
    ):
        logger.warning(f"Rejected finder fee action {action} for fee {fee_id}")
        return _page("Invalid link", "This link is invalid or has expired.", 403)

    async with context.session_maker() as session:
        service = FinderFeeService(
            session,
            context.calculator,
            settings.site_url,
            settings.finder_fee_action_secret,
        )
        try:
            fee = await service.update_status(fee_id, new_status)
        except NotFoundError:
            return _page("Not found", "This finder fee no longer exists.", 404)
        except ValidationError as e:
            return _page("Already processed", e.message, 409)

        paid_link = service.action_links(fee.id, ("paid",)).get("paid")

    if action == "approve" and settings.admin_email:
        subject, html, text = finder_fee_approved_email(
            finder_code=fee.finder_code,
            referred_party=fee.referred_party,
            fee_amount=fee.fee_amount,
            paid_link=paid_link,
        )
        await context.email_client.send_safely(
            settings.admin_email, subject, html, text
        )

    return _page(
        "Done",
        f"Finder fee of {format_currency(fee.fee_amount)} for "
        f"{fee.finder_code} is now {fee.status}.",
    )
