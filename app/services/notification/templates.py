"""
Email templates.

Each builder returns (subject, html, text).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from html import escape

from pricing import format_currency, format_percentage


@dataclass(frozen=True)
class TeamCodes:
    """Codes delivered for one team."""

    team_name: str
    seats: int
    coach_code: str
    member_code: str


def _team_block_html(team: TeamCodes) -> str:
    return (
        f"<h3>{escape(team.team_name)} ({team.seats} seats)</h3>"
        f"<p>Coach code (single use, claims the team): "
        f"<strong>{escape(team.coach_code)}</strong></p>"
        f"<p>Team code (share with athletes, {team.seats} uses): "
        f"<strong>{escape(team.member_code)}</strong></p>"
    )


def _team_block_text(team: TeamCodes) -> str:
    return (
        f"{team.team_name} ({team.seats} seats)\n"
        f"  Coach code: {team.coach_code}\n"
        f"  Team code:  {team.member_code}\n"
    )


def team_codes_email(team: TeamCodes, site_url: str) -> tuple[str, str, str]:
    """Purchase confirmation for a single team."""
    subject = f"Your team license is ready: {team.team_name}"
    html = (
        "<h2>Thanks for your purchase!</h2>"
        + _team_block_html(team)
        + "<p>The coach code can be redeemed once. Parents can link to "
        "athletes with the team code without using a seat.</p>"
        f'<p><a href="{escape(site_url)}">{escape(site_url)}</a></p>'
    )
    text = (
        "Thanks for your purchase!\n\n"
        + _team_block_text(team)
        + f"\n{site_url}\n"
    )
    return subject, html, text


def organization_codes_email(
    organization_name: str,
    teams: Sequence[TeamCodes],
    failed_teams: Sequence[str],
    site_url: str,
) -> tuple[str, str, str]:
    """Purchase confirmation for a multi-team organization."""
    subject = f"Your organization licenses are ready: {organization_name}"
    html_parts = [f"<h2>{escape(organization_name)}: {len(teams)} teams</h2>"]
    text_parts = [f"{organization_name}: {len(teams)} teams\n"]

    for team in teams:
        html_parts.append(_team_block_html(team))
        text_parts.append(_team_block_text(team))

    if failed_teams:
        names = ", ".join(failed_teams)
        html_parts.append(
            f"<p>We could not set up: {escape(names)}. Our team has been "
            "notified and will send those codes separately.</p>"
        )
        text_parts.append(f"\nPending setup: {names}\n")

    html_parts.append(f'<p><a href="{escape(site_url)}">{escape(site_url)}</a></p>')
    text_parts.append(f"\n{site_url}\n")
    return subject, "".join(html_parts), "".join(text_parts)


ACTION_LABELS = {
    "approve": "Approve",
    "reject": "Reject",
    "paid": "Mark as paid",
}


def _action_links_html(links: dict[str, str]) -> str:
    if not links:
        return ""
    return "<p>" + " | ".join(
        f'<a href="{escape(url)}">{ACTION_LABELS.get(action, action)}</a>'
        for action, url in links.items()
    ) + "</p>"


def _action_links_text(links: dict[str, str]) -> str:
    return "".join(
        f"{ACTION_LABELS.get(action, action)}: {url}\n" for action, url in links.items()
    )


def finder_fee_admin_email(
    *,
    finder_code: str,
    partner_name: str,
    referred_party: str,
    purchase_amount: Decimal,
    fee_percentage: Decimal,
    fee_amount: Decimal,
    is_first_purchase: bool,
    site_url: str,
    action_links: dict[str, str] | None = None,
) -> tuple[str, str, str]:
    """
    Admin notice that a finder fee is awaiting approval.

    action_links maps "approve" / "reject" to signed one-click URLs; without
    them the notice only links to the dashboard.
    """
    kind = "first purchase" if is_first_purchase else "renewal"
    subject = f"Finder fee pending: {format_currency(fee_amount)} for {finder_code}"
    lines = [
        ("Partner", f"{partner_name} ({finder_code})"),
        ("Referred", referred_party),
        ("Purchase", f"{format_currency(purchase_amount)} ({kind})"),
        ("Fee", f"{format_currency(fee_amount)} at {format_percentage(fee_percentage)}"),
    ]
    html = (
        "<h2>New finder fee</h2><table>"
        + "".join(
            f"<tr><td>{escape(label)}</td><td>{escape(value)}</td></tr>"
            for label, value in lines
        )
        + "</table>"
        + _action_links_html(action_links or {})
        + f'<p><a href="{escape(site_url)}/admin/finder-fees">Review finder fees</a></p>'
    )
    text = (
        "New finder fee\n"
        + "".join(f"{label}: {value}\n" for label, value in lines)
        + _action_links_text(action_links or {})
    )
    return subject, html, text


def finder_fee_approved_email(
    *,
    finder_code: str,
    referred_party: str,
    fee_amount: Decimal,
    paid_link: str | None,
) -> tuple[str, str, str]:
    """Follow-up after approval: pay the partner, then mark the fee paid."""
    subject = f"Approved: pay {finder_code} {format_currency(fee_amount)}"
    links = {"paid": paid_link} if paid_link else {}
    html = (
        "<h2>Finder fee approved</h2>"
        f"<p>Pay <strong>{escape(finder_code)}</strong> "
        f"{escape(format_currency(fee_amount))} for {escape(referred_party)}.</p>"
        + _action_links_html(links)
    )
    text = (
        f"Finder fee approved\nPay {finder_code} {format_currency(fee_amount)} "
        f"for {referred_party}.\n" + _action_links_text(links)
    )
    return subject, html, text
