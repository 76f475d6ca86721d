"""
Security utilities.

Provides functions to safely mask:
- Email addresses
- Redemption codes
- API keys and passwords

and to sign the one-click finder fee action links sent to the admin.
"""

import hashlib
import hmac


def mask_email(email: str | None) -> str:
    """
    Mask email address for logging: co***@example.com

    Examples:
        >>> mask_email("coach@example.com")
        'co***@example.com'
        >>> mask_email(None)
        '***'
    """
    if not email or "@" not in email:
        return "***"
    local, _, domain = email.partition("@")
    return f"{local[:2]}***@{domain}"


def mask_code(code: str | None) -> str:
    """
    Mask redemption code for logging, keeping the prefix and last group.

    Examples:
        >>> mask_code("TEAM-ABCD-EFGH-JKLM")
        'TEAM-****-****-JKLM'
    """
    if not code or "-" not in code:
        return "***"
    parts = code.split("-")
    return "-".join([parts[0], *["****"] * (len(parts) - 2), parts[-1]])


def mask_sensitive(value: str | None, show_chars: int = 4) -> str:
    """
    Mask sensitive string (keys, passwords, etc).

    Args:
        value: Sensitive value to mask
        show_chars: Number of characters to show at start and end

    Returns:
        Masked value or '***' if too short

    Examples:
        >>> mask_sensitive("re_live_1234567890abcdef", show_chars=4)
        're_l...cdef'
        >>> mask_sensitive("short")
        '***'
    """
    if not value or len(value) <= show_chars * 2:
        return "***"
    return f"{value[:show_chars]}...{value[-show_chars:]}"


def fee_action_token(secret: str, fee_id: int, action: str) -> str:
    """
    Sign a finder fee action link.

    The token binds the fee id and the action, so an approve link cannot
    be replayed as a mark-paid link.
    """
    message = f"finder-fee:{fee_id}:{action}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_fee_action_token(
    secret: str, fee_id: int, action: str, token: str | None
) -> bool:
    """Check a finder fee action token. An unset secret never matches."""
    if not secret or not token:
        return False
    return hmac.compare_digest(fee_action_token(secret, fee_id, action), token)
