"""
Formatting utilities for money and percentages.

Used by the email templates and the admin JSON payloads.
"""

from decimal import Decimal


def format_currency(
    amount: float | Decimal,
    currency: str = "$",
    decimals: int = 2,
) -> str:
    """
    Format an amount as currency.

    Args:
        amount: Amount to format
        currency: Symbol ("$") or code ("USD")
        decimals: Digits after the decimal point

    Returns:
        Formatted string

    Example:
        >>> format_currency(Decimal("1234.5"))
        '$1,234.50'
        >>> format_currency(1000, currency="USD", decimals=0)
        '1,000 USD'
    """
    formatted = f"{Decimal(str(amount)):,.{decimals}f}"
    if currency in ("$", "€"):
        return f"{currency}{formatted}"
    return f"{formatted} {currency}"


def format_percentage(
    value: float | Decimal,
    decimals: int = 0,
) -> str:
    """
    Format a percentage value.

    Example:
        >>> format_percentage(Decimal("15"))
        '15%'
        >>> format_percentage(12.5, decimals=1)
        '12.5%'
    """
    return f"{Decimal(str(value)):.{decimals}f}%"
