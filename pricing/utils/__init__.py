"""
Utility functions for the pricing package.
"""

from pricing.utils.formatters import format_currency, format_percentage

__all__ = [
    "format_currency",
    "format_percentage",
]
