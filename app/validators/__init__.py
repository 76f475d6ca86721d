"""
Validators package.

Provides common validation functions for user input.
"""

from app.validators.unified import (
    normalize_email,
    parse_amount,
    parse_positive_int,
    validate_email,
    validate_finder_code,
    validate_promo_code,
)


__all__ = [
    "normalize_email",
    "parse_amount",
    "parse_positive_int",
    "validate_email",
    "validate_finder_code",
    "validate_promo_code",
]
