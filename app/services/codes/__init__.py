"""
Code generation package.

- generator: redemption code and promo code generation with collision retry
"""

from app.services.codes.generator import (
    generate_code,
    generate_promo_code,
    generate_unique_code,
)


__all__ = [
    "generate_code",
    "generate_promo_code",
    "generate_unique_code",
]
