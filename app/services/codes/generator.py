"""
Redemption and promo code generation.

Codes are drawn from a 32-symbol alphabet without the lookalikes 0, O, 1
and I, so they survive being read aloud or copied off a printout. Every
symbol is drawn independently with the secrets module; there is no counter
or timestamp component.
"""

import secrets
from collections.abc import Awaitable, Callable

from loguru import logger

from app.config.business_constants import (
    CODE_ALPHABET,
    CODE_GENERATION_MAX_ATTEMPTS,
    CODE_SEGMENT_LENGTH,
    CODE_SEGMENTS,
    PROMO_CODE_LENGTH,
)
from app.utils.exceptions import CodeGenerationError


def _random_symbols(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_code(prefix: str) -> str:
    """
    Generate a redemption code.

    Args:
        prefix: "TEAM" or "COACH"

    Returns:
        Code shaped PREFIX-SSSS-SSSS-SSSS

    Example:
        >>> generate_code("COACH")  # doctest: +SKIP
        'COACH-7KQM-X2PD-9HWT'
    """
    segments = [_random_symbols(CODE_SEGMENT_LENGTH) for _ in range(CODE_SEGMENTS)]
    return "-".join([prefix, *segments])


def generate_promo_code(length: int = PROMO_CODE_LENGTH) -> str:
    """Generate an unprefixed promo code from the same alphabet."""
    return _random_symbols(length)


async def generate_unique_code(
    factory: Callable[[], str],
    is_taken: Callable[[str], Awaitable[bool]],
    max_attempts: int = CODE_GENERATION_MAX_ATTEMPTS,
) -> str:
    """
    Draw codes until one is not already persisted.

    Args:
        factory: Produces a candidate code
        is_taken: Async check against persistence
        max_attempts: Attempts before giving up

    Returns:
        Unused code

    Raises:
        CodeGenerationError: If every attempt collided
    """
    for attempt in range(1, max_attempts + 1):
        candidate = factory()
        if not await is_taken(candidate):
            return candidate
        logger.warning(f"Generated code collision, attempt {attempt}/{max_attempts}")

    raise CodeGenerationError(
        f"Could not generate a unique code after {max_attempts} attempts",
        attempts=max_attempts,
    )
