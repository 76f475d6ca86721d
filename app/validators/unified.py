"""Input validators shared by services and HTTP handlers."""
import re
from decimal import Decimal, InvalidOperation

from app.config.business_constants import (
    PROMO_CODE_MAX_LENGTH,
    PROMO_CODE_MIN_LENGTH,
)


def validate_email(email: str) -> tuple[bool, str | None]:
    """
    Validate an email address.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
        - (True, None) if valid
        - (False, error_message) if invalid

    Examples:
        >>> validate_email("coach@example.com")
        (True, None)
        >>> validate_email("invalid")
        (False, "Email must contain '@'")
    """
    if not email or not isinstance(email, str):
        return False, "Email is empty"

    email = email.strip()

    if not email:
        return False, "Email is empty"

    # Check length
    if len(email) > 255:
        return False, "Email is too long (maximum 255 characters)"

    # Check for @
    if "@" not in email:
        return False, "Email must contain '@'"

    # Split local and domain parts
    parts = email.split("@")
    if len(parts) != 2:
        return False, "Email must contain exactly one '@'"

    local, domain = parts

    if not local or len(local) > 64:
        return False, "Email local part must be 1-64 characters"

    if "." not in domain:
        return False, "Email domain must contain a dot (.)"

    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(pattern, email):
        return False, "Invalid email format"

    return True, None


def normalize_email(email: str) -> str:
    """
    Normalize an email for storage and comparison.

    Raises:
        ValueError: If the email is invalid
    """
    is_valid, error = validate_email(email)
    if not is_valid:
        raise ValueError(error)
    return email.strip().lower()


def validate_finder_code(code: str) -> tuple[bool, str | None]:
    """
    Validate a finder partner code.

    Finder codes are letters and digits only, 3-64 characters.

    Examples:
        >>> validate_finder_code("abc123")
        (True, None)
        >>> validate_finder_code("ABC-123")
        (False, "Finder code must be letters and digits only")
    """
    if not code or not isinstance(code, str) or not code.strip():
        return False, "Finder code is empty"

    code = code.strip()

    if not re.fullmatch(r"[A-Za-z0-9]+", code):
        return False, "Finder code must be letters and digits only"

    if len(code) < 3 or len(code) > 64:
        return False, "Finder code must be 3-64 characters"

    return True, None


def validate_promo_code(code: str) -> tuple[bool, str | None]:
    """
    Validate a custom promo code.

    Examples:
        >>> validate_promo_code("SPRING25")
        (True, None)
        >>> validate_promo_code("AB")
        (False, "Promo code must be 4-12 characters")
    """
    if not code or not isinstance(code, str) or not code.strip():
        return False, "Promo code is empty"

    code = code.strip()

    if not re.fullmatch(r"[A-Za-z0-9]+", code):
        return False, "Promo code must be letters and digits only"

    if not PROMO_CODE_MIN_LENGTH <= len(code) <= PROMO_CODE_MAX_LENGTH:
        return False, (
            f"Promo code must be {PROMO_CODE_MIN_LENGTH}-"
            f"{PROMO_CODE_MAX_LENGTH} characters"
        )

    return True, None


def parse_amount(value: object) -> Decimal:
    """
    Parse a money amount from JSON or metadata.

    Accepts numbers and numeric strings ("1200", "1200.00").

    Raises:
        ValueError: If the value is not a non-negative number
    """
    if value is None or isinstance(value, bool):
        raise ValueError("Amount is empty")

    try:
        amount = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation:
        raise ValueError(f"Invalid amount format: {value!r}") from None

    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Amount must be >= 0, got {value!r}")

    return amount


def parse_positive_int(value: object, field: str) -> int:
    """
    Parse a positive integer (seat counts, team counts, days).

    Raises:
        ValueError: If the value is missing, not an integer, or below 1
    """
    if value is None or value == "" or isinstance(value, bool):
        raise ValueError(f"{field} is required")

    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValueError(f"{field} must be an integer, got {value!r}") from None

    if number < 1:
        raise ValueError(f"{field} must be at least 1, got {number}")

    return number
