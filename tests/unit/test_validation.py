"""
Tests for input validators and log masking.
"""

from decimal import Decimal

import pytest

from app.utils.security import (
    fee_action_token,
    mask_code,
    mask_email,
    mask_sensitive,
    verify_fee_action_token,
)
from app.validators import (
    normalize_email,
    parse_amount,
    parse_positive_int,
    validate_email,
    validate_finder_code,
    validate_promo_code,
)


class TestEmail:
    """Email validation."""

    @pytest.mark.parametrize(
        "email",
        ["coach@example.com", "a.b+tag@club.org", "X@Y.IO"],
    )
    def test_valid(self, email: str) -> None:
        assert validate_email(email) == (True, None)

    @pytest.mark.parametrize(
        "email",
        ["", "   ", "invalid", "a@b", "a@@b.com", "@example.com"],
    )
    def test_invalid(self, email: str) -> None:
        is_valid, error = validate_email(email)
        assert not is_valid
        assert error

    def test_normalize(self) -> None:
        assert normalize_email("  Coach@Example.COM ") == "coach@example.com"

    def test_normalize_invalid(self) -> None:
        with pytest.raises(ValueError):
            normalize_email("nope")


class TestCodes:
    """Finder and promo code formats."""

    def test_finder_code(self) -> None:
        assert validate_finder_code("ABC123") == (True, None)
        assert validate_finder_code("abc")[0]
        assert not validate_finder_code("AB")[0]
        assert not validate_finder_code("ABC-123")[0]
        assert not validate_finder_code("")[0]

    def test_promo_code(self) -> None:
        assert validate_promo_code("SPRING25") == (True, None)
        assert not validate_promo_code("ABC")[0]
        assert not validate_promo_code("THIRTEENCHARS")[0]
        assert not validate_promo_code("SPRING 25")[0]


class TestParsers:
    """Amount and integer parsing."""

    def test_amount(self) -> None:
        assert parse_amount("1,200.50") == Decimal("1200.50")
        assert parse_amount(99) == Decimal("99")

    @pytest.mark.parametrize("value", [None, True, "abc", "-1", "NaN"])
    def test_invalid_amount(self, value: object) -> None:
        with pytest.raises(ValueError):
            parse_amount(value)

    def test_positive_int(self) -> None:
        assert parse_positive_int("12", "seat_count") == 12
        assert parse_positive_int(3, "days") == 3

    @pytest.mark.parametrize("value", [None, "", 0, -5, "1.5", False])
    def test_invalid_positive_int(self, value: object) -> None:
        with pytest.raises(ValueError):
            parse_positive_int(value, "seat_count")


class TestMasking:
    """Log masking helpers."""

    def test_mask_email(self) -> None:
        assert mask_email("coach@example.com") == "co***@example.com"
        assert mask_email(None) == "***"

    def test_mask_code(self) -> None:
        assert mask_code("TEAM-ABCD-EFGH-JKLM") == "TEAM-****-****-JKLM"
        assert mask_code("PROMO") == "***"

    def test_mask_sensitive(self) -> None:
        assert mask_sensitive("re_live_1234567890abcdef") == "re_l...cdef"
        assert mask_sensitive("short") == "***"


class TestFeeActionTokens:
    """Signed finder fee action links."""

    def test_round_trip(self) -> None:
        token = fee_action_token("secret", 7, "approve")
        assert verify_fee_action_token("secret", 7, "approve", token)

    def test_bound_to_fee_and_action(self) -> None:
        token = fee_action_token("secret", 7, "approve")
        assert not verify_fee_action_token("secret", 8, "approve", token)
        assert not verify_fee_action_token("secret", 7, "paid", token)
        assert not verify_fee_action_token("other", 7, "approve", token)

    def test_unset_secret_never_matches(self) -> None:
        token = fee_action_token("", 7, "approve")
        assert not verify_fee_action_token("", 7, "approve", token)
        assert not verify_fee_action_token("secret", 7, "approve", None)
