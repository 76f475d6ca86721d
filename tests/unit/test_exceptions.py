"""
Tests for the ledger error taxonomy and handling categories.
"""

import aiohttp
from sqlalchemy.exc import OperationalError

from app.utils.exceptions import (
    AtCapacityError,
    CodeGenerationError,
    NotFoundError,
    NotificationFailure,
    PersistenceFailure,
    ValidationError,
    is_safe_to_ignore,
    must_log,
)


class TestTaxonomy:
    """HTTP mapping of ledger errors."""

    def test_status_codes(self) -> None:
        assert ValidationError("x").status_code == 400
        assert NotFoundError("x").status_code == 404
        assert AtCapacityError("x").status_code == 409
        assert PersistenceFailure("x").status_code == 500
        assert CodeGenerationError("x").error_code == "code_generation_failed"

    def test_to_dict_stringifies_details(self) -> None:
        error = AtCapacityError("Code has no remaining uses", max_uses=3)
        assert error.to_dict() == {
            "error": "at_capacity",
            "message": "Code has no remaining uses",
            "details": {"max_uses": "3"},
        }
        assert "details" not in NotFoundError("Code not found").to_dict()


class TestCategories:
    """Handling predicates."""

    def test_safe_to_ignore(self) -> None:
        assert is_safe_to_ignore(NotificationFailure("down"))
        assert is_safe_to_ignore(aiohttp.ClientConnectionError())
        assert is_safe_to_ignore(TimeoutError())
        assert not is_safe_to_ignore(ValidationError("bad"))
        assert not is_safe_to_ignore(ValueError("bad json"))

    def test_must_log(self) -> None:
        assert must_log(PersistenceFailure("commit failed"))
        assert must_log(CodeGenerationError("collisions"))
        assert must_log(OperationalError("SELECT 1", {}, Exception("gone")))
        assert not must_log(NotFoundError("missing"))
