"""
Tests for finder fee status workflow rules.
"""

import pytest

from app.models.enums import FinderFeeStatus
from app.services.finder_fee_service import (
    FINDER_FEE_TRANSITIONS,
    FinderFeeService,
    can_transition,
)


class TestTransitions:
    """Allowed status changes."""

    @pytest.mark.parametrize(
        "current,new",
        [
            (FinderFeeStatus.PENDING, FinderFeeStatus.APPROVED),
            (FinderFeeStatus.PENDING, FinderFeeStatus.REJECTED),
            (FinderFeeStatus.PENDING, FinderFeeStatus.PAID),
            (FinderFeeStatus.APPROVED, FinderFeeStatus.PAID),
            (FinderFeeStatus.APPROVED, FinderFeeStatus.PENDING),
            (FinderFeeStatus.PAID, FinderFeeStatus.APPROVED),
        ],
    )
    def test_allowed(self, current: FinderFeeStatus, new: FinderFeeStatus) -> None:
        assert can_transition(current, new)

    @pytest.mark.parametrize(
        "current,new",
        [
            (FinderFeeStatus.REJECTED, FinderFeeStatus.PENDING),
            (FinderFeeStatus.REJECTED, FinderFeeStatus.APPROVED),
            (FinderFeeStatus.PAID, FinderFeeStatus.REJECTED),
            (FinderFeeStatus.PAID, FinderFeeStatus.PENDING),
            (FinderFeeStatus.APPROVED, FinderFeeStatus.APPROVED),
        ],
    )
    def test_refused(self, current: FinderFeeStatus, new: FinderFeeStatus) -> None:
        assert not can_transition(current, new)

    def test_every_status_has_an_entry(self) -> None:
        assert set(FINDER_FEE_TRANSITIONS) == set(FinderFeeStatus)


def test_finder_link(mock_session) -> None:
    service = FinderFeeService(mock_session, site_url="https://example.test/")
    assert (
        service.finder_link("ABC123")
        == "https://example.test/team-licensing?finder=ABC123"
    )
