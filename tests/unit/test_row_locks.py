"""
Tests that read-check-write paths lock their row before checking.

Runs against a mock session; statements are compiled for PostgreSQL,
where the lock matters.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from app.models.enums import FinderFeeStatus
from app.repositories.finder_fee_repository import FinderFeeRepository
from app.repositories.license_grant_repository import LicenseGrantRepository
from app.services.finder_fee_service import FinderFeeService
from app.services.license_service import LicenseService
from app.utils.exceptions import NotFoundError


def compiled_sql(session) -> str:
    stmt = session.execute.await_args.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestRepositoryLocks:
    """BaseRepository.get_by_id(for_update=True)."""

    @pytest.mark.asyncio
    async def test_locked_read_selects_for_update(self, mock_session) -> None:
        row = MagicMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = row
        mock_session.execute = AsyncMock(return_value=result)

        found = await LicenseGrantRepository(mock_session).get_by_id(7, for_update=True)

        assert found is row
        assert "FOR UPDATE" in compiled_sql(mock_session)

    @pytest.mark.asyncio
    async def test_plain_read_uses_identity_map(self, mock_session) -> None:
        mock_session.get = AsyncMock(return_value=None)

        assert await LicenseGrantRepository(mock_session).get_by_id(7) is None
        mock_session.execute.assert_not_awaited()


class TestServiceLocks:
    """Services lock before validating."""

    @pytest.mark.asyncio
    async def test_add_seats_locks_grant(self, mock_session) -> None:
        get_by_id = AsyncMock(return_value=None)

        with patch.object(LicenseGrantRepository, "get_by_id", get_by_id):
            with pytest.raises(NotFoundError):
                await LicenseService(mock_session).add_seats(42, 3)

        get_by_id.assert_awaited_once_with(42, for_update=True)
        mock_session.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_fee_status_locks_record(self, mock_session) -> None:
        get_by_id = AsyncMock(return_value=None)

        with patch.object(FinderFeeRepository, "get_by_id", get_by_id):
            with pytest.raises(NotFoundError):
                await FinderFeeService(mock_session).update_status(
                    5, FinderFeeStatus.APPROVED
                )

        get_by_id.assert_awaited_once_with(5, for_update=True)
