"""
Redemption service.

Owns the coach/member code pair lifecycle: creation at purchase time,
seat-consuming redemption, verification and deactivation.
"""

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    COACH_CODE_MAX_USES,
    COACH_CODE_PREFIX,
    CODE_GENERATION_MAX_ATTEMPTS,
    TEAM_CODE_PREFIX,
)
from app.models.enums import CodeKind
from app.models.redemption_code import RedemptionCode
from app.repositories.redemption_code_repository import (
    RedemptionCodeRepository,
)
from app.services.base_service import BaseService, transaction
from app.services.codes import generate_code, generate_unique_code
from app.utils.exceptions import (
    AtCapacityError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from app.utils.security import mask_code


@dataclass
class RedemptionOutcome:
    """Result of a successful redemption."""

    code: str
    kind: CodeKind
    license_grant_id: int | None
    linked_code: str | None
    uses_count: int
    max_uses: int
    consumes_seat: bool = True

    @property
    def remaining_uses(self) -> int:
        return max(self.max_uses - self.uses_count, 0)


def normalize_code(code: str | None) -> str:
    """Trim and upper-case a code typed by a user."""
    if not code or not code.strip():
        raise ValidationError("Code is required")
    return code.strip().upper()


class RedemptionService(BaseService):
    """
    Redemption service.

    Seat capacity is enforced in the datastore: redeem() is a single
    conditional UPDATE, never a read followed by a write.
    """

    def __init__(
        self,
        session: AsyncSession,
        max_attempts: int = CODE_GENERATION_MAX_ATTEMPTS,
    ) -> None:
        """
        Initialize redemption service.

        Args:
            session: Database session
            max_attempts: Collision retries when generating codes
        """
        super().__init__(session)
        self.code_repo = RedemptionCodeRepository(session)
        self.max_attempts = max_attempts

    async def _unique_code(self, prefix: str) -> str:
        return await generate_unique_code(
            lambda: generate_code(prefix),
            self.code_repo.code_exists,
            max_attempts=self.max_attempts,
        )

    async def create_code_pair(
        self,
        seat_count: int,
        license_grant_id: int | None = None,
    ) -> tuple[RedemptionCode, RedemptionCode]:
        """
        Create a linked coach/member code pair.

        Both codes are written inside one savepoint: either both exist and
        point at each other, or neither exists. The caller commits.

        Args:
            seat_count: Member code capacity
            license_grant_id: Team license the codes belong to

        Returns:
            Tuple of (coach_code, member_code)

        Raises:
            ValidationError: If seat_count < 1
            CodeGenerationError: If no unused code could be drawn
            PersistenceFailure: If the datastore rejects the writes
        """
        if seat_count < 1:
            raise ValidationError(
                "Seat count must be at least 1", seat_count=seat_count
            )

        try:
            async with self.session.begin_nested():
                coach = await self.code_repo.create(
                    code=await self._unique_code(COACH_CODE_PREFIX),
                    kind=CodeKind.COACH.value,
                    license_grant_id=license_grant_id,
                    max_uses=COACH_CODE_MAX_USES,
                    uses_count=0,
                    is_active=True,
                )
                member = await self.code_repo.create(
                    code=await self._unique_code(TEAM_CODE_PREFIX),
                    kind=CodeKind.MEMBER.value,
                    license_grant_id=license_grant_id,
                    max_uses=seat_count,
                    uses_count=0,
                    is_active=True,
                    allow_parent_linking=True,
                )
                await self.code_repo.link(coach, member)
        except SQLAlchemyError as e:
            raise PersistenceFailure(
                "Could not create code pair", seat_count=seat_count, error=e
            ) from e

        self.logger.info(
            f"Created code pair {mask_code(coach.code)} / {mask_code(member.code)} "
            f"({seat_count} seats, grant={license_grant_id})"
        )
        return coach, member

    @transaction
    async def redeem(self, code: str) -> RedemptionOutcome:
        """
        Consume one use of a code.

        Args:
            code: Coach or member code

        Returns:
            RedemptionOutcome with kind and linked code

        Raises:
            NotFoundError: If the code is missing or inactive
            AtCapacityError: If every use is already consumed
        """
        normalized = normalize_code(code)

        # The conditional update must be the first statement so the write
        # lock is taken before anything is read.
        consumed = await self.code_repo.try_consume(normalized)
        row = await self.code_repo.get_by_code(normalized)

        if not consumed:
            if row is None or not row.is_active:
                raise NotFoundError("Code not found", code=mask_code(normalized))
            self.logger.info(
                f"Redemption refused, {mask_code(normalized)} at capacity "
                f"({row.uses_count}/{row.max_uses})"
            )
            raise AtCapacityError(
                "Code has no remaining uses",
                code=mask_code(normalized),
                max_uses=row.max_uses,
            )

        linked_code = None
        if row.linked_code_id is not None:
            linked = await self.code_repo.get_by_id(row.linked_code_id)
            linked_code = linked.code if linked else None

        self.logger.info(
            f"Redeemed {mask_code(normalized)} ({row.kind}) "
            f"{row.uses_count}/{row.max_uses}"
        )
        return RedemptionOutcome(
            code=row.code,
            kind=CodeKind(row.kind),
            license_grant_id=row.license_grant_id,
            linked_code=linked_code,
            uses_count=row.uses_count,
            max_uses=row.max_uses,
        )

    async def verify_code(self, code: str) -> RedemptionCode:
        """
        Check that a code exists and is active.

        Raises:
            NotFoundError: If the code is missing or inactive
        """
        normalized = normalize_code(code)
        row = await self.code_repo.get_by_code(normalized)
        if row is None or not row.is_active:
            raise NotFoundError("Code not found", code=mask_code(normalized))
        return row

    @transaction
    async def deactivate_code(self, code: str) -> RedemptionCode:
        """
        Deactivate a code without deleting it.

        Raises:
            NotFoundError: If no active code matches
        """
        normalized = normalize_code(code)
        if not await self.code_repo.deactivate(normalized):
            raise NotFoundError(
                "No active code to deactivate", code=mask_code(normalized)
            )

        row = await self.code_repo.get_by_code(normalized)
        self.logger.warning(f"Deactivated code {mask_code(normalized)}")
        return row
