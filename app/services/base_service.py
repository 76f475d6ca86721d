"""
Base service class.

Session handling, a per-service loguru logger and the transaction and
logging decorators shared by the ledger services.
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.utils.exceptions import LedgerError, PersistenceFailure


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Subclasses get:
    - self.session for repository construction
    - self.logger bound with service=<class name>
    - commit/rollback that map datastore failures to PersistenceFailure
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """
        Commit current transaction.

        Raises:
            PersistenceFailure: If commit fails
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceFailure("Commit failed", error=e) from e

    async def rollback(self) -> None:
        await self.session.rollback()


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Run a service method as one unit of work.

    Commits on success. On failure the session is rolled back; ledger
    errors propagate unchanged and SQLAlchemy errors surface as
    PersistenceFailure.

    Usage:
        @transaction
        async def set_active(self, promo_code_id: int, is_active: bool):
            ...
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
            await self.commit()
            return result
        except LedgerError:
            await self.rollback()
            raise
        except SQLAlchemyError as e:
            await self.rollback()
            self.logger.opt(exception=e).error(
                "Transaction failed in {function}", function=func.__name__
            )
            raise PersistenceFailure(
                f"{func.__name__} could not be saved", error=e
            ) from e

    return wrapper


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Log entry, exit and duration of a service method.

    Failures are logged at WARNING with their duration and re-raised.
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()

        self.logger.debug(
            "Starting {function}",
            function=func.__name__,
            kwargs_keys=list(kwargs.keys()),
        )

        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            self.logger.warning(
                "Failed {function} after {duration}s: {error}",
                function=func.__name__,
                duration=round(time.time() - start_time, 3),
                error=str(e),
            )
            raise

        self.logger.info(
            "Completed {function} in {duration}s",
            function=func.__name__,
            duration=round(time.time() - start_time, 3),
        )
        return result

    return wrapper
