"""
Shared fixtures for integration tests.

Each test gets its own SQLite database file. Transactions start with
BEGIN IMMEDIATE so concurrent sessions serialize on the write lock the
way row locks do on PostgreSQL.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.models import Base, FinderPartner, PromoCode, UserProfile
from app.models.enums import PromoCodeType


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with the schema created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    """Session for a single test."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def standard_partner(session_maker) -> FinderPartner:
    """Enabled one-time finder partner ABC123."""
    async with session_maker() as session:
        partner = FinderPartner(
            finder_code="ABC123",
            partner_email="finder@example.com",
            partner_name="Jordan Finder",
            is_recurring=False,
            enabled=True,
            fee_percentage_first=Decimal("10"),
            fee_percentage_renewal=Decimal("0"),
        )
        session.add(partner)
        await session.commit()
        return partner


@pytest_asyncio.fixture
async def recurring_partner(session_maker) -> FinderPartner:
    """Enabled recurring (VIP) finder partner VIP777."""
    async with session_maker() as session:
        partner = FinderPartner(
            finder_code="VIP777",
            partner_email="vip@example.com",
            partner_name="Casey VIP",
            is_recurring=True,
            enabled=True,
            fee_percentage_first=Decimal("10"),
            fee_percentage_renewal=Decimal("5"),
        )
        session.add(partner)
        await session.commit()
        return partner


@pytest_asyncio.fixture
async def discount_promo(session_maker) -> PromoCode:
    """Active 20% promo code SPRING20 limited to 2 redemptions."""
    async with session_maker() as session:
        promo = PromoCode(
            code="SPRING20",
            code_type=PromoCodeType.DISCOUNT.value,
            discount_percent=Decimal("20"),
            max_redemptions=2,
            redemptions_count=0,
            is_active=True,
        )
        session.add(promo)
        await session.commit()
        return promo


@pytest_asyncio.fixture
async def core_user(session_maker) -> UserProfile:
    """App user on the core tier."""
    async with session_maker() as session:
        profile = UserProfile(email="athlete@example.com")
        session.add(profile)
        await session.commit()
        return profile
