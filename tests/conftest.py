"""Общие фикстуры тестов

Переменные окружения задаются до импорта config: Settings() читает их
при импорте модуля.
"""
import os

os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ADMIN_USER_IDS", "1000")
os.environ.setdefault("DISPLAY_UTC_OFFSET_HOURS", "1")
os.environ.setdefault("BID_QUICK_STEPS", "10,50,100")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import database.models  # noqa: F401
from database.connection import Base
from database.models.auction import Auction, AuctionStatus
from database.models.user import User, UserRole


@pytest.fixture
def now():
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


async def _add_user(session, telegram_id, email, role=UserRole.USER.value):
    user = User(
        telegram_id=telegram_id,
        username=f"user{telegram_id}",
        first_name="Test",
        email=email,
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin(session):
    return await _add_user(session, 1000, "admin@example.com", UserRole.ADMIN.value)


@pytest_asyncio.fixture
async def bidder(session):
    return await _add_user(session, 2001, "john@example.com")


@pytest_asyncio.fixture
async def other_bidder(session):
    return await _add_user(session, 2002, "marie@example.com")


@pytest.fixture
def make_auction(session, now):
    """Фабрика аукционов: по умолчанию активный, заканчивается через сутки"""

    async def _make(
        title="Montre Vintage Rolex",
        current_bid="2500",
        end_time=None,
        status=AuctionStatus.ACTIVE.value,
        description="Magnifique montre vintage en excellent état",
    ):
        auction = Auction(
            title=title,
            description=description,
            start_bid=Decimal(current_bid),
            current_bid=Decimal(current_bid),
            end_time=end_time or now + timedelta(days=1),
            status=status,
        )
        session.add(auction)
        await session.commit()
        await session.refresh(auction)
        return auction

    return _make
