"""Сервис для работы с аукционами"""
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import SQLAlchemyError
from database.models.auction import Auction, AuctionStatus
from database.models.bid import Bid
from database.models.user import User
from services.bidding import (
    AuctionNotFound,
    BackendUnavailable,
    Forbidden,
    InvalidAuctionData,
    Unauthenticated,
    check_bid,
    parse_amount,
)
from services.formatting import as_utc
from services.user import is_admin
import logging

logger = logging.getLogger(__name__)


async def create_auction(
    session: AsyncSession,
    actor: User,
    title: str,
    description: str,
    start_bid,
    end_time: datetime,
    now: Optional[datetime] = None
) -> Auction:
    """Создать аукцион (только администратор)"""
    if not is_admin(actor):
        raise Forbidden()

    title = (title or "").strip()
    if not title:
        raise InvalidAuctionData("Le titre est obligatoire")
    if len(title) > 255:
        raise InvalidAuctionData("Le titre ne doit pas dépasser 255 caractères")

    start = parse_amount(start_bid, allow_zero=True)

    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    end_time = as_utc(end_time)
    if end_time <= now:
        raise InvalidAuctionData("La date de fin doit être dans le futur")

    auction = Auction(
        title=title,
        description=(description or "").strip() or None,
        start_bid=start,
        current_bid=start,
        end_time=end_time,
        status=AuctionStatus.ACTIVE.value,
        created_by=actor.id
    )
    session.add(auction)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка при создании аукциона «{title}»: {e!r}")
        raise BackendUnavailable() from e
    await session.refresh(auction)

    logger.info(f"Аукцион {auction.id} создан пользователем {actor.id}, окончание {end_time}")
    return auction


async def delete_auction(
    session: AsyncSession,
    actor: User,
    auction_id: int
) -> None:
    """Удалить аукцион вместе со ставками (только администратор)"""
    if not is_admin(actor):
        raise Forbidden()

    auction = await get_auction(session, auction_id)

    try:
        await session.execute(delete(Bid).where(Bid.auction_id == auction.id))
        await session.execute(delete(Auction).where(Auction.id == auction.id))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка при удалении аукциона {auction_id}: {e!r}")
        raise BackendUnavailable() from e

    logger.info(f"Аукцион {auction_id} удален пользователем {actor.id}")


async def get_auction(session: AsyncSession, auction_id: int) -> Auction:
    """Получить аукцион по ID"""
    result = await session.execute(
        select(Auction).where(Auction.id == auction_id)
    )
    auction = result.scalar_one_or_none()

    if not auction:
        raise AuctionNotFound(auction_id)
    return auction


async def get_active_auctions(session: AsyncSession) -> list[Auction]:
    """Получить активные аукционы"""
    result = await session.execute(
        select(Auction)
        .where(Auction.status == AuctionStatus.ACTIVE.value)
        .order_by(Auction.end_time.asc())
    )
    return list(result.scalars().all())


async def get_all_auctions(session: AsyncSession) -> list[Auction]:
    """Все аукционы для админ панели, новые сверху"""
    result = await session.execute(
        select(Auction).order_by(Auction.created_at.desc(), Auction.id.desc())
    )
    return list(result.scalars().all())


async def get_auction_bids(
    session: AsyncSession,
    auction_id: int,
    limit: Optional[int] = None
) -> list[tuple[Bid, User]]:
    """История ставок по аукциону вместе с участниками, новые сверху"""
    query = (
        select(Bid, User)
        .join(User, Bid.user_id == User.id)
        .where(Bid.auction_id == auction_id)
        .order_by(Bid.created_at.desc(), Bid.id.desc())
    )
    if limit:
        query = query.limit(limit)

    result = await session.execute(query)
    return [(bid, user) for bid, user in result.all()]


async def count_auction_bids(session: AsyncSession, auction_id: int) -> int:
    """Количество ставок по аукциону"""
    result = await session.execute(
        select(func.count(Bid.id)).where(Bid.auction_id == auction_id)
    )
    return result.scalar_one() or 0


async def place_bid(
    session: AsyncSession,
    user: Optional[User],
    auction_id: int,
    amount,
    now: Optional[datetime] = None
) -> Bid:
    """Сделать ставку

    Чтение текущей цены и вставка ставки выполняются отдельными запросами:
    две одновременные ставки могут пройти проверку против одного и того же
    current_bid. Атомарность этой пары обеспечивает база данных, здесь она
    не гарантируется.
    """
    if user is None:
        raise Unauthenticated()

    try:
        result = await session.execute(
            select(Auction).where(Auction.id == auction_id)
        )
        auction = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Не удалось загрузить аукцион {auction_id}: {e!r}")
        raise BackendUnavailable() from e

    if not auction:
        raise AuctionNotFound(auction_id)

    value = check_bid(
        amount,
        status=auction.status,
        end_time=auction.end_time,
        current_bid=auction.current_bid,
        now=now
    )

    bid = Bid(
        auction_id=auction.id,
        user_id=user.id,
        amount=value
    )
    session.add(bid)

    try:
        await session.execute(
            update(Auction)
            .where(Auction.id == auction.id)
            .values(current_bid=value)
        )
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка при сохранении ставки на аукцион {auction_id}: {e!r}")
        raise BackendUnavailable() from e

    await session.refresh(bid)
    await session.refresh(auction)

    logger.info(f"Ставка {value} принята: аукцион {auction.id}, пользователь {user.id}")
    return bid


async def finish_auction(
    session: AsyncSession,
    auction_id: int,
    now: Optional[datetime] = None
) -> Auction:
    """Завершить аукцион и определить победителя"""
    auction = await get_auction(session, auction_id)

    # Выигрышная ставка: самая высокая, при равенстве самая ранняя
    result = await session.execute(
        select(Bid)
        .where(Bid.auction_id == auction.id)
        .order_by(Bid.amount.desc(), Bid.created_at.asc(), Bid.id.asc())
        .limit(1)
    )
    winning_bid = result.scalar_one_or_none()

    winner_id = winning_bid.user_id if winning_bid else None

    await session.execute(
        update(Auction)
        .where(Auction.id == auction.id)
        .values(
            status=AuctionStatus.ENDED.value,
            winner_id=winner_id,
            ended_at=now or datetime.now(timezone.utc)
        )
    )
    await session.commit()
    await session.refresh(auction)
    return auction


async def get_expired_auctions(
    session: AsyncSession,
    now: Optional[datetime] = None
) -> list[Auction]:
    """Активные аукционы, у которых наступило время окончания"""
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    result = await session.execute(
        select(Auction).where(
            Auction.status == AuctionStatus.ACTIVE.value,
            Auction.end_time <= now
        ).order_by(Auction.end_time, Auction.id)
    )
    return list(result.scalars().all())
