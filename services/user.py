"""Сервис для работы с пользователями"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
import enum
import re
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from database.models.auction import Auction, AuctionStatus
from database.models.bid import Bid
from database.models.user import User, UserRole
from services.bidding import Forbidden, InvalidEmail
from config import settings
import logging

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class BidOutcome(str, enum.Enum):
    """Итог ставки для истории пользователя"""
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


@dataclass
class UserBidRow:
    """Строка истории ставок пользователя"""
    bid_id: int
    auction_id: int
    auction_title: str
    amount: Decimal
    created_at: datetime
    auction_status: str
    outcome: str


@dataclass
class UserStats:
    total_bids: int
    won_auctions: int


def is_admin(user: Optional[User]) -> bool:
    """Проверка роли по записи в базе"""
    return user is not None and user.is_active and user.role == UserRole.ADMIN.value


async def get_or_create_user(
    session: AsyncSession,
    telegram_id: int,
    username: str = None,
    first_name: str = None,
    last_name: str = None
) -> User:
    """Получить или создать пользователя"""
    result = await session.execute(
        select(User).where(User.telegram_id == telegram_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        # Администраторы из .env получают роль только при создании записи,
        # дальше действует роль из базы
        bootstrap_admin = telegram_id in settings.admin_ids_list
        user = User(
            telegram_id=telegram_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN.value if bootstrap_admin else UserRole.USER.value
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        logger.info(f"Новый пользователь {telegram_id} (роль {user.role})")
    elif username != user.username or first_name != user.first_name or last_name != user.last_name:
        # Обновляем данные, если изменились
        user.username = username
        user.first_name = first_name
        user.last_name = last_name
        await session.commit()

    return user


async def get_user_by_telegram_id(session: AsyncSession, telegram_id: int) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.telegram_id == telegram_id)
    )
    return result.scalar_one_or_none()


async def get_session_user(session: AsyncSession, telegram_id: int) -> Optional[User]:
    """Текущий авторизованный пользователь

    Авторизованным считается активный пользователь с подтвержденным email.
    """
    user = await get_user_by_telegram_id(session, telegram_id)
    if user is None or not user.is_active or not user.email:
        return None
    return user


async def set_user_email(session: AsyncSession, user: User, email: str) -> User:
    """Сохранить email пользователя"""
    email = (email or "").strip().lower()
    if len(email) > 320 or not EMAIL_RE.match(email):
        raise InvalidEmail()

    user.email = email
    try:
        await session.commit()
    except IntegrityError as e:
        # Email уже занят другим пользователем
        await session.rollback()
        raise InvalidEmail() from e
    await session.refresh(user)
    return user


async def set_user_role(
    session: AsyncSession,
    actor: User,
    telegram_id: int,
    role: UserRole
) -> User:
    """Выдать или снять роль администратора"""
    if not is_admin(actor):
        raise Forbidden()

    user = await get_user_by_telegram_id(session, telegram_id)
    if not user:
        raise ValueError(f"Utilisateur {telegram_id} introuvable")

    user.role = UserRole(role).value
    await session.commit()
    await session.refresh(user)

    logger.info(f"Пользователь {actor.id} назначил роль {user.role} пользователю {telegram_id}")
    return user


def _bid_outcome(bid: Bid, auction: Auction) -> str:
    if auction.status == AuctionStatus.ACTIVE.value:
        return BidOutcome.ACTIVE.value
    if auction.winner_id == bid.user_id and bid.amount == auction.current_bid:
        return BidOutcome.WON.value
    return BidOutcome.LOST.value


async def get_user_bids(
    session: AsyncSession,
    user_id: int,
    limit: Optional[int] = None
) -> list[UserBidRow]:
    """История ставок пользователя, новые сверху"""
    query = (
        select(Bid, Auction)
        .join(Auction, Bid.auction_id == Auction.id)
        .where(Bid.user_id == user_id)
        .order_by(Bid.created_at.desc(), Bid.id.desc())
    )
    if limit:
        query = query.limit(limit)

    result = await session.execute(query)
    return [
        UserBidRow(
            bid_id=bid.id,
            auction_id=auction.id,
            auction_title=auction.title,
            amount=bid.amount,
            created_at=bid.created_at,
            auction_status=auction.status,
            outcome=_bid_outcome(bid, auction)
        )
        for bid, auction in result.all()
    ]


async def get_user_stats(session: AsyncSession, user_id: int) -> UserStats:
    """Количество ставок и выигранных аукционов"""
    bids_result = await session.execute(
        select(func.count(Bid.id)).where(Bid.user_id == user_id)
    )
    won_result = await session.execute(
        select(func.count(Auction.id)).where(
            Auction.winner_id == user_id,
            Auction.status == AuctionStatus.ENDED.value
        )
    )
    return UserStats(
        total_bids=bids_result.scalar_one() or 0,
        won_auctions=won_result.scalar_one() or 0
    )
