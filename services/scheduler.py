"""Планировщик задач для завершения аукционов"""
import asyncio
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import select
from database.connection import async_session_maker
from database.models.user import User
from services.auction import finish_auction, get_expired_auctions
from services.formatting import format_money
from config import settings
from aiogram import Bot
import logging

logger = logging.getLogger(__name__)


async def notify_winner(bot: Bot, session, auction) -> None:
    """Сообщить победителю об итогах аукциона"""
    if not auction.winner_id:
        return

    result = await session.execute(
        select(User).where(User.id == auction.winner_id)
    )
    winner = result.scalar_one_or_none()
    if not winner:
        return

    await bot.send_message(
        chat_id=winner.telegram_id,
        text=(
            "🏆 Félicitations !\n\n"
            f"Vous avez remporté l'enchère «{auction.title}» "
            f"pour {format_money(auction.current_bid)}."
        ),
        parse_mode=None,
    )


async def check_and_finish_auctions(
    bot: Optional[Bot],
    session_maker=async_session_maker,
    now: Optional[datetime] = None
) -> int:
    """Проверить и завершить истекшие аукционы. Возвращает число завершенных"""
    finished = 0
    async with session_maker() as session:
        now = now or datetime.now(timezone.utc)
        # После rollback загруженные объекты истекают, поэтому работаем по id
        auction_ids = [auction.id for auction in await get_expired_auctions(session, now)]

        for auction_id in auction_ids:
            try:
                finished_auction = await finish_auction(session, auction_id, now)
                finished += 1
                logger.info(f"Аукцион {auction_id} завершен. Победитель: {finished_auction.winner_id}")
            except Exception as e:
                await session.rollback()
                logger.error(f"Ошибка при завершении аукциона {auction_id}: {e}")
                continue

            if bot is None:
                continue
            try:
                await notify_winner(bot, session, finished_auction)
            except Exception as e:
                logger.error(f"Ошибка при уведомлении победителя аукциона {auction_id}: {e}")

    return finished


async def scheduler_loop(bot: Bot):
    """Основной цикл планировщика"""
    while True:
        try:
            await check_and_finish_auctions(bot)
        except Exception as e:
            logger.error(f"Ошибка в планировщике: {e}")

        await asyncio.sleep(settings.AUCTION_CHECK_INTERVAL_SECONDS)


def start_scheduler(bot: Bot) -> asyncio.Task:
    """Запустить планировщик"""
    task = asyncio.create_task(scheduler_loop(bot))
    logger.info("Планировщик аукционов запущен")
    return task
