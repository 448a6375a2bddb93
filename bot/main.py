"""Главный файл бота"""
import asyncio
import logging
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from config import settings
from database.connection import init_models
from bot.handlers import start, auction, profile, admin
from bot.middlewares.database import DatabaseMiddleware
from services.scheduler import start_scheduler

# Настройка логирования
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_dispatcher() -> Dispatcher:
    """Диспетчер с middleware и роутерами"""
    dp = Dispatcher()

    # Регистрируем middleware
    dp.message.middleware(DatabaseMiddleware())
    dp.callback_query.middleware(DatabaseMiddleware())

    # Регистрируем роутеры
    # start.router идет первым: /start должен срабатывать из любого состояния FSM
    dp.include_router(start.router)
    dp.include_router(admin.router)
    dp.include_router(profile.router)
    dp.include_router(auction.router)
    return dp


async def main():
    """Запуск бота"""
    await init_models()

    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    dp = create_dispatcher()

    # Запускаем планировщик для завершения аукционов
    start_scheduler(bot)

    logger.info("Бот запущен")

    # Запускаем polling
    await dp.start_polling(bot)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
