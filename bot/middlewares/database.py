"""Middleware для работы с базой данных"""
from typing import Callable, Dict, Any, Awaitable
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from database.connection import async_session_maker
from services.user import get_session_user


class DatabaseMiddleware(BaseMiddleware):
    """Открывает сессию БД и подставляет текущего пользователя

    В обработчик приходят ``session`` и ``user`` (None, если пользователь
    не зарегистрирован или не указал email).
    """

    def __init__(self, session_maker=async_session_maker):
        self.session_maker = session_maker

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        async with self.session_maker() as session:
            data["session"] = session
            from_user = data.get("event_from_user")
            data["user"] = await get_session_user(session, from_user.id) if from_user else None
            return await handler(event, data)
