"""Профиль пользователя"""
from aiogram import Router, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession
from database.models.user import User
from services.formatting import format_profile
from services.user import get_user_bids, get_user_stats
from bot.keyboards.main import MENU_PROFILE

router = Router()

# Длинная история не поместится в одно сообщение
PROFILE_HISTORY_LIMIT = 30


@router.message(F.text == MENU_PROFILE)
@router.message(Command("profile"))
async def cmd_profile(message: Message, session: AsyncSession, state: FSMContext, user: User | None):
    """Личные данные и история ставок"""
    await state.clear()
    if user is None:
        await message.answer("Vous devez être connecté. Tapez /start pour vous inscrire.")
        return

    stats = await get_user_stats(session, user.id)
    bids = await get_user_bids(session, user.id, limit=PROFILE_HISTORY_LIMIT)
    await message.answer(format_profile(user, stats, bids))
