"""Обработчики команды /start и регистрации"""
from aiogram import Router
from aiogram.types import Message
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from sqlalchemy.ext.asyncio import AsyncSession
from services.user import get_or_create_user, is_admin, set_user_email
from bot.keyboards.main import get_main_keyboard
import logging

logger = logging.getLogger(__name__)

router = Router()

WELCOME_TEXT = (
    "👋 Bienvenue sur AuctionHub !\n\n"
    "Découvrez les enchères en cours et placez vos offres.\n"
    "Choisissez une rubrique :"
)


class RegistrationState(StatesGroup):
    """Состояния регистрации"""
    waiting_email = State()


@router.message(CommandStart())
async def cmd_start(message: Message, session: AsyncSession, state: FSMContext, command: CommandObject):
    """Обработчик команды /start"""
    user = await get_or_create_user(
        session,
        message.from_user.id,
        message.from_user.username,
        message.from_user.first_name,
        message.from_user.last_name
    )

    # Deep-link вида auction_123 открывает карточку аукциона после регистрации
    auction_id = None
    if command.args and command.args.startswith("auction_"):
        try:
            auction_id = int(command.args.split("_", 1)[1])
        except ValueError:
            auction_id = None

    if not user.email:
        await state.set_state(RegistrationState.waiting_email)
        await state.update_data(auction_id=auction_id)
        await message.answer(
            "Pour enchérir, indiquez votre adresse email :"
        )
        return

    await state.clear()
    await message.answer(WELCOME_TEXT, reply_markup=get_main_keyboard(is_admin(user)))

    if auction_id:
        await _open_auction(message, session, auction_id)


@router.message(Command("email"))
async def cmd_email(message: Message, state: FSMContext):
    """Изменить email"""
    await state.set_state(RegistrationState.waiting_email)
    await message.answer("Indiquez votre nouvelle adresse email :")


@router.message(RegistrationState.waiting_email)
async def process_email(message: Message, session: AsyncSession, state: FSMContext):
    """Сохранить email и показать главное меню"""
    user = await get_or_create_user(
        session,
        message.from_user.id,
        message.from_user.username,
        message.from_user.first_name,
        message.from_user.last_name
    )

    try:
        await set_user_email(session, user, message.text or "")
    except ValueError as e:
        await message.answer(f"{e}. Réessayez :")
        return

    data = await state.get_data()
    auction_id = data.get("auction_id")
    await state.clear()

    logger.info(f"Пользователь {user.telegram_id} указал email")
    await message.answer("✅ Inscription terminée !")
    await message.answer(WELCOME_TEXT, reply_markup=get_main_keyboard(is_admin(user)))

    if auction_id:
        await _open_auction(message, session, auction_id)


async def _open_auction(message: Message, session: AsyncSession, auction_id: int):
    from bot.handlers.auction import send_auction_detail

    try:
        await send_auction_detail(message, session, auction_id)
    except ValueError as e:
        await message.answer(str(e))
