"""Обработчики для админов"""
from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.utils.text_decorations import html_decoration
from sqlalchemy.ext.asyncio import AsyncSession
from database.models.user import User, UserRole
from services.auction import create_auction, delete_auction, get_all_auctions, get_auction
from services.bidding import BackendUnavailable, Forbidden, parse_amount
from services.formatting import format_admin_auctions, format_datetime, format_money, parse_local_datetime
from services.user import is_admin, set_user_role
from bot.keyboards.admin import (
    get_admin_auctions_keyboard,
    get_admin_panel_keyboard,
    get_delete_confirm_keyboard,
)
from bot.keyboards.main import MENU_ADMIN, MENU_AUCTIONS, MENU_PROFILE
from config import settings
import logging

logger = logging.getLogger(__name__)

router = Router()

NOT_ADMIN_TEXT = "Accès réservé aux administrateurs"

# Кнопки меню не должны попадать в ответы мастера
NOT_MENU = ~F.text.in_({MENU_AUCTIONS, MENU_PROFILE, MENU_ADMIN})


class CreateAuctionStates(StatesGroup):
    """Состояния создания аукциона"""
    waiting_title = State()
    waiting_description = State()
    waiting_start_bid = State()
    waiting_end_time = State()


class RoleManagementStates(StatesGroup):
    """Состояния для управления администраторами"""
    waiting_grant_telegram_id = State()
    waiting_revoke_telegram_id = State()


@router.message(F.text == MENU_ADMIN)
@router.message(Command("admin"))
async def cmd_admin(message: Message, state: FSMContext, user: User | None):
    """Админ панель"""
    await state.clear()
    if not is_admin(user):
        await message.answer(NOT_ADMIN_TEXT)
        return

    text = (
        "🛠 <b>Panneau d'administration</b>\n\n"
        "Gérez les enchères et supervisez la plateforme."
    )
    await message.answer(text, reply_markup=get_admin_panel_keyboard())


@router.callback_query(F.data == "admin:create")
async def create_auction_start(callback: CallbackQuery, state: FSMContext, user: User | None):
    """Начать создание аукциона"""
    if not is_admin(user):
        await callback.answer(NOT_ADMIN_TEXT, show_alert=True)
        return

    await state.set_state(CreateAuctionStates.waiting_title)
    await callback.message.answer("➕ <b>Créer une enchère</b>\n\nTitre de l'enchère :")
    await callback.answer()


@router.message(CreateAuctionStates.waiting_title, NOT_MENU)
async def process_title(message: Message, state: FSMContext):
    """Название аукциона"""
    title = (message.text or "").strip()
    if not title or len(title) > 255:
        await message.answer("Le titre doit contenir entre 1 et 255 caractères. Réessayez :")
        return

    await state.update_data(title=title)
    await state.set_state(CreateAuctionStates.waiting_description)
    await message.answer("Description détaillée :")


@router.message(CreateAuctionStates.waiting_description, NOT_MENU)
async def process_description(message: Message, state: FSMContext):
    """Описание аукциона"""
    description = (message.text or "").strip()
    if not description:
        await message.answer("La description est obligatoire. Réessayez :")
        return

    await state.update_data(description=description)
    await state.set_state(CreateAuctionStates.waiting_start_bid)
    await message.answer(f"Enchère de départ ({settings.CURRENCY_SYMBOL}), par exemple 0 ou 150,50 :")


@router.message(CreateAuctionStates.waiting_start_bid, NOT_MENU)
async def process_start_bid(message: Message, state: FSMContext):
    """Стартовая цена"""
    try:
        start_bid = parse_amount(message.text or "", allow_zero=True)
    except ValueError as e:
        await message.answer(f"{e}. Réessayez :")
        return

    # В FSM храним строкой, чтобы данные сериализовались в любом хранилище
    await state.update_data(start_bid=str(start_bid))
    await state.set_state(CreateAuctionStates.waiting_end_time)
    await message.answer("Date de fin au format JJ/MM/AAAA HH:MM :")


@router.message(CreateAuctionStates.waiting_end_time, NOT_MENU)
async def process_end_time(message: Message, session: AsyncSession, state: FSMContext, user: User | None):
    """Дата окончания и создание аукциона"""
    try:
        end_time = parse_local_datetime(message.text or "")
    except ValueError:
        await message.answer("Format attendu : JJ/MM/AAAA HH:MM. Réessayez :")
        return

    data = await state.get_data()

    try:
        auction = await create_auction(
            session,
            user,
            data["title"],
            data["description"],
            data["start_bid"],
            end_time
        )
    except BackendUnavailable as e:
        logger.error(f"Аукцион не создан: {e.__cause__!r}")
        await message.answer(f"Erreur : {e}")
        await state.clear()
        return
    except Forbidden as e:
        await message.answer(str(e))
        await state.clear()
        return
    except ValueError as e:
        await message.answer(f"{e}. Réessayez :")
        return

    await state.clear()
    await message.answer(
        "✅ <b>Enchère créée</b>\n\n"
        f"#{auction.id} {html_decoration.quote(auction.title)}\n"
        f"Enchère de départ : {format_money(auction.start_bid)}\n"
        f"Fin : {format_datetime(auction.end_time)}"
    )


@router.callback_query(F.data == "admin:list")
async def list_auctions(callback: CallbackQuery, session: AsyncSession, user: User | None):
    """Список всех аукционов с кнопками удаления"""
    if not is_admin(user):
        await callback.answer(NOT_ADMIN_TEXT, show_alert=True)
        return

    auctions = await get_all_auctions(session)
    await callback.message.answer(
        format_admin_auctions(auctions),
        reply_markup=get_admin_auctions_keyboard(auctions)
    )
    await callback.answer()


@router.callback_query(F.data.startswith("admin:delete:"))
async def delete_auction_ask(callback: CallbackQuery, session: AsyncSession, user: User | None):
    """Подтверждение удаления"""
    if not is_admin(user):
        await callback.answer(NOT_ADMIN_TEXT, show_alert=True)
        return

    auction_id = int(callback.data.split(":")[2])
    try:
        auction = await get_auction(session, auction_id)
    except ValueError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await callback.message.answer(
        f"Êtes-vous sûr de vouloir supprimer l'enchère «{auction.title}» ?",
        reply_markup=get_delete_confirm_keyboard(auction.id),
        parse_mode=None
    )
    await callback.answer()


@router.callback_query(F.data.startswith("admin:delete_confirm:"))
async def delete_auction_confirm(callback: CallbackQuery, session: AsyncSession, user: User | None):
    """Удалить аукцион"""
    auction_id = int(callback.data.split(":")[2])

    try:
        await delete_auction(session, user, auction_id)
    except BackendUnavailable as e:
        logger.error(f"Аукцион {auction_id} не удален: {e.__cause__!r}")
        await callback.answer(str(e), show_alert=True)
        return
    except ValueError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await callback.message.edit_text("🗑 Enchère supprimée")
    await callback.answer()


@router.callback_query(F.data == "admin:delete_cancel")
async def delete_auction_cancel(callback: CallbackQuery):
    await callback.message.edit_text("Suppression annulée")
    await callback.answer()


@router.callback_query(F.data.in_({"admin:grant", "admin:revoke"}))
async def role_change_start(callback: CallbackQuery, state: FSMContext, user: User | None):
    """Начать выдачу или снятие роли администратора"""
    if not is_admin(user):
        await callback.answer(NOT_ADMIN_TEXT, show_alert=True)
        return

    if callback.data == "admin:grant":
        await state.set_state(RoleManagementStates.waiting_grant_telegram_id)
        text = "👑 Saisissez l'ID Telegram du futur administrateur :"
    else:
        await state.set_state(RoleManagementStates.waiting_revoke_telegram_id)
        text = "🚫 Saisissez l'ID Telegram de l'administrateur à retirer :"

    await callback.message.answer(text)
    await callback.answer()


@router.message(RoleManagementStates.waiting_grant_telegram_id, NOT_MENU)
@router.message(RoleManagementStates.waiting_revoke_telegram_id, NOT_MENU)
async def process_role_change(message: Message, session: AsyncSession, state: FSMContext, user: User | None):
    """Выдать или снять роль"""
    if not message.text or not message.text.strip().isdigit():
        await message.answer("Veuillez saisir un ID Telegram valide (nombre)")
        return

    current_state = await state.get_state()
    role = (
        UserRole.ADMIN
        if current_state == RoleManagementStates.waiting_grant_telegram_id.state
        else UserRole.USER
    )
    telegram_id = int(message.text.strip())

    try:
        target = await set_user_role(session, user, telegram_id, role)
    except ValueError as e:
        await message.answer(str(e))
        await state.clear()
        return

    await state.clear()
    if target.role == UserRole.ADMIN.value:
        await message.answer(f"✅ L'utilisateur {telegram_id} est maintenant administrateur")
    else:
        await message.answer(f"✅ L'utilisateur {telegram_id} n'est plus administrateur")
