"""Обработчики аукционов: список, карточка, ставки"""
from aiogram import Router, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from sqlalchemy.ext.asyncio import AsyncSession
from database.models.auction import AuctionStatus
from database.models.user import User
from services.auction import get_active_auctions, get_auction, get_auction_bids, place_bid
from services.bidding import CENT, BackendUnavailable, BidTooLow, InvalidAmount
from services.formatting import (
    format_auction_card,
    format_auctions_list,
    format_bid_history,
    format_money,
)
from bot.keyboards.auction import (
    get_auction_keyboard,
    get_auctions_list_keyboard,
    get_bid_cancel_keyboard,
)
from bot.keyboards.main import MENU_AUCTIONS
from config import settings
import logging

logger = logging.getLogger(__name__)

router = Router()


class BidState(StatesGroup):
    """Состояния для ввода ставки"""
    waiting_amount = State()


async def render_auction_detail(session: AsyncSession, auction_id: int):
    """Текст и клавиатура карточки аукциона с историей ставок"""
    auction = await get_auction(session, auction_id)
    bids = await get_auction_bids(session, auction.id, limit=settings.BIDS_HISTORY_LIMIT)

    text = f"{format_auction_card(auction)}\n\n{format_bid_history(bids)}"
    keyboard = get_auction_keyboard(
        auction.id,
        auction.current_bid,
        is_active=auction.status == AuctionStatus.ACTIVE.value
    )
    return text, keyboard


async def send_auction_detail(message: Message, session: AsyncSession, auction_id: int, edit: bool = False):
    """Показать карточку аукциона (новым сообщением или редактированием)"""
    text, keyboard = await render_auction_detail(session, auction_id)
    if edit:
        try:
            await message.edit_text(text, reply_markup=keyboard)
            return
        except TelegramBadRequest as e:
            # Нажали «Actualiser», а ничего не изменилось
            if "message is not modified" in str(e).lower():
                return
            logger.debug(f"Не удалось отредактировать карточку аукциона {auction_id}: {e!r}")
    await message.answer(text, reply_markup=keyboard)


@router.message(F.text == MENU_AUCTIONS)
@router.message(Command("auctions"))
async def cmd_auctions(message: Message, session: AsyncSession, state: FSMContext):
    """Список активных аукционов"""
    # Переход в меню прерывает ввод ставки
    await state.clear()
    auctions = await get_active_auctions(session)
    await message.answer(
        format_auctions_list(auctions),
        reply_markup=get_auctions_list_keyboard(auctions)
    )


@router.callback_query(F.data == "auction:list")
async def show_auctions_list(callback: CallbackQuery, session: AsyncSession):
    """Список активных аукционов (из карточки)"""
    auctions = await get_active_auctions(session)
    try:
        await callback.message.edit_text(
            format_auctions_list(auctions),
            reply_markup=get_auctions_list_keyboard(auctions)
        )
    except TelegramBadRequest:
        await callback.message.answer(
            format_auctions_list(auctions),
            reply_markup=get_auctions_list_keyboard(auctions)
        )
    await callback.answer()


@router.callback_query(F.data.startswith("auction:view:"))
async def show_auction(callback: CallbackQuery, session: AsyncSession):
    """Карточка аукциона"""
    auction_id = int(callback.data.split(":")[2])

    try:
        await send_auction_detail(callback.message, session, auction_id, edit=True)
    except ValueError as e:
        await callback.answer(str(e), show_alert=True)
        return
    await callback.answer()


async def _submit_bid(session: AsyncSession, user: User, auction_id: int, amount) -> str:
    """Сделать ставку и вернуть текст подтверждения

    Ошибки правил (ValueError) пробрасываются вызывающему обработчику.
    """
    bid = await place_bid(session, user, auction_id, amount)
    return (
        "✅ Offre soumise\n"
        f"Votre enchère de {format_money(bid.amount)} a été enregistrée avec succès"
    )


@router.callback_query(F.data.startswith("bid:amount:"))
async def place_bid_amount(callback: CallbackQuery, session: AsyncSession, user: User | None):
    """Сделать ставку через быструю кнопку"""
    parts = callback.data.split(":")
    auction_id = int(parts[2])
    amount = parts[3]

    try:
        confirmation = await _submit_bid(session, user, auction_id, amount)
    except BackendUnavailable as e:
        logger.error(f"Ставка на аукцион {auction_id} не сохранена: {e.__cause__!r}")
        await callback.answer(str(e), show_alert=True)
        return
    except ValueError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await callback.answer(confirmation, show_alert=True)
    await send_auction_detail(callback.message, session, auction_id, edit=True)


@router.callback_query(F.data.startswith("bid:custom:"))
async def bid_custom_amount(callback: CallbackQuery, state: FSMContext, session: AsyncSession, user: User | None):
    """Запросить ввод своей суммы"""
    auction_id = int(callback.data.split(":")[2])

    if user is None:
        await callback.answer("Vous devez être connecté pour enchérir. Tapez /start", show_alert=True)
        return

    try:
        auction = await get_auction(session, auction_id)
    except ValueError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await state.set_state(BidState.waiting_amount)
    await state.update_data(auction_id=auction_id)

    await callback.message.answer(
        f"Montant ({settings.CURRENCY_SYMBOL}) — minimum : "
        f"{format_money(auction.current_bid + CENT)}\n"
        "Saisissez votre offre :",
        reply_markup=get_bid_cancel_keyboard(auction_id)
    )
    await callback.answer()


@router.callback_query(F.data.startswith("bid:cancel:"))
async def bid_cancel(callback: CallbackQuery, state: FSMContext):
    """Отменить ввод суммы"""
    await state.clear()
    await callback.message.edit_text("Offre annulée")
    await callback.answer()


@router.message(BidState.waiting_amount)
async def process_bid_amount(message: Message, session: AsyncSession, state: FSMContext, user: User | None):
    """Обработать введенную сумму ставки"""
    data = await state.get_data()
    auction_id = data.get("auction_id")

    if not auction_id:
        await message.answer("Erreur : enchère introuvable")
        await state.clear()
        return

    try:
        confirmation = await _submit_bid(session, user, auction_id, message.text or "")
    except BackendUnavailable as e:
        logger.error(f"Ставка на аукцион {auction_id} не сохранена: {e.__cause__!r}")
        await message.answer(f"Erreur : {e}")
        await state.clear()
        return
    except (InvalidAmount, BidTooLow) as e:
        # Остаемся в состоянии ввода: пользователь может ввести другую сумму
        await message.answer(
            f"Enchère invalide\n{e}",
            reply_markup=get_bid_cancel_keyboard(auction_id)
        )
        return
    except ValueError as e:
        await message.answer(str(e))
        await state.clear()
        return

    await state.clear()
    await message.answer(confirmation)
    await send_auction_detail(message, session, auction_id)
