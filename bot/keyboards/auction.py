"""Клавиатуры для аукционов"""
from decimal import Decimal
from typing import Sequence
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder
from config import settings
from services.formatting import format_money


def get_auctions_list_keyboard(auctions: Sequence) -> InlineKeyboardMarkup:
    """Кнопка на каждый активный аукцион"""
    builder = InlineKeyboardBuilder()
    for auction in auctions:
        builder.add(InlineKeyboardButton(
            text=f"{auction.title} — {format_money(auction.current_bid)}",
            callback_data=f"auction:view:{auction.id}"
        ))
    builder.add(InlineKeyboardButton(
        text="🔄 Actualiser",
        callback_data="auction:list"
    ))
    builder.adjust(1)
    return builder.as_markup()


def get_auction_keyboard(auction_id: int, current_bid: Decimal, is_active: bool = True) -> InlineKeyboardMarkup:
    """Клавиатура карточки аукциона"""
    builder = InlineKeyboardBuilder()
    if is_active:
        # Быстрые ставки: текущая цена + шаг
        for step in settings.quick_steps_list:
            amount = Decimal(current_bid) + step
            builder.add(InlineKeyboardButton(
                text=f"+{format_money(step)}",
                callback_data=f"bid:amount:{auction_id}:{amount}"
            ))
        builder.add(InlineKeyboardButton(
            text="✏️ Saisir un montant",
            callback_data=f"bid:custom:{auction_id}"
        ))
    builder.add(InlineKeyboardButton(
        text="🔄 Actualiser",
        callback_data=f"auction:view:{auction_id}"
    ))
    builder.add(InlineKeyboardButton(
        text="⬅️ Toutes les enchères",
        callback_data="auction:list"
    ))
    builder.adjust(max(len(settings.quick_steps_list), 1) if is_active else 1, 1)
    return builder.as_markup()


def get_bid_cancel_keyboard(auction_id: int) -> InlineKeyboardMarkup:
    """Отмена ввода суммы"""
    builder = InlineKeyboardBuilder()
    builder.add(InlineKeyboardButton(
        text="❌ Annuler",
        callback_data=f"bid:cancel:{auction_id}"
    ))
    return builder.as_markup()
