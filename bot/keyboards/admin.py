"""Клавиатуры админ панели"""
from typing import Sequence
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder


def get_admin_panel_keyboard() -> InlineKeyboardMarkup:
    """Действия администратора"""
    builder = InlineKeyboardBuilder()
    builder.add(InlineKeyboardButton(
        text="➕ Créer une enchère",
        callback_data="admin:create"
    ))
    builder.add(InlineKeyboardButton(
        text="📋 Enchères existantes",
        callback_data="admin:list"
    ))
    builder.add(InlineKeyboardButton(
        text="👑 Nommer un administrateur",
        callback_data="admin:grant"
    ))
    builder.add(InlineKeyboardButton(
        text="🚫 Retirer un administrateur",
        callback_data="admin:revoke"
    ))
    builder.adjust(1)
    return builder.as_markup()


def get_admin_auctions_keyboard(auctions: Sequence) -> InlineKeyboardMarkup:
    """Кнопка удаления на каждый аукцион"""
    builder = InlineKeyboardBuilder()
    for auction in auctions:
        builder.add(InlineKeyboardButton(
            text=f"🗑 #{auction.id} {auction.title}",
            callback_data=f"admin:delete:{auction.id}"
        ))
    builder.adjust(1)
    return builder.as_markup()


def get_delete_confirm_keyboard(auction_id: int) -> InlineKeyboardMarkup:
    """Подтверждение удаления"""
    builder = InlineKeyboardBuilder()
    builder.add(InlineKeyboardButton(
        text="✅ Oui, supprimer",
        callback_data=f"admin:delete_confirm:{auction_id}"
    ))
    builder.add(InlineKeyboardButton(
        text="❌ Annuler",
        callback_data="admin:delete_cancel"
    ))
    return builder.as_markup()
