"""Основные клавиатуры"""
from aiogram.types import ReplyKeyboardMarkup, KeyboardButton

MENU_AUCTIONS = "🏷 Enchères"
MENU_PROFILE = "👤 Mon profil"
MENU_ADMIN = "🛠 Administration"


def get_main_keyboard(is_admin: bool = False) -> ReplyKeyboardMarkup:
    """Главная клавиатура (пункт администрирования только для админов)"""
    keyboard = [
        [KeyboardButton(text=MENU_AUCTIONS)],
        [KeyboardButton(text=MENU_PROFILE)],
    ]
    if is_admin:
        keyboard.append([KeyboardButton(text=MENU_ADMIN)])
    return ReplyKeyboardMarkup(
        keyboard=keyboard,
        resize_keyboard=True
    )
