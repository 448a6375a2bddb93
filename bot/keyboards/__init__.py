"""Клавиатуры бота"""
from .main import get_main_keyboard, MENU_AUCTIONS, MENU_PROFILE, MENU_ADMIN
from .auction import get_auctions_list_keyboard, get_auction_keyboard, get_bid_cancel_keyboard
from .admin import get_admin_panel_keyboard, get_admin_auctions_keyboard, get_delete_confirm_keyboard

__all__ = [
    "get_main_keyboard",
    "MENU_AUCTIONS",
    "MENU_PROFILE",
    "MENU_ADMIN",
    "get_auctions_list_keyboard",
    "get_auction_keyboard",
    "get_bid_cancel_keyboard",
    "get_admin_panel_keyboard",
    "get_admin_auctions_keyboard",
    "get_delete_confirm_keyboard",
]
