from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

import bot.handlers.auction as auction_handlers
from bot.handlers.admin import (
    NOT_MENU,
    CreateAuctionStates,
    create_auction_start,
    process_description,
    process_end_time,
    process_start_bid,
    process_title,
)
from bot.handlers.auction import BidState, bid_custom_amount, place_bid_amount, process_bid_amount
from bot.keyboards.main import MENU_AUCTIONS, MENU_PROFILE
from config import settings
from services.auction import count_auction_bids, get_all_auctions, get_auction
from services.bidding import BackendUnavailable


@pytest.fixture
def state():
    return FSMContext(storage=MemoryStorage(), key=StorageKey(bot_id=1, chat_id=2001, user_id=2001))


def _message(text: str | None = None):
    message = AsyncMock()
    message.text = text
    return message


def _callback(data: str):
    callback = AsyncMock()
    callback.data = data
    callback.message = AsyncMock()
    return callback


def _answer_text(mock) -> str:
    return mock.await_args_list[0].args[0]


async def test_quick_bid_button_places_bid(session, bidder, make_auction) -> None:
    auction = await make_auction(current_bid="2500")
    callback = _callback(f"bid:amount:{auction.id}:2510.00")

    await place_bid_amount(callback, session, bidder)

    assert (await get_auction(session, auction.id)).current_bid == Decimal("2510.00")
    text = _answer_text(callback.answer)
    assert "Offre soumise" in text
    assert "2 510 €" in text
    callback.message.edit_text.assert_awaited()


async def test_stale_quick_bid_button_shows_rule_error(session, bidder, make_auction) -> None:
    auction = await make_auction(current_bid="2600")
    callback = _callback(f"bid:amount:{auction.id}:2510.00")

    await place_bid_amount(callback, session, bidder)

    callback.answer.assert_awaited_once()
    assert "2 600 €" in _answer_text(callback.answer)
    assert callback.answer.await_args.kwargs["show_alert"] is True
    assert await count_auction_bids(session, auction.id) == 0


async def test_quick_bid_without_registration(session, make_auction) -> None:
    auction = await make_auction()
    callback = _callback(f"bid:amount:{auction.id}:3000")

    await place_bid_amount(callback, session, None)

    assert "connecté" in _answer_text(callback.answer)
    assert await count_auction_bids(session, auction.id) == 0


async def test_quick_bid_backend_failure_is_reported(session, bidder, make_auction, monkeypatch) -> None:
    auction = await make_auction()

    async def unavailable(*args, **kwargs):
        raise BackendUnavailable()

    monkeypatch.setattr(auction_handlers, "place_bid", unavailable)
    callback = _callback(f"bid:amount:{auction.id}:3000")

    await place_bid_amount(callback, session, bidder)

    assert _answer_text(callback.answer) == "Service momentanément indisponible"


async def test_custom_amount_prompt_shows_one_cent_minimum(session, bidder, make_auction, state) -> None:
    auction = await make_auction(current_bid="2500")
    callback = _callback(f"bid:custom:{auction.id}")

    await bid_custom_amount(callback, state, session, bidder)

    assert await state.get_state() == BidState.waiting_amount.state
    assert (await state.get_data())["auction_id"] == auction.id
    assert "2 500,01 €" in _answer_text(callback.message.answer)


@pytest.mark.parametrize("text", ["beaucoup", "2500", "-10"])
async def test_bad_amount_keeps_waiting_for_input(session, bidder, make_auction, state, text) -> None:
    auction = await make_auction(current_bid="2500")
    await state.set_state(BidState.waiting_amount)
    await state.update_data(auction_id=auction.id)
    message = _message(text)

    await process_bid_amount(message, session, state, bidder)

    assert await state.get_state() == BidState.waiting_amount.state
    assert "Enchère invalide" in _answer_text(message.answer)
    assert await count_auction_bids(session, auction.id) == 0


async def test_bid_on_expired_auction_leaves_input_state(session, bidder, make_auction, state, now) -> None:
    auction = await make_auction(end_time=now - timedelta(minutes=1))
    await state.set_state(BidState.waiting_amount)
    await state.update_data(auction_id=auction.id)
    message = _message("9000")

    await process_bid_amount(message, session, state, bidder)

    assert await state.get_state() is None
    assert "terminée" in _answer_text(message.answer).lower()


async def test_typed_bid_is_accepted(session, bidder, make_auction, state) -> None:
    auction = await make_auction(current_bid="2500")
    await state.set_state(BidState.waiting_amount)
    await state.update_data(auction_id=auction.id)
    message = _message("2 600,50")

    await process_bid_amount(message, session, state, bidder)

    assert await state.get_state() is None
    assert "Offre soumise" in _answer_text(message.answer)
    assert (await get_auction(session, auction.id)).current_bid == Decimal("2600.50")


async def test_create_auction_wizard(session, admin, state, now) -> None:
    await create_auction_start(_callback("admin:create"), state, admin)
    assert await state.get_state() == CreateAuctionStates.waiting_title.state

    await process_title(_message("Sculpture Bronze"), state)
    await process_description(_message("Sculpture en bronze du XIXe siècle"), state)
    await process_start_bid(_message("150,50"), state)
    assert await state.get_state() == CreateAuctionStates.waiting_end_time.state

    end_local = (now + timedelta(days=2)).astimezone(settings.display_tz)
    message = _message(end_local.strftime("%d/%m/%Y %H:%M"))
    await process_end_time(message, session, state, admin)

    assert await state.get_state() is None
    assert "Enchère créée" in _answer_text(message.answer)
    [auction] = await get_all_auctions(session)
    assert auction.title == "Sculpture Bronze"
    assert auction.start_bid == Decimal("150.50")


async def test_wizard_rejects_bad_start_bid(state) -> None:
    await state.set_state(CreateAuctionStates.waiting_start_bid)
    message = _message("cent euros")

    await process_start_bid(message, state)

    assert await state.get_state() == CreateAuctionStates.waiting_start_bid.state
    assert "Réessayez" in _answer_text(message.answer)


async def test_wizard_is_admin_only(bidder, state) -> None:
    callback = _callback("admin:create")

    await create_auction_start(callback, state, bidder)

    assert await state.get_state() is None
    assert callback.answer.await_args.kwargs["show_alert"] is True


async def test_wizard_stops_when_admin_role_is_lost(session, bidder, state, now) -> None:
    await state.set_state(CreateAuctionStates.waiting_end_time)
    await state.update_data(title="Sculpture Bronze", description="desc", start_bid="150.50")
    end_local = (now + timedelta(days=2)).astimezone(settings.display_tz)
    message = _message(end_local.strftime("%d/%m/%Y %H:%M"))

    await process_end_time(message, session, state, bidder)

    assert await state.get_state() is None
    assert "Réessayez" not in _answer_text(message.answer)
    assert await get_all_auctions(session) == []


def test_menu_buttons_are_not_wizard_answers() -> None:
    assert not NOT_MENU.resolve(SimpleNamespace(text=MENU_PROFILE))
    assert not NOT_MENU.resolve(SimpleNamespace(text=MENU_AUCTIONS))
    assert NOT_MENU.resolve(SimpleNamespace(text="Sculpture Bronze"))
