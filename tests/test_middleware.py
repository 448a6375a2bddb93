from __future__ import annotations

from types import SimpleNamespace

from bot.middlewares.database import DatabaseMiddleware


async def _run(middleware, data):
    seen = {}

    async def handler(event, handler_data):
        seen.update(handler_data)
        return "handled"

    result = await middleware(handler, SimpleNamespace(), data)
    return result, seen


async def test_registered_user_is_injected(session_maker, bidder) -> None:
    middleware = DatabaseMiddleware(session_maker)

    result, seen = await _run(middleware, {"event_from_user": SimpleNamespace(id=bidder.telegram_id)})

    assert result == "handled"
    assert seen["session"] is not None
    assert seen["user"].id == bidder.id


async def test_unknown_user_is_none(session_maker) -> None:
    middleware = DatabaseMiddleware(session_maker)

    _, seen = await _run(middleware, {"event_from_user": SimpleNamespace(id=31337)})

    assert seen["user"] is None


async def test_event_without_sender(session_maker) -> None:
    middleware = DatabaseMiddleware(session_maker)

    _, seen = await _run(middleware, {})

    assert seen["user"] is None
