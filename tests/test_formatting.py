from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from services.formatting import (
    auction_status_badge,
    bid_outcome_badge,
    format_auction_card,
    format_auctions_list,
    format_bid_history,
    format_datetime,
    format_money,
    format_profile,
    format_time_remaining,
    parse_local_datetime,
)

NOW = datetime(2024, 6, 17, 10, 30, tzinfo=timezone.utc)


def test_days_hours_minutes() -> None:
    end_time = NOW + timedelta(milliseconds=90_000_000)
    assert format_time_remaining(end_time, NOW) == "1j 1h 0m"


def test_compact_form_drops_minutes_when_days_present() -> None:
    end_time = NOW + timedelta(days=2, hours=3, minutes=45)
    assert format_time_remaining(end_time, NOW, compact=True) == "2j 3h"
    assert format_time_remaining(end_time, NOW) == "2j 3h 45m"


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(hours=3, minutes=15), "3h 15m"),
        (timedelta(hours=1), "1h 0m"),
        (timedelta(minutes=42, seconds=59), "42m"),
        (timedelta(seconds=30), "0m"),
        (timedelta(0), "Terminé"),
        (timedelta(seconds=-1), "Terminé"),
        (timedelta(days=-3), "Terminé"),
    ],
)
def test_time_remaining_decomposition(delta, expected) -> None:
    assert format_time_remaining(NOW + delta, NOW) == expected


def test_time_remaining_is_deterministic() -> None:
    end_time = NOW + timedelta(days=1, hours=5, minutes=7)
    assert format_time_remaining(end_time, NOW) == format_time_remaining(end_time, NOW)


def test_time_remaining_accepts_naive_end_time() -> None:
    end_time = (NOW + timedelta(hours=2)).replace(tzinfo=None)
    assert format_time_remaining(end_time, NOW) == "2h 0m"


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (2500, "2 500 €"),
        (Decimal("2500.00"), "2 500 €"),
        (Decimal("2500.5"), "2 500,50 €"),
        (Decimal("1234567.01"), "1 234 567,01 €"),
        (Decimal("950"), "950 €"),
    ],
)
def test_format_money(amount, expected) -> None:
    assert format_money(amount) == expected


def test_format_datetime_uses_display_offset() -> None:
    moment = datetime(2024, 12, 25, 15, 30, tzinfo=timezone.utc)
    assert format_datetime(moment) == "25/12/2024 16:30"
    assert format_datetime(moment, with_time=False) == "25/12/2024"


def test_parse_local_datetime_returns_utc() -> None:
    parsed = parse_local_datetime(" 25/12/2024 16:30 ")
    assert parsed == datetime(2024, 12, 25, 15, 30, tzinfo=timezone.utc)

    with pytest.raises(ValueError):
        parse_local_datetime("2024-12-25 16:30")


def test_badges() -> None:
    assert auction_status_badge("active") == "Actif"
    assert auction_status_badge("ended") == "Terminé"
    assert "Gagnée" in bid_outcome_badge("won")
    assert "Perdue" in bid_outcome_badge("lost")
    assert bid_outcome_badge("unknown") == "unknown"


def _auction(**overrides):
    fields = dict(
        id=1,
        title="Montre Vintage Rolex",
        description="Magnifique montre vintage",
        current_bid=Decimal("2500"),
        end_time=NOW + timedelta(days=1, hours=1),
        status="active",
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_auction_card_contains_price_badge_and_time() -> None:
    text = format_auction_card(_auction(), NOW)

    assert "<b>Montre Vintage Rolex</b>" in text
    assert "[Actif]" in text
    assert "2 500 €" in text
    assert "1j 1h 0m" in text


def test_auction_card_escapes_user_text() -> None:
    text = format_auction_card(_auction(title="<script>", description="a & b"), NOW)

    assert "&lt;script&gt;" in text
    assert "a &amp; b" in text
    assert "<script>" not in text


def test_bid_history_empty() -> None:
    assert "Aucune enchère pour le moment" in format_bid_history([])


def test_bid_history_lists_bidders() -> None:
    bid = SimpleNamespace(amount=Decimal("2500"), created_at=datetime(2024, 6, 17, 8, 30, tzinfo=timezone.utc))
    user = SimpleNamespace(display_name="john@example.com")

    text = format_bid_history([(bid, user)])

    assert "2 500 €" in text
    assert "john@example.com" in text
    assert "17/06/2024 09:30" in text


def test_auctions_list_uses_compact_time() -> None:
    text = format_auctions_list([_auction(end_time=NOW + timedelta(days=2, hours=3, minutes=10))], NOW)

    assert "Enchères actives" in text
    assert "2j 3h" in text
    assert "2j 3h 10m" not in text


def test_auctions_list_empty() -> None:
    assert "Aucune enchère active" in format_auctions_list([], NOW)


def test_profile_text() -> None:
    user = SimpleNamespace(email="john@example.com", role="user")
    stats = SimpleNamespace(total_bids=2, won_auctions=1)
    rows = [
        SimpleNamespace(
            auction_title="Tableau Impressionniste",
            amount=Decimal("1800"),
            created_at=datetime(2024, 6, 16, 14, 20, tzinfo=timezone.utc),
            outcome="won",
        )
    ]

    text = format_profile(user, stats, rows)

    assert "john@example.com" in text
    assert "Utilisateur" in text
    assert "Enchères placées: 2" in text
    assert "Enchères gagnées: 1" in text
    assert "Tableau Impressionniste — 1 800 € — 16/06/2024" in text
    assert "Gagnée" in text


def test_profile_without_bids() -> None:
    user = SimpleNamespace(email="john@example.com", role="admin")
    stats = SimpleNamespace(total_bids=0, won_auctions=0)

    text = format_profile(user, stats, [])

    assert "Administrateur" in text
    assert "aucune enchère" in text
