"""Форматирование текстов для бота: суммы, даты, оставшееся время, карточки"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from aiogram.utils.markdown import hbold, hitalic
from aiogram.utils.text_decorations import html_decoration

from config import settings

ENDED_LABEL = "Terminé"

STATUS_LABELS = {
    "active": "Actif",
    "ended": "Terminé",
}

OUTCOME_LABELS = {
    "active": "🟢 En cours",
    "won": "🏆 Gagnée",
    "lost": "⚪ Perdue",
}

ROLE_LABELS = {
    "user": "Utilisateur",
    "admin": "Administrateur",
}

_DAY_MS = 24 * 60 * 60 * 1000
_HOUR_MS = 60 * 60 * 1000
_MINUTE_MS = 60 * 1000


def as_utc(moment: datetime) -> datetime:
    """Привести дату к UTC. Naive даты (SQLite, старые записи) считаем UTC"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def format_money(amount) -> str:
    """2500 -> «2 500 €», 2500.5 -> «2 500,50 €»"""
    value = Decimal(amount)
    if value == value.to_integral_value():
        text = f"{int(value):,}"
    else:
        text = f"{value:,.2f}"
    text = text.replace(",", " ").replace(".", ",")
    return f"{text} {settings.CURRENCY_SYMBOL}"


def format_datetime(moment: datetime, with_time: bool = True) -> str:
    """Дата в часовом поясе отображения"""
    local = as_utc(moment).astimezone(settings.display_tz)
    if with_time:
        return local.strftime("%d/%m/%Y %H:%M")
    return local.strftime("%d/%m/%Y")


def format_time_remaining(
    end_time: datetime,
    now: Optional[datetime] = None,
    *,
    compact: bool = False,
) -> str:
    """Сколько осталось до конца аукциона

    «1j 1h 0m», «3h 15m», «42m» или «Terminé». В компактном виде (список
    аукционов) при наличии дней минуты не показываются.
    """
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    diff_ms = (as_utc(end_time) - now) // timedelta(milliseconds=1)

    if diff_ms <= 0:
        return ENDED_LABEL

    days = diff_ms // _DAY_MS
    hours = (diff_ms % _DAY_MS) // _HOUR_MS
    minutes = (diff_ms % _HOUR_MS) // _MINUTE_MS

    if days > 0:
        if compact:
            return f"{days}j {hours}h"
        return f"{days}j {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def auction_status_badge(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def bid_outcome_badge(outcome: str) -> str:
    return OUTCOME_LABELS.get(outcome, outcome)


def _quote(text: Optional[str]) -> str:
    return html_decoration.quote(text or "")


def format_auction_card(auction, now: Optional[datetime] = None) -> str:
    """Карточка аукциона: заголовок, статус, описание, ставка, время"""
    lines = [
        f"{hbold(auction.title)}  [{auction_status_badge(auction.status)}]",
    ]
    if auction.description:
        lines.append("")
        lines.append(_quote(auction.description))
    lines.append("")
    lines.append(f"💶 Enchère actuelle: {hbold(format_money(auction.current_bid))}")
    lines.append(f"⏳ Temps restant: {format_time_remaining(auction.end_time, now)}")
    lines.append(f"📅 Fin: {format_datetime(auction.end_time)}")
    return "\n".join(lines)


def format_bid_history(bids: Sequence) -> str:
    """История ставок: пары (Bid, User), новые сверху"""
    lines = [hbold("Historique des enchères")]
    if not bids:
        lines.append(hitalic("Aucune enchère pour le moment"))
        return "\n".join(lines)

    for bid, user in bids:
        lines.append(
            f"• {hbold(format_money(bid.amount))} — "
            f"{_quote(user.display_name)} • {format_datetime(bid.created_at)}"
        )
    return "\n".join(lines)


def format_auctions_list(auctions: Sequence, now: Optional[datetime] = None) -> str:
    """Список активных аукционов (главная страница)"""
    lines = [
        hbold("Enchères actives"),
        "Découvrez les dernières enchères et placez vos offres",
        "",
    ]
    if not auctions:
        lines.append(hitalic("Aucune enchère active pour le moment"))
        return "\n".join(lines)

    for auction in auctions:
        lines.append(
            f"🏷 {hbold(auction.title)} — {format_money(auction.current_bid)}\n"
            f"    ⏳ Temps restant: {format_time_remaining(auction.end_time, now, compact=True)}"
        )
    return "\n".join(lines)


def format_admin_auctions(auctions: Sequence) -> str:
    """Таблица аукционов для админ панели"""
    lines = [hbold("Enchères existantes"), ""]
    if not auctions:
        lines.append(hitalic("Aucune enchère créée"))
        return "\n".join(lines)

    for auction in auctions:
        lines.append(
            f"#{auction.id} {hbold(auction.title)}\n"
            f"    {format_money(auction.current_bid)} • "
            f"fin {format_datetime(auction.end_time, with_time=False)} • "
            f"{auction_status_badge(auction.status)}"
        )
    return "\n".join(lines)


def format_profile(user, stats, user_bids: Iterable) -> str:
    """Профиль: личные данные, статистика и история ставок"""
    lines = [
        hbold("Mon profil"),
        "",
        f"✉️ Email: {_quote(user.email or '—')}",
        f"🔑 Rôle: {ROLE_LABELS.get(user.role, user.role)}",
        f"📊 Enchères placées: {stats.total_bids}",
        f"🏆 Enchères gagnées: {stats.won_auctions}",
        "",
        hbold("Historique des enchères"),
    ]

    rows = list(user_bids)
    if not rows:
        lines.append(hitalic("Vous n'avez encore placé aucune enchère"))
        return "\n".join(lines)

    for row in rows:
        lines.append(
            f"• {_quote(row.auction_title)} — {format_money(row.amount)} — "
            f"{format_datetime(row.created_at, with_time=False)} — "
            f"{bid_outcome_badge(row.outcome)}"
        )
    return "\n".join(lines)


def parse_local_datetime(text: str) -> datetime:
    """Разобрать «JJ/MM/AAAA HH:MM» в часовом поясе отображения, вернуть UTC"""
    moment = datetime.strptime(text.strip(), "%d/%m/%Y %H:%M")
    return moment.replace(tzinfo=settings.display_tz).astimezone(timezone.utc)
