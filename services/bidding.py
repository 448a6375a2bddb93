"""Правила приема ставок и ошибки предметной области

Здесь нет обращений к базе: ``check_bid`` только решает, можно ли записать
ставку. Запись ставки и обновление текущей цены делает вызывающий код
(см. ``services.auction.place_bid``).
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from database.models.auction import AuctionStatus
from services.formatting import as_utc, format_money

Amount = Union[str, int, float, Decimal]

# Денежные суммы храним с точностью до цента
CENT = Decimal("0.01")
# Предел колонки Numeric(12, 2)
MAX_AMOUNT = Decimal("9999999999.99")


class AuctionError(ValueError):
    """Базовая ошибка, текст которой можно показать пользователю"""


class InvalidAmount(AuctionError):
    def __init__(self, raw=None):
        self.raw = raw
        super().__init__("Veuillez saisir un montant valide (nombre positif)")


class BidTooLow(AuctionError):
    def __init__(self, current_bid: Decimal):
        self.current_bid = current_bid
        super().__init__(
            f"Votre offre doit être supérieure à l'enchère actuelle de {format_money(current_bid)}"
        )


class AuctionExpired(AuctionError):
    def __init__(self):
        super().__init__("Cette enchère est terminée")


class InvalidAuctionState(AuctionError):
    def __init__(self, status: Optional[str] = None):
        self.status = status
        super().__init__("Cette enchère n'est plus active")


class Unauthenticated(AuctionError):
    def __init__(self):
        super().__init__("Vous devez être connecté pour enchérir")


class AuctionNotFound(AuctionError):
    def __init__(self, auction_id=None):
        self.auction_id = auction_id
        super().__init__("Enchère introuvable")


class Forbidden(AuctionError):
    def __init__(self):
        super().__init__("Accès réservé aux administrateurs")


class InvalidEmail(AuctionError):
    def __init__(self):
        super().__init__("Adresse email invalide")


class InvalidAuctionData(AuctionError):
    """Некорректные данные при создании аукциона"""


class BackendUnavailable(RuntimeError):
    """Сбой базы данных или сети. Исходное исключение доступно в __cause__"""

    def __init__(self, message: str = "Service momentanément indisponible"):
        super().__init__(message)


def parse_amount(raw: Amount, *, allow_zero: bool = False) -> Decimal:
    """Разобрать сумму: «2 500,50 €», 2500.5, Decimal("2500.50")

    Возвращает Decimal с двумя знаками после запятой. Бросает InvalidAmount,
    если это не конечное положительное число или знаков больше двух.
    """
    if isinstance(raw, bool) or raw is None:
        raise InvalidAmount(raw)

    if isinstance(raw, str):
        text = raw.strip().rstrip("€").strip()
        text = text.replace(" ", "").replace("\xa0", "").replace("\u202f", "")
        text = text.replace(",", ".")
        if not text:
            raise InvalidAmount(raw)
    elif isinstance(raw, float):
        # repr дает кратчайшее представление: 2500.01, а не 2500.0100000000002
        text = repr(raw)
    else:
        text = raw

    try:
        amount = Decimal(text)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(raw)

    if not amount.is_finite():
        raise InvalidAmount(raw)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmount(raw)
    if amount > MAX_AMOUNT:
        raise InvalidAmount(raw)
    if amount != amount.quantize(CENT):
        raise InvalidAmount(raw)

    return amount.quantize(CENT)


def check_bid(
    amount: Amount,
    *,
    status: str,
    end_time: datetime,
    current_bid: Decimal,
    now: Optional[datetime] = None,
) -> Decimal:
    """Проверить, можно ли принять ставку

    Сначала проверяется состояние аукциона, потом сумма: для закрытого или
    истекшего аукциона любая ставка отклоняется ошибкой состояния.
    Возвращает нормализованную сумму принятой ставки.
    """
    if status != AuctionStatus.ACTIVE.value:
        raise InvalidAuctionState(status)

    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    if now >= as_utc(end_time):
        raise AuctionExpired()

    value = parse_amount(amount)

    if value <= Decimal(current_bid):
        raise BidTooLow(Decimal(current_bid))

    return value
