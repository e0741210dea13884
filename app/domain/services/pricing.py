"""Cálculo de precio, comisión de la plataforma y pago al dueño."""

from dataclasses import dataclass
from decimal import Decimal

from app.domain.errors import InvalidMoneyError
from app.domain.value_objects.date_range import DateRange
from app.domain.value_objects.money import Money

DEFAULT_COMMISSION_RATE = Decimal("0.10")


@dataclass(frozen=True)
class PriceQuote:
    """
    Desglose derivado de una reserva.

    Nunca se modifica por separado: se recalcula cada vez que cambian las
    fechas o el precio por día.
    """

    days: int
    price: Money
    commission: Money
    owner_payout: Money


def split_commission(total: Money, commission_rate: Decimal = DEFAULT_COMMISSION_RATE) -> tuple[Money, Money]:
    """Separa un monto en (comisión, pago al dueño); la suma siempre es el total."""
    commission = total.percentage(commission_rate)
    return commission, total - commission


def quote_rental(
    date_range: DateRange,
    price_per_day: Decimal,
    currency_code: str,
    commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
) -> PriceQuote:
    """
    Cotiza una renta.

    Regla de negocio: days = ceil((return - pickup) / 1 día), mínimo 1;
    price = days * price_per_day; commission = round_half_up(price * rate).

    Raises:
        InvalidMoneyError: si price_per_day no es positivo.
    """
    if price_per_day is None or Decimal(str(price_per_day)) <= 0:
        raise InvalidMoneyError(f"price_per_day debe ser positivo: {price_per_day}")

    days = date_range.rental_days
    price = Money(amount=Decimal(str(price_per_day)), currency_code=currency_code) * days
    commission, owner_payout = split_commission(price, commission_rate)
    return PriceQuote(days=days, price=price, commission=commission, owner_payout=owner_payout)
