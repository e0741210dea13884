"""Value Object Money - representa un valor monetario con su moneda."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.domain.errors import InvalidMoneyError

WHOLE_UNIT = Decimal("1")
MINOR_UNITS_PER_UNIT = 100


@dataclass(frozen=True)
class Money:
    """
    Value Object inmutable que representa un monto monetario.

    Attributes:
        amount: Monto decimal en unidades mayores (ej: rupias, no centavos).
        currency_code: Código ISO 4217 de la moneda, en minúsculas como lo usa Stripe.
    """

    amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        object.__setattr__(self, "currency_code", self.currency_code.lower())

        if len(self.currency_code) != 3:
            raise InvalidMoneyError(f"currency_code debe ser de 3 caracteres: {self.currency_code}")

        if self.amount < 0:
            raise InvalidMoneyError(f"amount no puede ser negativo: {self.amount}")

    def __add__(self, other: "Money") -> "Money":
        self._check_same_currency(other)
        return Money(amount=self.amount + other.amount, currency_code=self.currency_code)

    def __sub__(self, other: "Money") -> "Money":
        self._check_same_currency(other)
        return Money(amount=self.amount - other.amount, currency_code=self.currency_code)

    def __mul__(self, factor: int) -> "Money":
        return Money(amount=self.amount * factor, currency_code=self.currency_code)

    def _check_same_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"No se puede operar Money con {type(other)}")
        if self.currency_code != other.currency_code:
            raise InvalidMoneyError(
                f"No se pueden operar montos de diferentes monedas: "
                f"{self.currency_code} vs {other.currency_code}"
            )

    def percentage(self, rate: Decimal) -> "Money":
        """Porcentaje redondeado a unidades enteras (half-up)."""
        value = (self.amount * rate).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)
        return Money(amount=value, currency_code=self.currency_code)

    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code.upper()}"

    @classmethod
    def zero(cls, currency_code: str = "lkr") -> "Money":
        """Crea un Money con valor cero."""
        return cls(amount=Decimal("0"), currency_code=currency_code)

    @classmethod
    def from_minor_units(cls, minor: int, currency_code: str) -> "Money":
        """Crea un Money desde unidades menores (útil para Stripe)."""
        return cls(amount=Decimal(minor) / MINOR_UNITS_PER_UNIT, currency_code=currency_code)

    def to_minor_units(self) -> int:
        """Convierte a unidades menores (útil para Stripe)."""
        return int((self.amount * MINOR_UNITS_PER_UNIT).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))
