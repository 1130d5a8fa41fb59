"""Money value object with currency-aware arithmetic."""

from decimal import Decimal, ROUND_HALF_EVEN
from dataclasses import dataclass
from typing import Union

from django_tld_pricing.exceptions import CurrencyMismatchError


# Settlement precision per currency; unknown codes use 2
CURRENCY_DECIMALS = {
    'USD': 2, 'EUR': 2, 'GBP': 2, 'SEK': 2, 'NOK': 2, 'DKK': 2,
    'CAD': 2, 'AUD': 2, 'CHF': 2, 'CNY': 2,
    'JPY': 0, 'KRW': 0,
}


@dataclass(frozen=True)
class Money:
    """
    Immutable amount in a single currency.

    Arithmetic between different currencies raises CurrencyMismatchError;
    conversion is the CurrencyConverter's job.

    Usage:
        price = Money(Decimal("40.00"), "USD")
        total = price * 2                    # Money(Decimal("80.00"), "USD")
        total.quantized()                    # banker's rounding to 2 places
    """
    amount: Decimal
    currency: str

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        object.__setattr__(self, 'currency', self.currency.upper())

    @classmethod
    def zero(cls, currency: str) -> 'Money':
        return cls(Decimal('0'), currency)

    def quantized(self) -> 'Money':
        """Return amount rounded half-even to the currency's decimals."""
        decimals = CURRENCY_DECIMALS.get(self.currency, 2)
        return Money(
            self.amount.quantize(Decimal(10) ** -decimals, rounding=ROUND_HALF_EVEN),
            self.currency,
        )

    def _check_currency(self, other: 'Money', verb: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot {verb} {other.currency} and {self.currency}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, 'add')
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, 'subtract')
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: Union[Decimal, int]) -> 'Money':
        return Money(self.amount * Decimal(str(factor)), self.currency)

    def __rmul__(self, factor: Union[Decimal, int]) -> 'Money':
        return self.__mul__(factor)

    def __lt__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._check_currency(other, 'compare')
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.quantized().amount} {self.currency}"

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_zero(self) -> bool:
        return self.amount == 0
