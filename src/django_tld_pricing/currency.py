"""Currency conversion over pre-loaded exchange rates.

Rates are looked up for the exact (from, to) direction only; a missing
pair is not derived by inverting the opposite rate.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db.models import Q

from .clock import system_clock
from .conf import get_policy
from .exceptions import ConversionUnavailableError
from .models import ExchangeRate
from .money import Money

logger = logging.getLogger(__name__)


class ExchangeRateProvider(ABC):
    """Source of exchange rates."""

    @abstractmethod
    def rate_at(self, from_currency: str, to_currency: str, instant: datetime) -> Optional[Decimal]:
        """Return the rate valid at instant, or None if none is known."""


class DatabaseExchangeRateProvider(ExchangeRateProvider):
    """Reads ExchangeRate rows: latest effective_date <= instant, not yet expired."""

    def rate_at(self, from_currency, to_currency, instant):
        row = (
            ExchangeRate.objects.filter(
                base_currency=from_currency.upper(),
                target_currency=to_currency.upper(),
                is_active=True,
                effective_date__lte=instant,
            )
            .filter(Q(expiry_date__isnull=True) | Q(expiry_date__gt=instant))
            .order_by('-effective_date', '-pk')
            .first()
        )
        return row.rate if row else None


class CurrencyConverter:
    """Converts amounts, applying the configured markup percentage."""

    def __init__(self, provider: ExchangeRateProvider = None, *, clock=None, policy=None):
        self.provider = provider or DatabaseExchangeRateProvider()
        self.clock = clock or system_clock
        self.policy = policy or get_policy()

    def convert(self, amount: Decimal, from_currency: str, to_currency: str, instant=None) -> Decimal:
        """
        Convert an amount between currencies.

        Identical currencies return the amount unchanged, with no markup.

        Raises:
            ConversionUnavailableError: If no rate is valid at instant.
        """
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        if from_currency == to_currency:
            return amount

        check_time = instant or self.clock()
        rate = self.provider.rate_at(from_currency, to_currency, check_time)
        if rate is None:
            logger.warning("No exchange rate %s->%s at %s", from_currency, to_currency, check_time)
            raise ConversionUnavailableError(from_currency, to_currency, as_of=check_time)

        converted = Decimal(amount) * Decimal(rate)
        markup = self.policy.currency_conversion_markup
        if markup > 0:
            converted = converted * (Decimal('1') + markup / Decimal('100'))
        return converted

    def convert_money(self, money: Money, to_currency: str, instant=None) -> Money:
        """Money-typed convert(); returns the input unchanged for the same currency."""
        if money.currency == to_currency.upper():
            return money
        return Money(self.convert(money.amount, money.currency, to_currency, instant), to_currency)
