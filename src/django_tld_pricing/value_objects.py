"""Immutable value objects returned by the pricing engine."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from django_tld_pricing.exceptions import InvalidDiscountError
from django_tld_pricing.money import Money


# =============================================================================
# DISCOUNT TERMS
# =============================================================================

@dataclass(frozen=True)
class PercentageDiscount:
    """Discount as a percentage of the base price, 0 < percentage <= 100."""
    percentage: Decimal

    def __post_init__(self):
        if not isinstance(self.percentage, Decimal):
            object.__setattr__(self, 'percentage', Decimal(str(self.percentage)))
        if not (Decimal('0') < self.percentage <= Decimal('100')):
            raise InvalidDiscountError(
                f"Discount percentage must be in (0, 100], got {self.percentage}"
            )

    def amount_for(self, base_price: Money, years: int) -> Money:
        return base_price * (self.percentage / Decimal('100'))

    def describe(self) -> str:
        return f"{self.percentage.normalize():f}% discount"

    def as_fields(self) -> dict:
        return {'discount_percentage': self.percentage, 'discount_amount': None, 'discount_currency': ''}


@dataclass(frozen=True)
class FixedAmountDiscount:
    """Discount of a fixed amount per year."""
    amount: Money

    def __post_init__(self):
        if not self.amount.is_positive():
            raise InvalidDiscountError(f"Fixed discount must be positive, got {self.amount}")

    def amount_for(self, base_price: Money, years: int) -> Money:
        return self.amount * years

    def describe(self) -> str:
        return f"{self.amount} discount per year"

    def as_fields(self) -> dict:
        return {
            'discount_percentage': None,
            'discount_amount': self.amount.amount,
            'discount_currency': self.amount.currency,
        }


DiscountTerms = Union[PercentageDiscount, FixedAmountDiscount]


def discount_terms_from_fields(percentage, amount, currency) -> DiscountTerms:
    """
    Build typed discount terms from the two nullable storage columns.

    Raises:
        InvalidDiscountError: if both or neither are set
    """
    if percentage is not None and amount is not None:
        raise InvalidDiscountError("Discount cannot have both a percentage and a fixed amount")
    if percentage is None and amount is None:
        raise InvalidDiscountError("Discount needs either a percentage or a fixed amount")
    if percentage is not None:
        return PercentageDiscount(percentage)
    if not currency:
        raise InvalidDiscountError("Fixed discount needs a currency")
    return FixedAmountDiscount(Money(amount, currency))


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class ScheduleCheck:
    """Outcome of validating an effective_from date."""
    ok: bool
    reason: str = ""

    def __bool__(self):
        return self.ok


@dataclass(frozen=True)
class RegistrarSelection:
    """Registrar chosen for a TLD.

    is_fallback is True when no candidate had a resolvable cost and the
    first active offering was returned instead.
    """
    registrar_id: int
    registrar_name: str
    registrar_tld_id: int
    registration_cost: Optional[Money] = None
    is_fallback: bool = False


@dataclass(frozen=True)
class PriceQuote:
    """Result of a price calculation."""
    tld_id: int
    tld_extension: str
    operation: str
    years: int
    base_price: Money
    discount_amount: Money
    final_price: Money
    is_promotional: bool = False
    promotion_name: str = ""
    is_discount_applied: bool = False
    discount_description: str = ""
    registrar_id: Optional[int] = None
    registrar_name: str = ""
    converted_price: Optional[Money] = None

    @property
    def currency(self) -> str:
        return self.final_price.currency

    def explain(self) -> str:
        """Human-readable summary of how the price was reached."""
        parts = [f".{self.tld_extension} {self.operation} x{self.years}: {self.base_price}"]
        if self.is_promotional and self.promotion_name:
            parts.append(f"(promotion: {self.promotion_name})")
        if self.is_discount_applied:
            parts.append(f"- {self.discount_amount} ({self.discount_description})")
        parts.append(f"= {self.final_price}")
        if self.converted_price is not None:
            parts.append(f"[{self.converted_price}]")
        return " ".join(parts)


@dataclass(frozen=True)
class MarginResult:
    """Cost versus price for one TLD, operation and registrar.

    margin_percentage is None when the sales price is zero.
    """
    tld_id: int
    tld_extension: str
    registrar_id: int
    registrar_name: str
    operation: str
    cost: Money
    price: Money
    original_cost: Money
    margin_amount: Money
    margin_percentage: Optional[Decimal]
    is_negative_margin: bool
    is_low_margin: bool
    alert_message: str = ""

    @property
    def is_healthy(self) -> bool:
        return not (self.is_negative_margin or self.is_low_margin)
