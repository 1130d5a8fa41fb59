"""Price calculation for TLD operations."""

import logging

from .clock import system_clock
from .conf import get_policy
from .currency import CurrencyConverter
from .exceptions import PricingNotConfiguredError, RegistrarUnavailableError
from .models import OperationType
from .money import Money
from .operations import fields_for
from .selection import RegistrarSelector
from .selectors import find_current_discount, get_current_sales_pricing
from .value_objects import PriceQuote

logger = logging.getLogger(__name__)


class PricingCalculator:
    """Composes sales price, reseller discount and registrar choice."""

    def __init__(self, *, clock=None, policy=None, converter=None, selector=None):
        self.clock = clock or system_clock
        self.policy = policy or get_policy()
        self.converter = converter or CurrencyConverter(clock=self.clock, policy=self.policy)
        self.selector = selector or RegistrarSelector(
            clock=self.clock, policy=self.policy, converter=self.converter,
        )

    def unit_price(self, sales_pricing, operation, *, is_first_year: bool = False) -> Money:
        """
        Per-year price for an operation.

        The first-year override applies to registrations only.

        Raises:
            PricingNotConfiguredError: If the operation has no price (e.g. privacy unset).
        """
        mapping = fields_for(operation)
        if is_first_year and mapping.first_year_price_field:
            override = sales_pricing.money(mapping.first_year_price_field)
            if override is not None:
                return override
        price = sales_pricing.money(mapping.price_field)
        if price is None:
            raise PricingNotConfiguredError(sales_pricing.tld)
        return price

    def calculate_price(
        self,
        tld,
        operation,
        *,
        years: int = 1,
        is_first_year: bool = False,
        reseller=None,
        customer=None,
        target_currency: str | None = None,
        as_of=None,
    ) -> PriceQuote:
        """
        Price an operation on a TLD.

        Args:
            tld: Tld instance
            operation: OperationType
            years: number of years, priced linearly
            is_first_year: use the first-year registration override if present
            reseller: optional ResellerCompany whose discount may apply
            customer: passed through to registrar selection
            target_currency: optionally convert the final price
            as_of: pricing instant (defaults to now)

        Raises:
            PricingNotConfiguredError: No sales pricing in force.
            ConversionUnavailableError: A needed exchange rate is missing.
        """
        operation = OperationType(operation)
        if years < 1:
            raise ValueError(f"years must be at least 1, got {years}")
        check_time = as_of or self.clock()

        sales = get_current_sales_pricing(tld, as_of=check_time)
        base_price = self.unit_price(sales, operation, is_first_year=is_first_year) * years
        discount_amount = Money.zero(base_price.currency)
        discount_applied = False
        description = ""

        discount = find_current_discount(reseller, tld, as_of=check_time) if reseller is not None else None
        if discount is not None and discount.applies_to(operation):
            if sales.is_promotional and not self.policy.allow_discount_stacking:
                logger.debug(f"Discount for {reseller} not stacked on promotion {sales.promotion_name!r}")
            else:
                terms = discount.terms
                discount_amount = self.converter.convert_money(
                    terms.amount_for(base_price, years), base_price.currency, check_time,
                )
                discount_applied = True
                description = terms.describe()

        # Clamp: a discount never takes the price below zero
        if discount_amount > base_price:
            logger.warning(f"Discount {discount_amount} exceeds {base_price} for {tld}; clamping to zero")
            discount_amount = base_price
        base_price = base_price.quantized()
        discount_amount = discount_amount.quantized()
        final_price = base_price - discount_amount

        registrar_id, registrar_name = None, ""
        try:
            selection = self.selector.select_optimal_registrar(tld, customer, as_of=check_time)
            registrar_id, registrar_name = selection.registrar_id, selection.registrar_name
        except RegistrarUnavailableError:
            logger.warning(f"Priced {tld} {operation.value} without a registrar recommendation")

        converted = None
        if target_currency:
            converted = self.converter.convert_money(final_price, target_currency, check_time).quantized()

        return PriceQuote(
            tld_id=tld.pk,
            tld_extension=tld.extension,
            operation=operation.value,
            years=years,
            base_price=base_price,
            discount_amount=discount_amount,
            final_price=final_price,
            is_promotional=sales.is_promotional,
            promotion_name=sales.promotion_name,
            is_discount_applied=discount_applied,
            discount_description=description,
            registrar_id=registrar_id,
            registrar_name=registrar_name,
            converted_price=converted,
        )
