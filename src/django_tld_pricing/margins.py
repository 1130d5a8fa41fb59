"""Margin analysis: sales price versus registrar cost."""

import logging
from decimal import Decimal, ROUND_HALF_EVEN

from .clock import system_clock
from .conf import get_policy
from .currency import CurrencyConverter
from .exceptions import ConversionUnavailableError, CostPricingNotConfiguredError, NotFoundError
from .models import OperationType, Registrar, Tld
from .operations import fields_for
from .pricing import PricingCalculator
from .selection import RegistrarSelector
from .selectors import get_cost_pricing_for, get_current_sales_pricing
from .value_objects import MarginResult

logger = logging.getLogger(__name__)

PERCENT_PLACES = Decimal('0.01')


class MarginAnalyzer:
    """Computes and classifies margins against the low-margin threshold."""

    def __init__(self, *, clock=None, policy=None, converter=None, selector=None, calculator=None):
        self.clock = clock or system_clock
        self.policy = policy or get_policy()
        self.converter = converter or CurrencyConverter(clock=self.clock, policy=self.policy)
        self.selector = selector or RegistrarSelector(
            clock=self.clock, policy=self.policy, converter=self.converter,
        )
        self.calculator = calculator or PricingCalculator(
            clock=self.clock, policy=self.policy, converter=self.converter, selector=self.selector,
        )

    def calculate_margin(self, tld, operation, registrar=None, *, as_of=None) -> MarginResult:
        """
        Margin for one operation on a TLD.

        The cost is converted into the sales currency before subtracting;
        without a rate the margin is not computed.

        Raises:
            PricingNotConfiguredError: No sales pricing in force.
            RegistrarUnavailableError: No registrar given and none offers the TLD.
            CostPricingNotConfiguredError: No cost pricing for the registrar.
            ConversionUnavailableError: Cost and price currencies cannot be reconciled.
        """
        operation = OperationType(operation)
        check_time = as_of or self.clock()

        sales = get_current_sales_pricing(tld, as_of=check_time)
        price = self.calculator.unit_price(sales, operation)

        if registrar is None:
            selection = self.selector.select_optimal_registrar(tld, as_of=check_time)
            registrar = Registrar.objects.get(pk=selection.registrar_id)

        cost_pricing = get_cost_pricing_for(registrar, tld, as_of=check_time)
        original_cost = cost_pricing.money(fields_for(operation).cost_field)
        if original_cost is None:
            raise CostPricingNotConfiguredError(
                f"{registrar} has no {operation.label.lower()} cost for {tld}",
                context={"registrar_id": registrar.pk, "tld_id": tld.pk, "operation": operation.value},
            )
        cost = self.converter.convert_money(original_cost, price.currency, check_time)

        # Classify on settlement amounts; only the reported percentage is rounded
        price = price.quantized()
        cost = cost.quantized()
        margin = price - cost
        if price.is_zero():
            exact_percentage = percentage = None
        else:
            exact_percentage = margin.amount / price.amount * 100
            percentage = exact_percentage.quantize(PERCENT_PLACES, rounding=ROUND_HALF_EVEN)

        is_negative = margin.is_negative()
        is_low = (
            exact_percentage is not None
            and Decimal('0') <= exact_percentage < self.policy.low_margin_threshold
        )
        alert = ""
        if is_negative:
            alert = f"Negative margin: cost {cost} exceeds price {price}"
        elif is_low:
            alert = f"Low margin: {percentage}% is below the {self.policy.low_margin_threshold}% threshold"

        return MarginResult(
            tld_id=tld.pk,
            tld_extension=tld.extension,
            registrar_id=registrar.pk,
            registrar_name=registrar.name,
            operation=operation.value,
            cost=cost,
            price=price,
            original_cost=original_cost,
            margin_amount=margin,
            margin_percentage=percentage,
            is_negative_margin=is_negative,
            is_low_margin=is_low,
            alert_message=alert,
        )

    def _registration_margins(self, as_of=None):
        check_time = as_of or self.clock()
        for tld in Tld.objects.filter(is_active=True).order_by('extension'):
            try:
                yield self.calculate_margin(tld, OperationType.REGISTRATION, as_of=check_time)
            except (NotFoundError, ConversionUnavailableError) as exc:
                logger.info(f"Margin report skipped {tld}: {exc}")

    def negative_margin_report(self, *, as_of=None) -> list[MarginResult]:
        """Registration margins below zero across active TLDs."""
        return [m for m in self._registration_margins(as_of) if m.is_negative_margin]

    def low_margin_report(self, *, as_of=None) -> list[MarginResult]:
        """Registration margins that are low or negative across active TLDs."""
        return [m for m in self._registration_margins(as_of) if m.is_low_margin or m.is_negative_margin]
