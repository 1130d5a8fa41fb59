"""Pricing engine facade.

Wires the guard, converter, selector, calculator, analyzer, sweeper and
interval services around one clock and one policy.

Usage:
    engine = TldPricingEngine()
    engine.sales.create(tld=tld, effective_from=start, registration_price=Decimal("12.00"), ...)
    quote = engine.calculate_price(tld, OperationType.REGISTRATION, years=2, reseller=reseller)
    report = engine.negative_margin_report()
"""

from .archival import ArchivalSweeper
from .clock import system_clock
from .conf import get_policy
from .currency import CurrencyConverter
from .margins import MarginAnalyzer
from .models import IntervalFamily
from .pricing import PricingCalculator
from .schedule import FutureScheduleGuard
from .selection import RegistrarSelector
from .services import IntervalService, PreferenceService


class TldPricingEngine:
    """Single entry point for the pricing operations."""

    def __init__(self, *, clock=None, policy=None, rate_provider=None):
        self.clock = clock or system_clock
        self.policy = policy or get_policy()
        self.guard = FutureScheduleGuard(clock=self.clock, policy=self.policy)
        self.converter = CurrencyConverter(rate_provider, clock=self.clock, policy=self.policy)
        self.selector = RegistrarSelector(clock=self.clock, policy=self.policy, converter=self.converter)
        self.calculator = PricingCalculator(
            clock=self.clock, policy=self.policy, converter=self.converter, selector=self.selector,
        )
        self.analyzer = MarginAnalyzer(
            clock=self.clock,
            policy=self.policy,
            converter=self.converter,
            selector=self.selector,
            calculator=self.calculator,
        )
        self.sweeper = ArchivalSweeper(clock=self.clock, policy=self.policy)

        self._services = {
            family: IntervalService(family, clock=self.clock, policy=self.policy, guard=self.guard)
            for family in IntervalFamily
        }
        self.costs = self._services[IntervalFamily.COST]
        self.sales = self._services[IntervalFamily.SALES]
        self.discounts = self._services[IntervalFamily.DISCOUNT]
        self.preferences = PreferenceService()

    def intervals(self, family) -> IntervalService:
        return self._services[IntervalFamily(family)]

    def calculate_price(self, tld, operation, **kwargs):
        return self.calculator.calculate_price(tld, operation, **kwargs)

    def calculate_margin(self, tld, operation, registrar=None, **kwargs):
        return self.analyzer.calculate_margin(tld, operation, registrar, **kwargs)

    def select_optimal_registrar(self, tld, customer=None, **kwargs):
        return self.selector.select_optimal_registrar(tld, customer, **kwargs)

    def convert(self, amount, from_currency, to_currency, instant=None):
        return self.converter.convert(amount, from_currency, to_currency, instant)

    def negative_margin_report(self, **kwargs):
        return self.analyzer.negative_margin_report(**kwargs)

    def low_margin_report(self, **kwargs):
        return self.analyzer.low_margin_report(**kwargs)

    def archive_older_than(self, family, retention_years=None):
        if retention_years is None:
            retention_years = self.policy.retention_years(family)
        return self.sweeper.archive_older_than(family, retention_years)
