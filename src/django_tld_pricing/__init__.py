"""Django TLD Pricing - Effective-dated registrar costs, sales prices and margins.

Provides:
- CostPricing / SalesPricing / ResellerDiscount: effective-dated interval records
- TldPricingEngine: price calculation, registrar selection, margin analysis
- CurrencyConverter: rate lookup with configurable markup
- ArchivalSweeper: retention-based archival of closed intervals

Usage:
    INSTALLED_APPS = [
        ...
        'django_tld_pricing',
    ]

    from django_tld_pricing import TldPricingEngine, OperationType

    engine = TldPricingEngine()
    quote = engine.calculate_price(tld, OperationType.REGISTRATION, years=2)

See conf.py for all configuration options.
"""

__version__ = "0.1.0"

__all__ = [
    "TldPricingEngine",
    "OperationType",
    "IntervalFamily",
    "Money",
    "PercentageDiscount",
    "FixedAmountDiscount",
    "PricingError",
]


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name == "TldPricingEngine":
        from .engine import TldPricingEngine
        return TldPricingEngine
    if name in ("OperationType", "IntervalFamily"):
        from . import models
        return getattr(models, name)
    if name == "Money":
        from .money import Money
        return Money
    if name in ("PercentageDiscount", "FixedAmountDiscount"):
        from . import value_objects
        return getattr(value_objects, name)
    if name == "PricingError":
        from .exceptions import PricingError
        return PricingError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
