"""Django TLD Pricing configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    TLD_PRICING_ALLOW_DISCOUNT_STACKING = True
    TLD_PRICING_LOW_MARGIN_THRESHOLD = Decimal('15')
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings


DEFAULTS = {
    'ALLOW_DISCOUNT_STACKING': False,
    'LOW_MARGIN_THRESHOLD': Decimal('10'),
    'CURRENCY_CONVERSION_MARKUP': Decimal('0'),
    'MAX_SCHEDULE_DAYS': 365,
    'COST_RETENTION_YEARS': 7,
    'SALES_RETENTION_YEARS': 7,
    'DISCOUNT_RETENTION_YEARS': 3,
    'BASE_CURRENCY': 'USD',
}


def get_setting(name: str, default=None):
    """Get a setting with TLD_PRICING_ prefix."""
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"TLD_PRICING_{name}", default)


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class PricingPolicy:
    """
    Snapshot of the pricing configuration.

    Components take a policy at construction so tests can inject one
    without touching Django settings.
    """
    allow_discount_stacking: bool = False
    low_margin_threshold: Decimal = Decimal('10')
    currency_conversion_markup: Decimal = Decimal('0')
    max_schedule_days: Optional[int] = 365
    cost_retention_years: int = 7
    sales_retention_years: int = 7
    discount_retention_years: int = 3
    base_currency: str = 'USD'

    @classmethod
    def from_settings(cls) -> 'PricingPolicy':
        """Build a policy from the TLD_PRICING_* Django settings."""
        max_days = getattr(settings, 'TLD_PRICING_MAX_SCHEDULE_DAYS', DEFAULTS['MAX_SCHEDULE_DAYS'])
        return cls(
            allow_discount_stacking=bool(get_setting('ALLOW_DISCOUNT_STACKING')),
            low_margin_threshold=_decimal(get_setting('LOW_MARGIN_THRESHOLD')),
            currency_conversion_markup=_decimal(get_setting('CURRENCY_CONVERSION_MARKUP')),
            max_schedule_days=max_days,
            cost_retention_years=int(get_setting('COST_RETENTION_YEARS')),
            sales_retention_years=int(get_setting('SALES_RETENTION_YEARS')),
            discount_retention_years=int(get_setting('DISCOUNT_RETENTION_YEARS')),
            base_currency=get_setting('BASE_CURRENCY'),
        )

    def retention_years(self, family) -> int:
        """Retention horizon in years for an interval family."""
        from django_tld_pricing.models import IntervalFamily

        return {
            IntervalFamily.COST: self.cost_retention_years,
            IntervalFamily.SALES: self.sales_retention_years,
            IntervalFamily.DISCOUNT: self.discount_retention_years,
        }[IntervalFamily(family)]


def get_policy() -> PricingPolicy:
    """Return the policy configured in Django settings."""
    return PricingPolicy.from_settings()


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# TLD_PRICING_ALLOW_DISCOUNT_STACKING = False  # Apply reseller discounts on promotional prices
# TLD_PRICING_LOW_MARGIN_THRESHOLD = Decimal('10')  # Percent below which a margin is "low"
# TLD_PRICING_CURRENCY_CONVERSION_MARKUP = Decimal('0')  # Percent added on conversion
# TLD_PRICING_MAX_SCHEDULE_DAYS = 365  # Furthest schedulable effective_from; None disables
# TLD_PRICING_COST_RETENTION_YEARS = 7
# TLD_PRICING_SALES_RETENTION_YEARS = 7
# TLD_PRICING_DISCOUNT_RETENTION_YEARS = 3
# TLD_PRICING_BASE_CURRENCY = 'USD'  # Currency used to rank registrar costs
