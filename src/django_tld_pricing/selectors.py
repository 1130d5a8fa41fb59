"""Selectors for TLD pricing.

Point-in-time lookups over the interval families. Each returns the one
interval in force at `as_of` (defaults to now) or raises a NotFoundError
subclass; a missing interval is never reported as a zero price.
"""

import logging
from datetime import datetime

from django.utils import timezone

from .exceptions import (
    CostPricingNotConfiguredError,
    DiscountNotFoundError,
    PricingNotConfiguredError,
)
from .models import CostPricing, RegistrarTld, ResellerDiscount, SalesPricing

logger = logging.getLogger(__name__)


def get_current_sales_pricing(tld, *, as_of: datetime | None = None) -> SalesPricing:
    """Return the sales pricing interval in force for a TLD.

    Raises:
        PricingNotConfiguredError: If no interval covers as_of.
    """
    check_time = as_of or timezone.now()
    pricing = SalesPricing.objects.filter(tld=tld).current_at(check_time)
    if pricing is None:
        raise PricingNotConfiguredError(tld, as_of=check_time)
    return pricing


def get_current_cost_pricing(registrar_tld, *, as_of: datetime | None = None) -> CostPricing:
    """Return the cost pricing interval in force for a registrar/TLD relation.

    Raises:
        CostPricingNotConfiguredError: If no interval covers as_of.
    """
    check_time = as_of or timezone.now()
    pricing = CostPricing.objects.filter(registrar_tld=registrar_tld).current_at(check_time)
    if pricing is None:
        raise CostPricingNotConfiguredError(
            f"No cost pricing configured for {registrar_tld}",
            context={"registrar_tld_id": getattr(registrar_tld, "pk", registrar_tld), "as_of": check_time},
        )
    return pricing


def get_cost_pricing_for(registrar, tld, *, as_of: datetime | None = None) -> CostPricing:
    """Resolve the registrar/TLD relation, then its current cost pricing."""
    relation = RegistrarTld.objects.filter(registrar=registrar, tld=tld).first()
    if relation is None:
        raise CostPricingNotConfiguredError(
            f"Registrar {registrar} does not offer {tld}",
            context={"registrar_id": getattr(registrar, "pk", registrar), "tld_id": getattr(tld, "pk", tld)},
        )
    return get_current_cost_pricing(relation, as_of=as_of)


def get_current_discount(reseller, tld, *, as_of: datetime | None = None) -> ResellerDiscount:
    """Return the discount in force for a reseller on a TLD.

    Raises:
        DiscountNotFoundError: If the reseller has no current discount.
    """
    check_time = as_of or timezone.now()
    discount = ResellerDiscount.objects.filter(reseller=reseller, tld=tld).current_at(check_time)
    if discount is None:
        raise DiscountNotFoundError(
            f"No discount for reseller {reseller} on {tld}",
            context={"reseller_id": getattr(reseller, "pk", reseller), "tld_id": getattr(tld, "pk", tld)},
        )
    return discount


def find_current_discount(reseller, tld, *, as_of: datetime | None = None) -> ResellerDiscount | None:
    """Like get_current_discount, but returns None when absent."""
    try:
        return get_current_discount(reseller, tld, as_of=as_of)
    except DiscountNotFoundError:
        logger.debug("No current discount for reseller %s on %s", reseller, tld)
        return None


def list_reseller_discounts(reseller, *, include_archived: bool = False):
    """All discounts for a reseller across TLDs, newest first."""
    return (
        ResellerDiscount.objects.filter(reseller=reseller)
        .history(include_archived=include_archived)
        .select_related('tld')
    )


def get_active_offerings(tld):
    """Active registrar offerings of a TLD whose registrar is also active."""
    return (
        RegistrarTld.objects.filter(tld=tld, is_active=True, registrar__is_active=True)
        .select_related('registrar', 'tld')
        .order_by('pk')
    )
