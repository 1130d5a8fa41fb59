"""Registrar selection: cheapest active registrar offering a TLD."""

import logging

from .clock import system_clock
from .conf import get_policy
from .currency import CurrencyConverter
from .exceptions import ConversionUnavailableError, CostPricingNotConfiguredError, RegistrarUnavailableError
from .models import RegistrarSelectionPreference
from .selectors import get_active_offerings, get_current_cost_pricing
from .value_objects import RegistrarSelection

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 100


class RegistrarSelector:
    """
    Picks the registrar with the lowest current registration cost.

    Costs are ranked in the policy's base currency. Equal costs break on
    the registrar's selection preference priority (lower wins), then on
    registrar id. If no offering has a current cost, the first active
    offering is returned with is_fallback=True.
    """

    def __init__(self, *, clock=None, policy=None, converter=None):
        self.clock = clock or system_clock
        self.policy = policy or get_policy()
        self.converter = converter or CurrencyConverter(clock=self.clock, policy=self.policy)

    def select_optimal_registrar(self, tld, customer=None, *, as_of=None) -> RegistrarSelection:
        """
        Choose a registrar for the TLD.

        Args:
            tld: Tld instance
            customer: accepted for segment-aware selection; not used for ranking yet
            as_of: instant for cost lookups (defaults to now)

        Raises:
            RegistrarUnavailableError: If no active registrar offers the TLD.
        """
        check_time = as_of or self.clock()
        offerings = list(get_active_offerings(tld))
        if not offerings:
            raise RegistrarUnavailableError(
                f"No active registrar offers {tld}",
                context={"tld_id": getattr(tld, 'pk', tld)},
            )

        priorities = dict(
            RegistrarSelectionPreference.objects.filter(
                registrar__in=[o.registrar_id for o in offerings], is_active=True,
            ).values_list('registrar_id', 'priority')
        )

        candidates = []
        for offering in offerings:
            try:
                cost = get_current_cost_pricing(offering, as_of=check_time).money('registration_cost')
                ranked = self.converter.convert_money(cost, self.policy.base_currency, check_time)
            except CostPricingNotConfiguredError:
                continue
            except ConversionUnavailableError:
                logger.warning(f"Skipping {offering.registrar} for {tld}: cost not convertible")
                continue
            rank = (ranked.amount, priorities.get(offering.registrar_id, DEFAULT_PRIORITY), offering.registrar_id)
            candidates.append((rank, offering, cost))

        if not candidates:
            fallback = offerings[0]
            logger.warning(f"No current cost for any registrar of {tld}; falling back to {fallback.registrar}")
            return RegistrarSelection(
                registrar_id=fallback.registrar_id,
                registrar_name=fallback.registrar.name,
                registrar_tld_id=fallback.pk,
                is_fallback=True,
            )

        _, best, cost = min(candidates, key=lambda candidate: candidate[0])
        logger.debug(f"Selected {best.registrar} for {tld} at {cost}")
        return RegistrarSelection(
            registrar_id=best.registrar_id,
            registrar_name=best.registrar.name,
            registrar_tld_id=best.pk,
            registration_cost=cost,
        )
