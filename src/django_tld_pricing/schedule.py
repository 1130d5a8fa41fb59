"""Future-schedule guard.

Pricing changes are scheduled, never retroactive:
- new intervals start now or later (and not beyond the configured horizon)
- an interval can be edited or deleted only while effective_from is still in the future
"""

import logging
from datetime import timedelta

from django_tld_pricing.clock import system_clock
from django_tld_pricing.conf import get_policy
from django_tld_pricing.exceptions import ImmutableIntervalError, ScheduleDateError
from django_tld_pricing.value_objects import ScheduleCheck

logger = logging.getLogger(__name__)


class FutureScheduleGuard:
    """Validates scheduling dates against an injected clock."""

    def __init__(self, clock=None, policy=None):
        self.clock = clock or system_clock
        self.policy = policy or get_policy()

    def validate_schedule_date(self, effective_from) -> ScheduleCheck:
        """
        Check that effective_from is not in the past or beyond the horizon.

        Returns:
            ScheduleCheck(ok, reason)
        """
        now = self.clock()
        if effective_from < now:
            return ScheduleCheck(False, f"effective_from {effective_from.isoformat()} is in the past")
        max_days = self.policy.max_schedule_days
        if max_days is not None and effective_from > now + timedelta(days=max_days):
            return ScheduleCheck(
                False,
                f"effective_from {effective_from.isoformat()} is more than {max_days} days ahead",
            )
        return ScheduleCheck(True)

    def can_edit(self, effective_from) -> bool:
        return effective_from > self.clock()

    def can_delete(self, effective_from) -> bool:
        return effective_from > self.clock()

    def ensure_schedulable(self, effective_from) -> None:
        """Raise ScheduleDateError if effective_from is not schedulable."""
        check = self.validate_schedule_date(effective_from)
        if not check.ok:
            raise ScheduleDateError(check.reason)

    def ensure_editable(self, interval) -> None:
        if not self.can_edit(interval.effective_from):
            logger.warning("Rejected edit of %s #%s: already effective", type(interval).__name__, interval.pk)
            raise ImmutableIntervalError(
                f"{type(interval).__name__} #{interval.pk} took effect at "
                f"{interval.effective_from.isoformat()} and can no longer be edited"
            )

    def ensure_deletable(self, interval) -> None:
        if not self.can_delete(interval.effective_from):
            logger.warning("Rejected delete of %s #%s: already effective", type(interval).__name__, interval.pk)
            raise ImmutableIntervalError(
                f"{type(interval).__name__} #{interval.pk} took effect at "
                f"{interval.effective_from.isoformat()} and can no longer be deleted"
            )
