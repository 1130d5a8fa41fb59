"""Archival of closed pricing intervals past their retention horizon.

Archiving flips is_active to False; nothing is deleted. Open intervals
are never touched. Re-running a sweep archives nothing further.
"""

import logging
from datetime import datetime

from .clock import system_clock
from .conf import get_policy
from .models import IntervalFamily, model_for_family

logger = logging.getLogger(__name__)


def years_before(moment: datetime, years: int) -> datetime:
    """Same calendar instant `years` earlier; Feb 29 maps to Feb 28."""
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


class ArchivalSweeper:
    """Deactivates intervals whose window ended before the retention cutoff."""

    def __init__(self, *, clock=None, policy=None):
        self.clock = clock or system_clock
        self.policy = policy or get_policy()

    def cutoff(self, retention_years: int) -> datetime:
        return years_before(self.clock(), retention_years)

    def pending(self, family, retention_years: int):
        """Intervals that archive_older_than would archive."""
        model = model_for_family(family)
        return model.objects.closed_before(self.cutoff(retention_years))

    def archive_older_than(self, family, retention_years: int) -> int:
        """
        Archive one family's intervals that closed before now - retention_years.

        Returns:
            Number of intervals archived
        """
        family = IntervalFamily(family)
        if retention_years < 0:
            raise ValueError(f"retention_years must not be negative, got {retention_years}")
        count = self.pending(family, retention_years).update(is_active=False)
        logger.info(f"Archived {count} {family.label.lower()} intervals older than {retention_years} years")
        return count

    def archive_all(self) -> dict:
        """Archive every family with its configured retention."""
        return {
            family: self.archive_older_than(family, self.policy.retention_years(family))
            for family in IntervalFamily
        }
