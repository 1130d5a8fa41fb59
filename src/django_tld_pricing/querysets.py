"""QuerySet helpers for effective-dated pricing intervals."""
from django.db import models
from django.db.models import Q


class EffectiveIntervalQuerySet(models.QuerySet):
    """
    QuerySet for records with a half-open validity window.

    Query pattern: effective_from <= ts AND (effective_to IS NULL OR effective_to > ts)

    Callers filter by the family's key first, then narrow by time:
        CostPricing.objects.filter(registrar_tld=rt).current_at(now)
    """

    def active(self):
        """Exclude archived records."""
        return self.filter(is_active=True)

    def open(self):
        """Intervals with no scheduled end."""
        return self.filter(effective_to__isnull=True)

    def as_of(self, timestamp):
        """
        Return active intervals whose window contains the timestamp.

        Args:
            timestamp: The instant to query as of

        Returns:
            QuerySet ordered so the governing interval comes first
        """
        return self.active().filter(
            effective_from__lte=timestamp
        ).filter(
            Q(effective_to__isnull=True) | Q(effective_to__gt=timestamp)
        ).order_by('-effective_from', '-created_at', '-pk')

    def current_at(self, timestamp):
        """
        Return the single interval in force at the timestamp, or None.

        The greatest effective_from wins; equal starts resolve to the most
        recently created record.
        """
        return self.as_of(timestamp).first()

    def history(self, include_archived=False):
        """All intervals, newest effective_from first."""
        qs = self if include_archived else self.active()
        return qs.order_by('-effective_from', '-created_at')

    def future(self, timestamp):
        """Active intervals starting after the timestamp, soonest first."""
        return self.active().filter(effective_from__gt=timestamp).order_by('effective_from')

    def overlapping(self, start, end):
        """
        Active intervals whose window intersects [start, end).

        An end of None means open-ended.
        """
        qs = self.active().filter(Q(effective_to__isnull=True) | Q(effective_to__gt=start))
        if end is not None:
            qs = qs.filter(effective_from__lt=end)
        return qs

    def closed_before(self, cutoff):
        """Active intervals whose window ended before the cutoff."""
        return self.active().filter(effective_to__isnull=False, effective_to__lt=cutoff)
