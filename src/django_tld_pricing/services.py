"""Write services for pricing intervals and registrar preferences.

Every interval write runs in a short transaction:

1. The future-schedule guard checks effective_from (and, for edits and
   deletes, that the record has not yet taken effect).
2. Creating an open interval closes the key's current open interval at
   exactly the new effective_from.
3. Finite intervals may not overlap other finite intervals for the key.
4. The database allows one open active interval per key; a concurrent
   writer that loses the race gets ConflictRaceError and may retry.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from .clock import system_clock
from .conf import get_policy
from .exceptions import (
    ConflictRaceError,
    IntervalNotFoundError,
    OverlappingIntervalError,
    PolicyViolationError,
    PreferenceNotFoundError,
)
from .models import (
    CostPriceChangeLog,
    IntervalFamily,
    RegistrarSelectionPreference,
    model_for_family,
)
from .schedule import FutureScheduleGuard
from .selectors import get_current_cost_pricing, get_current_discount, get_current_sales_pricing

logger = logging.getLogger(__name__)

COST_LOG_FIELDS = ('registration_cost', 'renewal_cost', 'transfer_cost')


class IntervalService:
    """CRUD over one interval family.

    Usage:
        sales = IntervalService(IntervalFamily.SALES)
        sales.create(tld=tld, effective_from=start, registration_price=Decimal("12.00"), ...)
        sales.get_current(tld=tld)
    """

    def __init__(self, family, *, clock=None, policy=None, guard=None):
        self.family = IntervalFamily(family)
        self.model = model_for_family(self.family)
        self.clock = clock or system_clock
        self.policy = policy or get_policy()
        self.guard = guard or FutureScheduleGuard(clock=self.clock, policy=self.policy)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _key(self, key: dict) -> dict:
        expected = set(self.model.key_fields)
        if set(key) != expected:
            raise TypeError(
                f"{self.model.__name__} is keyed by {sorted(expected)}, got {sorted(key)}"
            )
        return key

    def list_history(self, *, include_archived: bool = False, **key):
        """All intervals for the key, newest effective_from first."""
        return self.model.objects.filter(**self._key(key)).history(include_archived=include_archived)

    def get_current(self, *, as_of=None, **key):
        """The interval in force at as_of (default: now); raises NotFoundError."""
        key = self._key(key)
        check_time = as_of or self.clock()
        if self.family == IntervalFamily.SALES:
            return get_current_sales_pricing(key['tld'], as_of=check_time)
        if self.family == IntervalFamily.COST:
            return get_current_cost_pricing(key['registrar_tld'], as_of=check_time)
        return get_current_discount(key['reseller'], key['tld'], as_of=check_time)

    def list_future(self, **key):
        """Scheduled intervals not yet in force, soonest first."""
        return self.model.objects.filter(**self._key(key)).future(self.clock())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, *, created_by: str = '', **fields):
        """Schedule a new interval, closing the key's open interval if needed."""
        instance = self.model(created_by=created_by, **self._prepare(fields))
        self._validate(instance)
        self.guard.ensure_schedulable(instance.effective_from)

        try:
            with transaction.atomic():
                closed = self._close_open_intervals(instance) if instance.is_open else []
                self._check_overlaps(instance)
                instance.save()
                for previous in closed:
                    previous.superseded_by = instance
                    previous.save(update_fields=["superseded_by"])
                self._record_change(instance, previous=None, actor=created_by)
        except IntegrityError as exc:
            raise self._conflict(instance, exc) from exc

        logger.info(
            f"Created {self.model.__name__} #{instance.pk} for {instance.key()} "
            f"from {instance.effective_from.isoformat()}"
        )
        return instance

    def update(self, pk, *, modified_by: str = '', **changes):
        """Edit a scheduled interval that has not yet taken effect."""
        changes = self._prepare(changes)
        immutable = set(changes) & set(self.model.key_fields)
        if immutable:
            raise PolicyViolationError(f"Key fields cannot change: {sorted(immutable)}")

        try:
            with transaction.atomic():
                instance = self._get_for_update(pk)
                self.guard.ensure_editable(instance)
                previous = self._snapshot(instance)
                predecessor = self._predecessor(instance)

                for field, value in changes.items():
                    setattr(instance, field, value)
                self._validate(instance)
                self.guard.ensure_schedulable(instance.effective_from)
                if predecessor is not None and instance.is_open:
                    self._close_at(predecessor, instance.effective_from)
                self._check_overlaps(instance)
                instance.save()
                if predecessor is not None and not instance.is_open:
                    self._reopen(predecessor)
                self._record_change(instance, previous=previous, actor=modified_by)
        except IntegrityError as exc:
            raise self._conflict(instance, exc) from exc

        logger.info(f"Updated {self.model.__name__} #{instance.pk}")
        return instance

    def delete(self, pk) -> None:
        """Remove a scheduled interval that has not yet taken effect."""
        with transaction.atomic():
            instance = self._get_for_update(pk)
            self.guard.ensure_deletable(instance)
            predecessor = self._predecessor(instance)
            instance.delete()
            if predecessor is not None:
                self._reopen(predecessor)
        logger.info(f"Deleted scheduled {self.model.__name__} #{pk}")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _prepare(self, fields: dict) -> dict:
        fields = dict(fields)
        terms = fields.pop('terms', None)
        if terms is not None:
            if self.family != IntervalFamily.DISCOUNT:
                raise TypeError("terms only apply to reseller discounts")
            fields.update(terms.as_fields())
        if fields.get('currency'):
            fields['currency'] = fields['currency'].upper()
        return fields

    def _validate(self, instance) -> None:
        try:
            instance.full_clean(validate_unique=False, validate_constraints=False)
        except ValidationError as exc:
            raise PolicyViolationError(f"Invalid {self.model.__name__}: {exc.messages}") from exc

    def _get_for_update(self, pk):
        try:
            return self.model.objects.select_for_update().get(pk=pk)
        except self.model.DoesNotExist:
            raise IntervalNotFoundError(
                f"{self.model.__name__} #{pk} does not exist",
                context={"family": self.family.value, "pk": pk},
            ) from None

    def _close_open_intervals(self, instance) -> list:
        open_intervals = (
            self.model.objects.select_for_update()
            .filter(**instance.key())
            .active()
            .open()
            .exclude(pk=instance.pk)
        )
        closed = []
        for previous in open_intervals:
            self._close_at(previous, instance.effective_from)
            closed.append(previous)
        return closed

    def _predecessor(self, instance):
        """
        The interval this one closed when it was created, or None.

        Only open intervals close a predecessor; finite ones never do.
        """
        return (
            self.model.objects.select_for_update()
            .active()
            .filter(superseded_by=instance)
            .first()
        )

    def _close_at(self, interval, instant) -> None:
        if interval.effective_from >= instant:
            raise OverlappingIntervalError(
                f"{self.model.__name__} #{interval.pk} starts at "
                f"{interval.effective_from.isoformat()}, not before {instant.isoformat()}"
            )
        interval.effective_to = instant
        interval.save(update_fields=["effective_to", "updated_at"])
        logger.info(f"Closed {self.model.__name__} #{interval.pk} at {instant.isoformat()}")

    def _reopen(self, interval) -> None:
        interval.effective_to = None
        interval.superseded_by = None
        interval.save(update_fields=["effective_to", "superseded_by", "updated_at"])
        logger.info(f"Reopened {self.model.__name__} #{interval.pk}")

    def _check_overlaps(self, instance) -> None:
        others = (
            self.model.objects.filter(**instance.key())
            .exclude(pk=instance.pk)
            .overlapping(instance.effective_from, instance.effective_to)
        )
        # Finite intervals may overlay an open one, but not each other
        if instance.is_open:
            conflicts = others.open()
        else:
            conflicts = others.filter(effective_to__isnull=False)
        conflict = conflicts.first()
        if conflict is not None:
            raise OverlappingIntervalError(
                f"{self.model.__name__} window overlaps #{conflict.pk} "
                f"[{conflict.effective_from.isoformat()}, "
                f"{conflict.effective_to.isoformat() if conflict.effective_to else 'open'})"
            )

    def _snapshot(self, instance) -> dict:
        if self.family != IntervalFamily.COST:
            return {}
        return {field: getattr(instance, field) for field in COST_LOG_FIELDS}

    def _record_change(self, instance, *, previous, actor) -> None:
        if self.family != IntervalFamily.COST:
            return
        previous = previous or {}
        CostPriceChangeLog.objects.create(
            registrar_tld=instance.registrar_tld,
            cost_pricing=instance,
            old_registration_cost=previous.get('registration_cost'),
            new_registration_cost=instance.registration_cost,
            old_renewal_cost=previous.get('renewal_cost'),
            new_renewal_cost=instance.renewal_cost,
            old_transfer_cost=previous.get('transfer_cost'),
            new_transfer_cost=instance.transfer_cost,
            currency=instance.currency,
            source=CostPriceChangeLog.Source.MANUAL,
            changed_by=actor,
            notes=instance.notes,
        )

    def _conflict(self, instance, exc) -> ConflictRaceError:
        logger.warning(f"Concurrent write on {self.model.__name__} {instance.key()}: {exc}")
        return ConflictRaceError(
            f"Another open {self.model.__name__} was written concurrently for {instance.key()}; retry"
        )


class PreferenceService:
    """CRUD for registrar selection preferences."""

    def list_all(self):
        return RegistrarSelectionPreference.objects.select_related('registrar').order_by('priority', 'registrar__name')

    def get_for_registrar(self, registrar) -> RegistrarSelectionPreference:
        preference = RegistrarSelectionPreference.objects.filter(registrar=registrar, is_active=True).first()
        if preference is None:
            raise PreferenceNotFoundError(
                f"No active selection preference for {registrar}",
                context={"registrar_id": getattr(registrar, 'pk', registrar)},
            )
        return preference

    def create(self, registrar, **fields) -> RegistrarSelectionPreference:
        preference = RegistrarSelectionPreference.objects.create(registrar=registrar, **fields)
        logger.info(f"Created selection preference for {registrar} (priority {preference.priority})")
        return preference

    def update(self, pk, **changes) -> RegistrarSelectionPreference:
        preference = self._get(pk)
        for field, value in changes.items():
            setattr(preference, field, value)
        preference.save()
        return preference

    def delete(self, pk) -> None:
        self._get(pk).delete()
        logger.info(f"Deleted selection preference #{pk}")

    def _get(self, pk):
        try:
            return RegistrarSelectionPreference.objects.get(pk=pk)
        except RegistrarSelectionPreference.DoesNotExist:
            raise PreferenceNotFoundError(
                f"Selection preference #{pk} does not exist", context={"pk": pk},
            ) from None
