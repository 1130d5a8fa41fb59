"""Models for TLD pricing.

Reference records (Registrar, Tld, RegistrarTld, ResellerCompany,
ExchangeRate) describe who sells what. Pricing itself lives in three
effective-dated interval families:

- CostPricing: what a registrar charges us for a TLD (key: registrar_tld)
- SalesPricing: what we charge customers for a TLD (key: tld)
- ResellerDiscount: per-reseller reduction on sales prices (key: reseller, tld)

## Interval semantics

Every interval covers [effective_from, effective_to). A NULL effective_to
means open-ended. At most one open, active interval may exist per key;
a partial unique constraint enforces this at the database so two
concurrent creators cannot both succeed.

Records are never edited once effective_from has passed (see schedule.py)
and are archived by flipping is_active, never deleted (see archival.py).
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from django_tld_pricing.money import Money
from django_tld_pricing.querysets import EffectiveIntervalQuerySet


AMOUNT_FIELD_OPTIONS = {'max_digits': 18, 'decimal_places': 4}


class OperationType(models.TextChoices):
    """Domain operations that carry a price."""
    REGISTRATION = 'registration', 'Registration'
    RENEWAL = 'renewal', 'Renewal'
    TRANSFER = 'transfer', 'Transfer'
    PRIVACY = 'privacy', 'Privacy'


class IntervalFamily(models.TextChoices):
    """Effective-dated record families."""
    COST = 'cost', 'Cost pricing'
    SALES = 'sales', 'Sales pricing'
    DISCOUNT = 'discount', 'Reseller discount'


# =============================================================================
# REFERENCE RECORDS
# =============================================================================

class Registrar(models.Model):
    """Upstream registrar we buy domains from."""

    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, unique=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Tld(models.Model):
    """Top-level domain, stored without the leading dot."""

    extension = models.CharField(max_length=63, unique=True)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['extension']
        verbose_name = 'TLD'

    def __str__(self):
        return f".{self.extension}"

    def save(self, *args, **kwargs):
        self.extension = self.extension.lstrip('.').lower()
        super().save(*args, **kwargs)


class RegistrarTld(models.Model):
    """A registrar's offering of a TLD."""

    registrar = models.ForeignKey(Registrar, on_delete=models.PROTECT, related_name='tld_offerings')
    tld = models.ForeignKey(Tld, on_delete=models.PROTECT, related_name='registrar_offerings')
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['tld__extension', 'registrar__name']
        verbose_name = 'registrar TLD'
        constraints = [
            models.UniqueConstraint(
                fields=['registrar', 'tld'],
                name='registrar_tld_unique',
            ),
        ]

    def __str__(self):
        return f"{self.registrar} / {self.tld}"


class ResellerCompany(models.Model):
    """Reseller that may receive discounted sales prices."""

    name = models.CharField(max_length=200)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'reseller companies'

    def __str__(self):
        return self.name


class ExchangeRate(models.Model):
    """Pre-loaded exchange rate, valid from effective_date until expiry_date."""

    base_currency = models.CharField(max_length=3)
    target_currency = models.CharField(max_length=3)
    rate = models.DecimalField(max_digits=18, decimal_places=8)
    effective_date = models.DateTimeField()
    expiry_date = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['base_currency', 'target_currency', '-effective_date']
        indexes = [
            models.Index(fields=['base_currency', 'target_currency', 'effective_date'], name='exchange_rate_pair_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(rate__gt=0),
                name='exchange_rate_positive',
            ),
        ]

    def __str__(self):
        return f"{self.base_currency}/{self.target_currency} {self.rate}"


# =============================================================================
# INTERVAL FAMILIES
# =============================================================================

class EffectiveInterval(models.Model):
    """Abstract base for effective-dated pricing records."""

    # Key fields per family; used by services and constraints
    key_fields = ()
    family = None

    effective_from = models.DateTimeField(db_index=True)
    effective_to = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Exclusive end. NULL means open-ended.",
    )
    is_active = models.BooleanField(default=True, help_text="False once archived")
    superseded_by = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        editable=False,
        on_delete=models.SET_NULL,
        related_name='+',
        help_text="Open interval that closed this one; reopened if that interval is withdrawn",
    )
    currency = models.CharField(max_length=3, default='USD')
    notes = models.TextField(blank=True)
    created_by = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EffectiveIntervalQuerySet.as_manager()

    class Meta:
        abstract = True
        ordering = ['-effective_from']

    def clean(self):
        super().clean()
        if self.effective_to is not None and self.effective_from is not None:
            if self.effective_to <= self.effective_from:
                raise ValidationError({'effective_to': 'effective_to must be after effective_from'})
        self.currency = (self.currency or '').upper()

    @property
    def is_open(self) -> bool:
        return self.effective_to is None

    def key(self) -> dict:
        """Return the family key as filter kwargs."""
        return {field: getattr(self, field) for field in self.key_fields}

    def contains(self, instant) -> bool:
        """True if the instant falls inside [effective_from, effective_to)."""
        if instant < self.effective_from:
            return False
        return self.effective_to is None or instant < self.effective_to

    def money(self, field: str):
        """Return a price field as Money, or None if unset."""
        value = getattr(self, field)
        if value is None:
            return None
        return Money(value, self.currency)


def _window_constraint(prefix):
    return models.CheckConstraint(
        condition=Q(effective_to__isnull=True) | Q(effective_to__gt=models.F('effective_from')),
        name=f'{prefix}_window_valid',
    )


def _one_open_constraint(prefix, fields):
    return models.UniqueConstraint(
        fields=list(fields),
        condition=Q(effective_to__isnull=True, is_active=True),
        name=f'{prefix}_one_open_interval',
    )


class CostPricing(EffectiveInterval):
    """What a registrar charges for each operation on a TLD."""

    key_fields = ('registrar_tld',)
    family = IntervalFamily.COST

    registrar_tld = models.ForeignKey(RegistrarTld, on_delete=models.PROTECT, related_name='cost_pricings')
    registration_cost = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    renewal_cost = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    transfer_cost = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    privacy_cost = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)
    first_year_registration_cost = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)

    class Meta(EffectiveInterval.Meta):
        constraints = [
            _window_constraint('cost_pricing'),
            _one_open_constraint('cost_pricing', ['registrar_tld']),
            models.CheckConstraint(
                condition=Q(registration_cost__gte=0, renewal_cost__gte=0, transfer_cost__gte=0),
                name='cost_pricing_non_negative',
            ),
        ]

    def __str__(self):
        return f"Cost {self.registrar_tld} from {self.effective_from:%Y-%m-%d}"


class SalesPricing(EffectiveInterval):
    """What customers pay for each operation on a TLD."""

    key_fields = ('tld',)
    family = IntervalFamily.SALES

    tld = models.ForeignKey(Tld, on_delete=models.PROTECT, related_name='sales_pricings')
    registration_price = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    renewal_price = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    transfer_price = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    privacy_price = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)
    first_year_registration_price = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)
    is_promotional = models.BooleanField(default=False)
    promotion_name = models.CharField(max_length=200, blank=True)

    class Meta(EffectiveInterval.Meta):
        constraints = [
            _window_constraint('sales_pricing'),
            _one_open_constraint('sales_pricing', ['tld']),
            models.CheckConstraint(
                condition=Q(registration_price__gte=0, renewal_price__gte=0, transfer_price__gte=0),
                name='sales_pricing_non_negative',
            ),
        ]

    def __str__(self):
        return f"Sales {self.tld} from {self.effective_from:%Y-%m-%d}"


class ResellerDiscount(EffectiveInterval):
    """
    Reseller-specific discount on a TLD's sales prices.

    Exactly one of discount_percentage or discount_amount is set; use the
    `terms` property for the typed view.
    """

    key_fields = ('reseller', 'tld')
    family = IntervalFamily.DISCOUNT

    reseller = models.ForeignKey(ResellerCompany, on_delete=models.PROTECT, related_name='discounts')
    tld = models.ForeignKey(Tld, on_delete=models.PROTECT, related_name='reseller_discounts')
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    discount_amount = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)
    discount_currency = models.CharField(max_length=3, blank=True)
    apply_to_registration = models.BooleanField(default=True)
    apply_to_renewal = models.BooleanField(default=True)
    apply_to_transfer = models.BooleanField(default=False)

    class Meta(EffectiveInterval.Meta):
        constraints = [
            _window_constraint('reseller_discount'),
            _one_open_constraint('reseller_discount', ['reseller', 'tld']),
            models.CheckConstraint(
                condition=(
                    Q(discount_percentage__isnull=False, discount_amount__isnull=True)
                    | Q(discount_percentage__isnull=True, discount_amount__isnull=False)
                ),
                name='reseller_discount_exactly_one_kind',
            ),
        ]

    def __str__(self):
        return f"Discount {self.reseller} {self.tld}: {self.terms.describe()}"

    def clean(self):
        super().clean()
        from django_tld_pricing.value_objects import discount_terms_from_fields

        # Raises InvalidDiscountError for both/neither/out-of-range
        discount_terms_from_fields(
            self.discount_percentage, self.discount_amount, self.discount_currency or self.currency,
        )

    @property
    def terms(self):
        """Typed discount: PercentageDiscount or FixedAmountDiscount."""
        from django_tld_pricing.value_objects import discount_terms_from_fields

        return discount_terms_from_fields(
            self.discount_percentage, self.discount_amount, self.discount_currency or self.currency,
        )

    def applies_to(self, operation) -> bool:
        from django_tld_pricing.operations import fields_for

        flag = fields_for(operation).discount_flag
        return bool(flag and getattr(self, flag))


class RegistrarSelectionPreference(models.Model):
    """Ranking hints for a registrar when costs tie."""

    registrar = models.OneToOneField(Registrar, on_delete=models.CASCADE, related_name='selection_preference')
    priority = models.PositiveIntegerField(default=100, help_text="Lower value wins ties")
    offers_hosting = models.BooleanField(default=False)
    offers_email = models.BooleanField(default=False)
    offers_ssl = models.BooleanField(default=False)
    max_cost_difference_threshold = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('2.00'))
    prefer_for_hosting_customers = models.BooleanField(default=False)
    prefer_for_email_customers = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['priority', 'registrar__name']

    def __str__(self):
        return f"{self.registrar} (priority {self.priority})"


class CostPriceChangeLog(models.Model):
    """Append-only trail of cost pricing writes."""

    class Source(models.TextChoices):
        MANUAL = 'manual', 'Manual'
        IMPORT = 'import', 'Import'

    registrar_tld = models.ForeignKey(RegistrarTld, on_delete=models.PROTECT, related_name='cost_changes')
    cost_pricing = models.ForeignKey(CostPricing, on_delete=models.SET_NULL, null=True, related_name='change_log')
    old_registration_cost = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)
    new_registration_cost = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    old_renewal_cost = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)
    new_renewal_cost = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    old_transfer_cost = models.DecimalField(null=True, blank=True, **AMOUNT_FIELD_OPTIONS)
    new_transfer_cost = models.DecimalField(**AMOUNT_FIELD_OPTIONS)
    currency = models.CharField(max_length=3)
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.MANUAL)
    changed_by = models.CharField(max_length=150, blank=True)
    notes = models.TextField(blank=True)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-changed_at', '-pk']

    def __str__(self):
        return f"{self.registrar_tld} cost change at {self.changed_at}"


FAMILY_MODELS = {
    IntervalFamily.COST: CostPricing,
    IntervalFamily.SALES: SalesPricing,
    IntervalFamily.DISCOUNT: ResellerDiscount,
}


def model_for_family(family):
    """Return the interval model class for a family."""
    return FAMILY_MODELS[IntervalFamily(family)]
