# Generated manually for standalone django-tld-pricing package

from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


def interval_fields():
    return [
        ("effective_from", models.DateTimeField(db_index=True)),
        ("effective_to", models.DateTimeField(blank=True, help_text="Exclusive end. NULL means open-ended.", null=True)),
        ("is_active", models.BooleanField(default=True, help_text="False once archived")),
        ("currency", models.CharField(default="USD", max_length=3)),
        ("notes", models.TextField(blank=True)),
        ("created_by", models.CharField(blank=True, max_length=150)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


def amount(**kwargs):
    return models.DecimalField(decimal_places=4, max_digits=18, **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Registrar",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("code", models.CharField(max_length=50, unique=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Tld",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("extension", models.CharField(max_length=63, unique=True)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"ordering": ["extension"], "verbose_name": "TLD"},
        ),
        migrations.CreateModel(
            name="ResellerCompany",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"ordering": ["name"], "verbose_name_plural": "reseller companies"},
        ),
        migrations.CreateModel(
            name="ExchangeRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("base_currency", models.CharField(max_length=3)),
                ("target_currency", models.CharField(max_length=3)),
                ("rate", models.DecimalField(decimal_places=8, max_digits=18)),
                ("effective_date", models.DateTimeField()),
                ("expiry_date", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["base_currency", "target_currency", "-effective_date"],
                "indexes": [
                    models.Index(
                        fields=["base_currency", "target_currency", "effective_date"],
                        name="exchange_rate_pair_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(rate__gt=0), name="exchange_rate_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RegistrarTld",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True)),
                ("registrar", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="tld_offerings",
                    to="django_tld_pricing.registrar",
                )),
                ("tld", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="registrar_offerings",
                    to="django_tld_pricing.tld",
                )),
            ],
            options={
                "ordering": ["tld__extension", "registrar__name"],
                "verbose_name": "registrar TLD",
                "constraints": [
                    models.UniqueConstraint(fields=("registrar", "tld"), name="registrar_tld_unique"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CostPricing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *interval_fields(),
                ("registration_cost", amount()),
                ("renewal_cost", amount()),
                ("transfer_cost", amount()),
                ("privacy_cost", amount(blank=True, null=True)),
                ("first_year_registration_cost", amount(blank=True, null=True)),
                ("registrar_tld", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="cost_pricings",
                    to="django_tld_pricing.registrartld",
                )),
            ],
            options={
                "ordering": ["-effective_from"],
                "abstract": False,
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(effective_to__isnull=True)
                        | models.Q(effective_to__gt=models.F("effective_from")),
                        name="cost_pricing_window_valid",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(effective_to__isnull=True, is_active=True),
                        fields=("registrar_tld",),
                        name="cost_pricing_one_open_interval",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(registration_cost__gte=0, renewal_cost__gte=0, transfer_cost__gte=0),
                        name="cost_pricing_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalesPricing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *interval_fields(),
                ("registration_price", amount()),
                ("renewal_price", amount()),
                ("transfer_price", amount()),
                ("privacy_price", amount(blank=True, null=True)),
                ("first_year_registration_price", amount(blank=True, null=True)),
                ("is_promotional", models.BooleanField(default=False)),
                ("promotion_name", models.CharField(blank=True, max_length=200)),
                ("tld", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="sales_pricings",
                    to="django_tld_pricing.tld",
                )),
            ],
            options={
                "ordering": ["-effective_from"],
                "abstract": False,
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(effective_to__isnull=True)
                        | models.Q(effective_to__gt=models.F("effective_from")),
                        name="sales_pricing_window_valid",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(effective_to__isnull=True, is_active=True),
                        fields=("tld",),
                        name="sales_pricing_one_open_interval",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(registration_price__gte=0, renewal_price__gte=0, transfer_price__gte=0),
                        name="sales_pricing_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ResellerDiscount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *interval_fields(),
                ("discount_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("discount_amount", amount(blank=True, null=True)),
                ("discount_currency", models.CharField(blank=True, max_length=3)),
                ("apply_to_registration", models.BooleanField(default=True)),
                ("apply_to_renewal", models.BooleanField(default=True)),
                ("apply_to_transfer", models.BooleanField(default=False)),
                ("reseller", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="discounts",
                    to="django_tld_pricing.resellercompany",
                )),
                ("tld", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="reseller_discounts",
                    to="django_tld_pricing.tld",
                )),
            ],
            options={
                "ordering": ["-effective_from"],
                "abstract": False,
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(effective_to__isnull=True)
                        | models.Q(effective_to__gt=models.F("effective_from")),
                        name="reseller_discount_window_valid",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(effective_to__isnull=True, is_active=True),
                        fields=("reseller", "tld"),
                        name="reseller_discount_one_open_interval",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(discount_percentage__isnull=False, discount_amount__isnull=True)
                        | models.Q(discount_percentage__isnull=True, discount_amount__isnull=False),
                        name="reseller_discount_exactly_one_kind",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RegistrarSelectionPreference",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("priority", models.PositiveIntegerField(default=100, help_text="Lower value wins ties")),
                ("offers_hosting", models.BooleanField(default=False)),
                ("offers_email", models.BooleanField(default=False)),
                ("offers_ssl", models.BooleanField(default=False)),
                ("max_cost_difference_threshold", models.DecimalField(decimal_places=2, default=Decimal("2.00"), max_digits=10)),
                ("prefer_for_hosting_customers", models.BooleanField(default=False)),
                ("prefer_for_email_customers", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("registrar", models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="selection_preference",
                    to="django_tld_pricing.registrar",
                )),
            ],
            options={"ordering": ["priority", "registrar__name"]},
        ),
        migrations.CreateModel(
            name="CostPriceChangeLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("old_registration_cost", amount(blank=True, null=True)),
                ("new_registration_cost", amount()),
                ("old_renewal_cost", amount(blank=True, null=True)),
                ("new_renewal_cost", amount()),
                ("old_transfer_cost", amount(blank=True, null=True)),
                ("new_transfer_cost", amount()),
                ("currency", models.CharField(max_length=3)),
                ("source", models.CharField(
                    choices=[("manual", "Manual"), ("import", "Import")],
                    default="manual",
                    max_length=20,
                )),
                ("changed_by", models.CharField(blank=True, max_length=150)),
                ("notes", models.TextField(blank=True)),
                ("changed_at", models.DateTimeField(auto_now_add=True)),
                ("cost_pricing", models.ForeignKey(
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="change_log",
                    to="django_tld_pricing.costpricing",
                )),
                ("registrar_tld", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="cost_changes",
                    to="django_tld_pricing.registrartld",
                )),
            ],
            options={"ordering": ["-changed_at", "-pk"]},
        ),
    ]
