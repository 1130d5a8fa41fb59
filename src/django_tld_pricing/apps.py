"""Django TLD Pricing app configuration."""

from django.apps import AppConfig


class DjangoTldPricingConfig(AppConfig):
    """Configuration for django-tld-pricing app."""

    name = "django_tld_pricing"
    verbose_name = "TLD Pricing"
    default_auto_field = "django.db.models.BigAutoField"
