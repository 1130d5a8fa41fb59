"""Pytest configuration for django-tld-pricing tests."""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from django_tld_pricing.clock import FixedClock
from django_tld_pricing.conf import PricingPolicy
from django_tld_pricing.engine import TldPricingEngine
from django_tld_pricing.models import (
    CostPricing,
    Registrar,
    RegistrarTld,
    ResellerCompany,
    ResellerDiscount,
    SalesPricing,
    Tld,
)

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=dt_timezone.utc)
LAST_YEAR = NOW - timedelta(days=365)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """Clock pinned to 2025-06-15 12:00 UTC."""
    return FixedClock(NOW)


@pytest.fixture
def policy():
    return PricingPolicy()


@pytest.fixture
def engine(db, clock, policy):
    return TldPricingEngine(clock=clock, policy=policy)


@pytest.fixture
def make_tld(db):
    def _make(extension='com', **kwargs):
        return Tld.objects.create(extension=extension, **kwargs)
    return _make


@pytest.fixture
def make_registrar(db):
    def _make(name='Registrar', code=None, **kwargs):
        return Registrar.objects.create(name=name, code=code or name.lower().replace(' ', '-'), **kwargs)
    return _make


@pytest.fixture
def make_offering(make_registrar):
    """Registrar offering of a TLD, optionally with a cost interval in force since LAST_YEAR."""
    def _make(tld, registrar=None, registration_cost=None, currency='USD', **kwargs):
        registrar = registrar or make_registrar(f'Registrar {RegistrarTld.objects.count() + 1}')
        offering = RegistrarTld.objects.create(registrar=registrar, tld=tld, **kwargs)
        if registration_cost is not None:
            CostPricing.objects.create(
                registrar_tld=offering,
                effective_from=LAST_YEAR,
                registration_cost=Decimal(registration_cost),
                renewal_cost=Decimal(registration_cost),
                transfer_cost=Decimal(registration_cost),
                currency=currency,
            )
        return offering
    return _make


@pytest.fixture
def make_sales(db):
    """Insert a sales interval directly, bypassing the schedule guard."""
    def _make(tld, price='10.00', effective_from=LAST_YEAR, effective_to=None, **kwargs):
        fields = {
            'registration_price': Decimal(price),
            'renewal_price': Decimal(price),
            'transfer_price': Decimal(price),
        }
        fields.update(kwargs)
        return SalesPricing.objects.create(
            tld=tld, effective_from=effective_from, effective_to=effective_to, **fields,
        )
    return _make


@pytest.fixture
def make_discount(db):
    """Insert a discount interval directly, bypassing the schedule guard."""
    def _make(reseller, tld, effective_from=LAST_YEAR, **kwargs):
        return ResellerDiscount.objects.create(
            reseller=reseller, tld=tld, effective_from=effective_from, **kwargs,
        )
    return _make


@pytest.fixture
def reseller(db):
    return ResellerCompany.objects.create(name='Acme Hosting')
