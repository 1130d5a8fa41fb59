"""Tests for the pricing calculator."""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from django_tld_pricing.clock import FixedClock
from django_tld_pricing.conf import PricingPolicy
from django_tld_pricing.engine import TldPricingEngine
from django_tld_pricing.exceptions import ConversionUnavailableError, PricingNotConfiguredError
from django_tld_pricing.models import CostPricing, ExchangeRate, OperationType, ResellerDiscount, SalesPricing
from django_tld_pricing.money import Money
from django_tld_pricing.operations import OPERATION_FIELDS, fields_for


@pytest.mark.django_db
class TestCalculatePrice:
    """Test suite for PricingCalculator.calculate_price."""

    def test_io_two_year_registration_with_reseller_discount(self, make_tld, make_sales, make_discount, reseller):
        """.io at 40.00 for two years with a 15% discount costs 68.00."""
        start = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
        engine = TldPricingEngine(clock=FixedClock(datetime(2024, 3, 1, tzinfo=dt_timezone.utc)), policy=PricingPolicy())
        io = make_tld('io')
        make_sales(io, '40.00', effective_from=start)
        make_discount(reseller, io, effective_from=start, discount_percentage=Decimal('15'), apply_to_registration=True)

        quote = engine.calculate_price(io, OperationType.REGISTRATION, years=2, is_first_year=True, reseller=reseller)

        assert quote.base_price == Money(Decimal('80.00'), 'USD')
        assert quote.discount_amount == Money(Decimal('12.00'), 'USD')
        assert quote.final_price == Money(Decimal('68.00'), 'USD')
        assert quote.currency == 'USD'
        assert quote.is_discount_applied is True
        assert quote.discount_description == '15% discount'

    def test_no_sales_pricing_raises(self, engine, make_tld):
        with pytest.raises(PricingNotConfiguredError):
            engine.calculate_price(make_tld('io'), OperationType.REGISTRATION)

    def test_operation_selects_price_field(self, engine, make_tld, make_sales):
        tld = make_tld('io')
        make_sales(tld, '10.00', renewal_price=Decimal('12.00'), transfer_price=Decimal('8.00'))

        assert engine.calculate_price(tld, OperationType.RENEWAL).final_price.amount == Decimal('12.00')
        assert engine.calculate_price(tld, OperationType.TRANSFER).final_price.amount == Decimal('8.00')

    def test_first_year_override_only_for_registration(self, engine, make_tld, make_sales):
        tld = make_tld('io')
        make_sales(tld, '30.00', first_year_registration_price=Decimal('5.00'))

        first = engine.calculate_price(tld, OperationType.REGISTRATION, is_first_year=True)
        later = engine.calculate_price(tld, OperationType.REGISTRATION, is_first_year=False)
        renewal = engine.calculate_price(tld, OperationType.RENEWAL, is_first_year=True)

        assert first.final_price.amount == Decimal('5.00')
        assert later.final_price.amount == Decimal('30.00')
        assert renewal.final_price.amount == Decimal('30.00')

    def test_privacy_without_price_is_not_configured(self, engine, make_tld, make_sales):
        tld = make_tld('io')
        make_sales(tld, '30.00')

        with pytest.raises(PricingNotConfiguredError):
            engine.calculate_price(tld, OperationType.PRIVACY)

    def test_years_must_be_positive(self, engine, make_tld, make_sales):
        tld = make_tld('io')
        make_sales(tld)

        with pytest.raises(ValueError):
            engine.calculate_price(tld, OperationType.REGISTRATION, years=0)

    @pytest.mark.parametrize('percentage', ['0.01', '33.33', '50', '99.99', '100'])
    def test_percentage_discount_bounded(self, engine, make_tld, make_sales, make_discount, reseller, percentage):
        """A valid percentage discount keeps the final price between zero and base."""
        tld = make_tld('io')
        make_sales(tld, '19.99')
        make_discount(reseller, tld, discount_percentage=Decimal(percentage))

        quote = engine.calculate_price(tld, OperationType.REGISTRATION, years=3, reseller=reseller)

        assert Decimal('0') <= quote.final_price.amount <= quote.base_price.amount
        assert quote.final_price == quote.base_price - quote.discount_amount

    def test_fixed_discount_per_year(self, engine, make_tld, make_sales, make_discount, reseller):
        tld = make_tld('io')
        make_sales(tld, '20.00')
        make_discount(reseller, tld, discount_amount=Decimal('3.00'), discount_currency='USD')

        quote = engine.calculate_price(tld, OperationType.REGISTRATION, years=2, reseller=reseller)

        assert quote.discount_amount.amount == Decimal('6.00')
        assert quote.final_price.amount == Decimal('34.00')
        assert quote.discount_description == '3.00 USD discount per year'

    def test_oversized_fixed_discount_clamped_to_zero(self, engine, make_tld, make_sales, make_discount, reseller):
        tld = make_tld('io')
        make_sales(tld, '5.00')
        make_discount(reseller, tld, discount_amount=Decimal('8.00'), discount_currency='USD')

        quote = engine.calculate_price(tld, OperationType.REGISTRATION, reseller=reseller)

        assert quote.final_price.is_zero()
        assert quote.discount_amount == quote.base_price

    def test_fixed_discount_in_other_currency_converted(self, engine, make_tld, make_sales, make_discount, reseller, now):
        tld = make_tld('io')
        make_sales(tld, '20.00')
        make_discount(reseller, tld, discount_amount=Decimal('2.00'), discount_currency='EUR')
        ExchangeRate.objects.create(
            base_currency='EUR', target_currency='USD', rate=Decimal('1.50'), effective_date=now - timedelta(days=1),
        )

        quote = engine.calculate_price(tld, OperationType.REGISTRATION, reseller=reseller)

        assert quote.discount_amount == Money(Decimal('3.00'), 'USD')

    def test_fixed_discount_without_rate_raises(self, engine, make_tld, make_sales, make_discount, reseller):
        tld = make_tld('io')
        make_sales(tld, '20.00')
        make_discount(reseller, tld, discount_amount=Decimal('2.00'), discount_currency='EUR')

        with pytest.raises(ConversionUnavailableError):
            engine.calculate_price(tld, OperationType.REGISTRATION, reseller=reseller)

    def test_discount_respects_operation_flags(self, engine, make_tld, make_sales, make_discount, reseller):
        """Transfers are not discounted by default."""
        tld = make_tld('io')
        make_sales(tld, '10.00')
        make_discount(reseller, tld, discount_percentage=Decimal('50'))

        quote = engine.calculate_price(tld, OperationType.TRANSFER, reseller=reseller)

        assert quote.is_discount_applied is False
        assert quote.final_price.amount == Decimal('10.00')

    def test_no_discount_without_reseller(self, engine, make_tld, make_sales, make_discount, reseller):
        tld = make_tld('io')
        make_sales(tld, '10.00')
        make_discount(reseller, tld, discount_percentage=Decimal('50'))

        assert engine.calculate_price(tld, OperationType.REGISTRATION).is_discount_applied is False

    def test_expired_discount_ignored(self, engine, make_tld, make_sales, make_discount, reseller, now):
        tld = make_tld('io')
        make_sales(tld, '10.00')
        make_discount(reseller, tld, discount_percentage=Decimal('50'), effective_to=now - timedelta(days=1))

        assert engine.calculate_price(tld, OperationType.REGISTRATION, reseller=reseller).is_discount_applied is False

    def test_promotion_blocks_discount_by_default(self, engine, make_tld, make_sales, make_discount, reseller):
        tld = make_tld('io')
        make_sales(tld, '10.00', is_promotional=True, promotion_name='Launch')
        make_discount(reseller, tld, discount_percentage=Decimal('50'))

        quote = engine.calculate_price(tld, OperationType.REGISTRATION, reseller=reseller)

        assert quote.is_promotional is True
        assert quote.promotion_name == 'Launch'
        assert quote.is_discount_applied is False
        assert quote.final_price.amount == Decimal('10.00')

    def test_promotion_stacks_when_allowed(self, db, clock, make_tld, make_sales, make_discount, reseller):
        engine = TldPricingEngine(clock=clock, policy=PricingPolicy(allow_discount_stacking=True))
        tld = make_tld('io')
        make_sales(tld, '10.00', is_promotional=True)
        make_discount(reseller, tld, discount_percentage=Decimal('50'))

        quote = engine.calculate_price(tld, OperationType.REGISTRATION, reseller=reseller)

        assert quote.is_discount_applied is True
        assert quote.final_price.amount == Decimal('5.00')

    def test_reports_cheapest_registrar(self, engine, make_tld, make_sales, make_offering):
        tld = make_tld('io')
        make_sales(tld, '40.00')
        make_offering(tld, registration_cost='30.00')
        cheap = make_offering(tld, registration_cost='25.00')

        quote = engine.calculate_price(tld, OperationType.REGISTRATION)

        assert quote.registrar_id == cheap.registrar_id
        assert quote.registrar_name == cheap.registrar.name

    def test_price_returned_without_registrar(self, engine, make_tld, make_sales):
        """No registrar offering is not fatal for pricing."""
        tld = make_tld('io')
        make_sales(tld, '40.00')

        quote = engine.calculate_price(tld, OperationType.REGISTRATION)

        assert quote.registrar_id is None
        assert quote.final_price.amount == Decimal('40.00')

    def test_target_currency_conversion(self, engine, make_tld, make_sales, now):
        tld = make_tld('io')
        make_sales(tld, '10.00')
        ExchangeRate.objects.create(
            base_currency='USD', target_currency='SEK', rate=Decimal('10.5'), effective_date=now - timedelta(days=1),
        )

        quote = engine.calculate_price(tld, OperationType.REGISTRATION, target_currency='SEK')

        assert quote.final_price.currency == 'USD'
        assert quote.converted_price == Money(Decimal('105.00'), 'SEK')
        assert '105.00 SEK' in quote.explain()

    def test_price_follows_clock(self, engine, clock, make_tld, make_sales, now):
        """A scheduled price applies once the clock reaches it."""
        tld = make_tld('io')
        make_sales(tld, '10.00', effective_to=now + timedelta(days=1))
        make_sales(tld, '12.00', effective_from=now + timedelta(days=1))

        assert engine.calculate_price(tld, OperationType.RENEWAL).final_price.amount == Decimal('10.00')
        clock.advance(timedelta(days=1))
        assert engine.calculate_price(tld, OperationType.RENEWAL).final_price.amount == Decimal('12.00')


class TestOperationFields:
    """The operation mapping table covers every operation."""

    def test_every_operation_mapped(self):
        assert set(OPERATION_FIELDS) == set(OperationType)

    def test_mapped_fields_exist_on_models(self):
        sales_fields = {f.name for f in SalesPricing._meta.get_fields()}
        cost_fields = {f.name for f in CostPricing._meta.get_fields()}
        discount_fields = {f.name for f in ResellerDiscount._meta.get_fields()}

        for operation in OperationType:
            mapping = fields_for(operation)
            assert mapping.price_field in sales_fields
            assert mapping.cost_field in cost_fields
            if mapping.first_year_price_field:
                assert mapping.first_year_price_field in sales_fields
                assert mapping.first_year_cost_field in cost_fields
            if mapping.discount_flag:
                assert mapping.discount_flag in discount_fields
