"""Tests for archival of expired pricing intervals."""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from freezegun import freeze_time

from django_tld_pricing.archival import years_before
from django_tld_pricing.models import IntervalFamily, SalesPricing


class TestYearsBefore:

    def test_same_calendar_instant(self):
        moment = datetime(2025, 6, 15, 12, tzinfo=dt_timezone.utc)

        assert years_before(moment, 7) == datetime(2018, 6, 15, 12, tzinfo=dt_timezone.utc)

    def test_leap_day(self):
        moment = datetime(2024, 2, 29, tzinfo=dt_timezone.utc)

        assert years_before(moment, 1) == datetime(2023, 2, 28, tzinfo=dt_timezone.utc)


@pytest.mark.django_db
class TestArchiveOlderThan:
    """Test suite for ArchivalSweeper.archive_older_than."""

    def test_archives_only_closed_before_cutoff(self, engine, make_tld, make_sales, now):
        tld = make_tld('io')
        ancient = make_sales(tld, effective_from=now - timedelta(days=3650), effective_to=now - timedelta(days=3000))
        recent = make_sales(tld, effective_from=now - timedelta(days=3000), effective_to=now - timedelta(days=30))
        current = make_sales(tld, effective_from=now - timedelta(days=30))

        archived = engine.archive_older_than(IntervalFamily.SALES, 7)

        assert archived == 1
        ancient.refresh_from_db()
        recent.refresh_from_db()
        current.refresh_from_db()
        assert ancient.is_active is False
        assert recent.is_active is True
        assert current.is_active is True

    def test_never_archives_open_intervals(self, engine, make_tld, make_sales, now):
        make_sales(make_tld('io'), effective_from=now - timedelta(days=5000))

        assert engine.archive_older_than(IntervalFamily.SALES, 1) == 0

    def test_idempotent(self, engine, make_tld, make_sales, now):
        tld = make_tld('io')
        make_sales(tld, effective_from=now - timedelta(days=3650), effective_to=now - timedelta(days=3000))

        assert engine.archive_older_than(IntervalFamily.SALES, 7) == 1
        assert engine.archive_older_than(IntervalFamily.SALES, 7) == 0

    def test_archived_records_kept(self, engine, make_tld, make_sales, now):
        tld = make_tld('io')
        make_sales(tld, effective_from=now - timedelta(days=3650), effective_to=now - timedelta(days=3000))

        engine.archive_older_than(IntervalFamily.SALES, 7)

        assert SalesPricing.objects.filter(tld=tld).count() == 1
        assert engine.sales.list_history(tld=tld).count() == 0
        assert engine.sales.list_history(tld=tld, include_archived=True).count() == 1

    def test_families_independent(self, engine, make_tld, make_sales, make_discount, reseller, now):
        tld = make_tld('io')
        make_sales(tld, effective_from=now - timedelta(days=3650), effective_to=now - timedelta(days=3000))
        make_discount(
            reseller, tld,
            effective_from=now - timedelta(days=3650),
            effective_to=now - timedelta(days=3000),
            discount_percentage=Decimal('10'),
        )

        assert engine.archive_older_than(IntervalFamily.DISCOUNT, 7) == 1
        assert SalesPricing.objects.active().count() == 1

    def test_archive_all_uses_configured_retention(self, engine, make_tld, make_sales, make_discount, reseller, now):
        """Default retention: sales 7 years, discounts 3 years."""
        tld = make_tld('io')
        five_years_ago = now - timedelta(days=5 * 365)
        make_sales(tld, effective_from=five_years_ago - timedelta(days=30), effective_to=five_years_ago)
        make_discount(
            reseller, tld,
            effective_from=five_years_ago - timedelta(days=30),
            effective_to=five_years_ago,
            discount_percentage=Decimal('10'),
        )

        result = engine.sweeper.archive_all()

        assert result == {IntervalFamily.COST: 0, IntervalFamily.SALES: 0, IntervalFamily.DISCOUNT: 1}

    def test_negative_retention_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.archive_older_than(IntervalFamily.COST, -1)


FROZEN_AT = "2025-06-15 12:00:00"


@pytest.mark.django_db
class TestArchiveCommand:
    """Test suite for the archive_tld_pricing management command."""

    @pytest.fixture
    def expired(self, make_tld, make_sales):
        moment = datetime(2015, 1, 1, tzinfo=dt_timezone.utc)
        return make_sales(make_tld('io'), effective_from=moment, effective_to=moment + timedelta(days=30))

    def test_archives_expired(self, expired):
        out = StringIO()
        with freeze_time(FROZEN_AT):
            call_command('archive_tld_pricing', stdout=out)

        expired.refresh_from_db()
        assert expired.is_active is False
        assert 'Archived 1 pricing intervals' in out.getvalue()

    def test_dry_run_does_not_archive(self, expired):
        out = StringIO()
        with freeze_time(FROZEN_AT):
            call_command('archive_tld_pricing', '--dry-run', stdout=out)

        expired.refresh_from_db()
        assert expired.is_active is True
        assert 'Would archive 1 sales pricing intervals' in out.getvalue()

    def test_family_and_years_options(self, expired):
        out = StringIO()
        with freeze_time(FROZEN_AT):
            call_command('archive_tld_pricing', '--family=discount', stdout=out)

        expired.refresh_from_db()
        assert expired.is_active is True

        with freeze_time(FROZEN_AT):
            call_command('archive_tld_pricing', '--family=sales', '--years=20', stdout=out)
        expired.refresh_from_db()
        assert expired.is_active is True

        with freeze_time(FROZEN_AT):
            call_command('archive_tld_pricing', '--family=sales', '--years=5', stdout=out)
        expired.refresh_from_db()
        assert expired.is_active is False
