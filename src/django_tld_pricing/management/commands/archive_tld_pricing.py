"""Management command to archive expired pricing intervals."""

from django.core.management.base import BaseCommand, CommandError

from django_tld_pricing.archival import ArchivalSweeper
from django_tld_pricing.models import IntervalFamily


class Command(BaseCommand):
    help = 'Archive cost, sales and discount intervals that closed before their retention horizon'

    def add_arguments(self, parser):
        parser.add_argument(
            '--family',
            choices=IntervalFamily.values,
            action='append',
            help='Interval family to sweep (repeatable; default: all)'
        )
        parser.add_argument(
            '--years',
            type=int,
            default=None,
            help='Override the configured retention horizon in years'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show counts of intervals that would be archived without changing them'
        )

    def handle(self, *args, **options):
        families = options['family'] or IntervalFamily.values
        years_override = options['years']
        dry_run = options['dry_run']
        if years_override is not None and years_override < 0:
            raise CommandError('--years must not be negative')

        sweeper = ArchivalSweeper()
        total = 0
        for value in families:
            family = IntervalFamily(value)
            years = years_override if years_override is not None else sweeper.policy.retention_years(family)
            if dry_run:
                count = sweeper.pending(family, years).count()
                self.stdout.write(f'Would archive {count} {family.label.lower()} intervals (older than {years} years)')
            else:
                count = sweeper.archive_older_than(family, years)
                self.stdout.write(f'  - {family.label}: {count}')
            total += count

        if not dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Archived {total} pricing intervals')
            )
