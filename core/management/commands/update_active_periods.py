"""
Management command to activate the academic year and term covering a date.

Usage:
    python manage.py update_active_periods
    python manage.py update_active_periods --date 2025-01-15
"""
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from core.utils import update_active_periods


class Command(BaseCommand):
    help = 'Activate the academic year and term whose date range contains the given date (default: today)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=str,
            help='Date to evaluate in YYYY-MM-DD format',
        )

    def handle(self, *args, **options):
        today = None
        if options.get('date'):
            try:
                today = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']}")

        result = update_active_periods(today)
        summary = result['summary']

        for kind in ('academic_years', 'terms'):
            labels = [row['label'] for row in result['changes'][kind]['activated']]
            self.stdout.write(f"{kind.replace('_', ' ').title()} active: {', '.join(labels) or 'none'}")

        self.stdout.write(self.style.SUCCESS(
            f"Done: {summary['academic_years_activated']} academic year(s), "
            f"{summary['terms_activated']} term(s) active"
        ))
