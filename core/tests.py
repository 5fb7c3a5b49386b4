from datetime import date
from io import StringIO
from unittest.mock import patch

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from django.http import HttpResponse
from django.test import RequestFactory, TestCase, override_settings

from core.choices import TermLabel
from core.middleware import CorsMiddleware
from core.models import AcademicYear, Term
from core.tasks import update_active_periods_task
from core.utils import camel_to_snake, normalize_payload, update_active_periods


class AcademicYearModelTests(TestCase):
    """Tests for AcademicYear model."""

    def setUp(self):
        self.year = AcademicYear.objects.create(
            label='2024/2025',
            start_date=date(2024, 9, 1),
            end_date=date(2025, 7, 31),
        )

    def test_create_academic_year(self):
        self.assertEqual(str(self.year), '2024/2025')
        self.assertFalse(self.year.is_active)

    def test_end_date_must_be_after_start_date(self):
        year = AcademicYear(label='2030/2031', start_date=date(2031, 7, 1), end_date=date(2030, 9, 1))
        with self.assertRaises(ValidationError):
            year.full_clean()

    def test_only_one_active(self):
        """Saving an active year deactivates the others."""
        self.year.is_active = True
        self.year.save()
        other = AcademicYear.objects.create(
            label='2025/2026',
            start_date=date(2025, 9, 1),
            end_date=date(2026, 7, 31),
            is_active=True,
        )
        self.year.refresh_from_db()
        self.assertFalse(self.year.is_active)
        self.assertEqual(AcademicYear.objects.filter(is_active=True).first(), other)


class TermModelTests(TestCase):
    """Tests for Term model."""

    def test_str_and_third_term(self):
        first = Term.objects.create(label=TermLabel.FIRST, start_date=date(2024, 9, 1), end_date=date(2024, 12, 15))
        third = Term.objects.create(label=TermLabel.THIRD, start_date=date(2025, 4, 10), end_date=date(2025, 7, 31))
        self.assertEqual(str(first), 'First Term')
        self.assertFalse(first.is_third)
        self.assertTrue(third.is_third)

    def test_active_terms_are_independent_of_years(self):
        """Activating a term does not touch academic years."""
        year = AcademicYear.objects.create(
            label='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31), is_active=True
        )
        Term.objects.create(
            label=TermLabel.FIRST, start_date=date(2024, 9, 1), end_date=date(2024, 12, 15), is_active=True
        )
        year.refresh_from_db()
        self.assertTrue(year.is_active)


class UpdateActivePeriodsTests(TestCase):
    """Tests for the active period sync."""

    def setUp(self):
        self.old_year = AcademicYear.objects.create(
            label='2023/2024', start_date=date(2023, 9, 1), end_date=date(2024, 7, 31), is_active=True
        )
        self.year = AcademicYear.objects.create(
            label='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31)
        )
        self.first = Term.objects.create(
            label=TermLabel.FIRST, start_date=date(2024, 9, 1), end_date=date(2024, 12, 15)
        )
        self.second = Term.objects.create(
            label=TermLabel.SECOND, start_date=date(2025, 1, 5), end_date=date(2025, 3, 30), is_active=True
        )

    def test_activates_periods_covering_today(self):
        result = update_active_periods(date(2024, 10, 1))

        self.assertTrue(result['success'])
        self.assertEqual(AcademicYear.objects.filter(is_active=True).first(), self.year)
        self.assertEqual(Term.objects.filter(is_active=True).first(), self.first)
        self.old_year.refresh_from_db()
        self.assertFalse(self.old_year.is_active)

        self.assertEqual(result['changes']['academic_years']['activated'], [{'id': self.year.pk, 'label': '2024/2025'}])
        self.assertEqual(result['summary'], {
            'academic_years_activated': 1,
            'academic_years_deactivated': 1,
            'terms_activated': 1,
            'terms_deactivated': 0,
        })

    def test_between_terms_leaves_no_active_term(self):
        """A date in a holiday deactivates every term."""
        result = update_active_periods(date(2024, 12, 25))
        self.assertIsNone(Term.objects.filter(is_active=True).first())
        self.assertEqual(AcademicYear.objects.filter(is_active=True).first(), self.year)
        self.assertEqual(result['summary']['terms_deactivated'], 1)

    def test_management_command(self):
        out = StringIO()
        call_command('update_active_periods', '--date', '2025-02-01', stdout=out)
        self.assertEqual(Term.objects.filter(is_active=True).first(), self.second)
        self.assertIn('Terms active: Second', out.getvalue())

    def test_management_command_invalid_date(self):
        with self.assertRaises(CommandError):
            call_command('update_active_periods', '--date', '01/02/2025', stdout=StringIO())

    def test_celery_task(self):
        with patch('core.tasks.update_active_periods', wraps=update_active_periods) as sync:
            summary = update_active_periods_task.apply().get()
        sync.assert_called_once_with()
        self.assertIn('terms_activated', summary)


class PayloadUtilsTests(TestCase):
    """Tests for JSON payload key normalization."""

    def test_camel_to_snake(self):
        self.assertEqual(camel_to_snake('academicYearId'), 'academic_year_id')
        self.assertEqual(camel_to_snake('termId'), 'term_id')
        self.assertEqual(camel_to_snake('level_id'), 'level_id')

    def test_normalize_payload(self):
        self.assertEqual(
            normalize_payload({'termLabel': 'First', 'class_id': 3}),
            {'term_label': 'First', 'class_id': 3},
        )


@override_settings(CORS_ALLOW_ORIGIN='https://portal.gtttc.cm')
class CorsMiddlewareTests(TestCase):
    """Tests for the API CORS middleware."""

    def setUp(self):
        self.factory = RequestFactory()
        self.middleware = CorsMiddleware(lambda request: HttpResponse('ok'))

    def test_preflight_short_circuits(self):
        response = self.middleware(self.factory.options('/gradebook/api/get-statistics/'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b'')
        self.assertEqual(response['Access-Control-Allow-Origin'], 'https://portal.gtttc.cm')
        self.assertIn('authorization', response['Access-Control-Allow-Headers'])

    def test_api_response_gets_headers(self):
        response = self.middleware(self.factory.post('/lecturers/api/create-account/'))
        self.assertEqual(response.content, b'ok')
        self.assertEqual(response['Access-Control-Allow-Origin'], 'https://portal.gtttc.cm')

    def test_other_paths_untouched(self):
        response = self.middleware(self.factory.get('/admin/'))
        self.assertNotIn('Access-Control-Allow-Origin', response)
