import logging
import re

from django.db import transaction
from django.utils import timezone

from .models import AcademicYear, Term

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def camel_to_snake(name):
    """Convert a camelCase key ('academicYearId') to snake_case ('academic_year_id')."""
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def normalize_payload(payload):
    """Return a copy of a JSON object with snake_case keys."""
    return {camel_to_snake(key): value for key, value in payload.items()}


def _sync_periods(model, today):
    was_active = set(model.objects.filter(is_active=True).values_list('pk', flat=True))
    model.objects.filter(is_active=True).update(is_active=False)

    current = model.objects.filter(start_date__lte=today, end_date__gte=today)
    activated = list(current.values('id', 'label'))
    current.update(is_active=True)

    # Report periods that ended, whether or not they were active before this run
    deactivated = list(
        model.objects.filter(is_active=False, end_date__lt=today).values('id', 'label')
    )
    newly_active = [row for row in activated if row['id'] not in was_active]
    if newly_active:
        logger.info(f"Activated {model._meta.verbose_name_plural}: {[row['label'] for row in newly_active]}")
    return activated, deactivated


def update_active_periods(today=None):
    """
    Activate the academic year and term whose date range contains today.

    Every period is deactivated first so that at most the periods covering
    today remain active.

    Returns:
        dict with success, timestamp, changes and summary
    """
    today = today or timezone.localdate()

    with transaction.atomic():
        years_activated, years_deactivated = _sync_periods(AcademicYear, today)
        terms_activated, terms_deactivated = _sync_periods(Term, today)

    return {
        'success': True,
        'timestamp': timezone.now().isoformat(),
        'changes': {
            'academic_years': {
                'activated': years_activated,
                'deactivated': years_deactivated,
            },
            'terms': {
                'activated': terms_activated,
                'deactivated': terms_deactivated,
            },
        },
        'summary': {
            'academic_years_activated': len(years_activated),
            'academic_years_deactivated': len(years_deactivated),
            'terms_activated': len(terms_activated),
            'terms_deactivated': len(terms_deactivated),
        },
    }
