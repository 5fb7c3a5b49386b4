"""
End-of-year averages, repeater detection and promotion.

All averages here use the report-card mark average (CA + exam) / 2.
"""
import logging
from collections import defaultdict

from django.db import transaction
from django.utils import timezone

from core.choices import PromotionStatus
from students.models import Enrollment

from .grading import is_pass, percentage, round_half_up, subject_average, weighted_average
from .models import Mark

logger = logging.getLogger(__name__)


def _marks_by_student(academic_year, student_ids):
    """Marks of the year grouped by student id, with course and term loaded."""
    grouped = defaultdict(list)
    marks = Mark.objects.filter(
        academic_year=academic_year,
        student_id__in=student_ids,
    ).select_related('course', 'term')
    for mark in marks:
        grouped[mark.student_id].append(mark)
    return grouped


def pooled_average(marks):
    """Coefficient-weighted average of every mark of the year taken together."""
    return weighted_average(
        (subject_average(mark.ca_score, mark.exam_score), mark.course.coefficient)
        for mark in marks
    )[0]


def annual_average_by_subject(marks):
    """
    Annual average from per-subject means.

    Each course's averages across the terms are averaged first, then the
    course means are weighted by coefficient.

    Returns:
        tuple: (annual average, list of per-term dicts, number of subjects)
    """
    terms = {}
    subjects = {}
    for mark in marks:
        average = subject_average(mark.ca_score, mark.exam_score)
        coefficient = mark.course.coefficient

        term = terms.setdefault(mark.term_id, {
            'term_id': mark.term_id,
            'term_label': mark.term.label,
            'pairs': [],
            'subjects': [],
        })
        term['pairs'].append((average, coefficient))
        term['subjects'].append({
            'course_name': mark.course.name,
            'ca_score': mark.ca,
            'exam_score': mark.exam,
            'average': round_half_up(average, 2),
            'coefficient': coefficient,
        })

        subject = subjects.setdefault(mark.course_id, {'coefficient': coefficient, 'averages': []})
        subject['averages'].append(average)

    term_results = [
        {
            'term_id': term['term_id'],
            'term_label': term['term_label'],
            'average': round_half_up(weighted_average(term['pairs'])[0], 2),
            'subjects': term['subjects'],
        }
        for term in terms.values()
    ]
    term_results.sort(key=lambda t: t['term_label'])

    annual = weighted_average(
        (sum(s['averages']) / len(s['averages']), s['coefficient'])
        for s in subjects.values()
    )[0]
    return annual, term_results, len(subjects)


def calculate_annual_averages(academic_year, student_id=None, level_id=None):
    """
    Annual average and promotion eligibility of each student enrolled in a year.

    A student is eligible for promotion with a passing annual average when
    a next level exists.
    """
    enrollments = Enrollment.objects.filter(
        academic_year=academic_year
    ).select_related('student', 'level')
    if student_id:
        enrollments = enrollments.filter(student_id=student_id)
    if level_id:
        enrollments = enrollments.filter(level_id=level_id)
    enrollments = list(enrollments)

    marks = _marks_by_student(academic_year, [e.student_id for e in enrollments])

    results = []
    for enrollment in enrollments:
        annual, term_results, total_subjects = annual_average_by_subject(marks[enrollment.student_id])
        next_level = enrollment.level.get_next_level()
        eligible = is_pass(annual) and next_level is not None
        results.append({
            'student_id': enrollment.student_id,
            'student_name': enrollment.student.name,
            'matricule': enrollment.student.matricule,
            'current_level': enrollment.level.name,
            'annual_average': round_half_up(annual, 2),
            'is_eligible_for_promotion': eligible,
            'next_level': next_level.name if eligible else enrollment.level.name,
            'term_averages': term_results,
            'total_subjects': total_subjects,
        })

    eligible_count = sum(1 for r in results if r['is_eligible_for_promotion'])
    class_average = sum(r['annual_average'] for r in results) / len(results) if results else 0
    return {
        'success': True,
        'timestamp': timezone.now().isoformat(),
        'academic_year_id': academic_year.pk,
        'summary': {
            'total_students': len(results),
            'eligible_for_promotion': eligible_count,
            'promotion_rate': int(percentage(eligible_count, len(results), digits=0)),
            'class_average': round_half_up(class_average, 2),
        },
        'students': results,
    }


def check_repeaters(academic_year=None, level_id=None):
    """
    Recompute the repeater flag of enrollments.

    An enrollment is a repeat when the student has another enrollment at the
    same level in a different academic year. Wrong flags are corrected.
    """
    enrollments = Enrollment.objects.select_related('student', 'level', 'academic_year')
    if academic_year:
        enrollments = enrollments.filter(academic_year=academic_year)
    if level_id:
        enrollments = enrollments.filter(level_id=level_id)
    enrollments = list(enrollments)

    previous_years = defaultdict(list)
    history = Enrollment.objects.filter(
        student_id__in={e.student_id for e in enrollments}
    ).select_related('academic_year').order_by('-academic_year__start_date')
    for row in history:
        previous_years[(row.student_id, row.level_id)].append(row)

    analysis = []
    to_update = []
    for enrollment in enrollments:
        earlier = [
            row.academic_year.label
            for row in previous_years[(enrollment.student_id, enrollment.level_id)]
            if row.academic_year_id != enrollment.academic_year_id
        ]
        is_repeater = bool(earlier)
        status_updated = enrollment.is_repeater != is_repeater
        if status_updated:
            enrollment.is_repeater = is_repeater
            to_update.append(enrollment)

        year_marks = Mark.objects.filter(
            student_id=enrollment.student_id,
            academic_year_id=enrollment.academic_year_id,
        ).select_related('course')

        analysis.append({
            'student_id': enrollment.student_id,
            'student_name': enrollment.student.name,
            'matricule': enrollment.student.matricule,
            'current_level': enrollment.level.name,
            'current_academic_year': enrollment.academic_year.label,
            'is_repeater': is_repeater,
            'repeat_count': len(earlier),
            'previous_years_in_same_level': earlier,
            'annual_average': round_half_up(pooled_average(year_marks), 2),
            'status_updated': status_updated,
        })

    if to_update:
        Enrollment.objects.bulk_update(to_update, ['is_repeater'])
        logger.info(f"Corrected repeater flag on {len(to_update)} enrollment(s)")

    total_repeaters = sum(1 for a in analysis if a['is_repeater'])
    return {
        'success': True,
        'timestamp': timezone.now().isoformat(),
        'summary': {
            'total_students': len(analysis),
            'total_repeaters': total_repeaters,
            'repeater_percentage': int(percentage(total_repeaters, len(analysis), digits=0)),
            'status_updates_made': len(to_update),
        },
        'students': analysis,
    }


def promote_students(academic_year, next_academic_year):
    """
    Decide promotion for every enrollment of a year and enroll the students
    in the next year.

    Passing students move to the next level; the others repeat their level.
    Passing students at the final level are marked promoted and get no
    next-year enrollment. Next-year enrollments start as pending.
    """
    if academic_year.pk == next_academic_year.pk:
        raise ValueError('The next academic year must differ from the current one')

    enrollments = list(
        Enrollment.objects.filter(academic_year=academic_year).select_related('student', 'level')
    )
    student_ids = [e.student_id for e in enrollments]
    marks = _marks_by_student(academic_year, student_ids)
    earlier_levels = set(
        Enrollment.objects.filter(student_id__in=student_ids)
        .exclude(academic_year=academic_year)
        .values_list('student_id', 'level_id')
    )
    existing_next = {
        e.student_id: e
        for e in Enrollment.objects.filter(academic_year=next_academic_year, student_id__in=student_ids)
    }

    results = []
    to_update = []
    to_create = []
    next_to_update = []

    for enrollment in enrollments:
        annual = pooled_average(marks[enrollment.student_id])
        next_level = enrollment.level.get_next_level()
        passed = is_pass(annual)

        status = PromotionStatus.PROMOTED if passed else PromotionStatus.REPEATED
        target_level = next_level if passed else enrollment.level

        enrollment.promoted = passed
        enrollment.promotion_status = status
        enrollment.is_repeater = (enrollment.student_id, enrollment.level_id) in earlier_levels
        to_update.append(enrollment)

        if target_level is not None:
            next_enrollment = existing_next.get(enrollment.student_id)
            if next_enrollment is None:
                next_enrollment = Enrollment(student_id=enrollment.student_id, academic_year=next_academic_year)
                to_create.append(next_enrollment)
            else:
                next_to_update.append(next_enrollment)
            next_enrollment.level = target_level
            next_enrollment.promoted = False
            next_enrollment.promotion_status = PromotionStatus.PENDING
            next_enrollment.is_repeater = status == PromotionStatus.REPEATED
            next_enrollment.previous_level = enrollment.level

        results.append({
            'student_id': enrollment.student_id,
            'student_name': enrollment.student.name,
            'matricule': enrollment.student.matricule,
            'current_level': enrollment.level.name,
            'next_level': target_level.name if target_level else None,
            'annual_average': round_half_up(annual, 2),
            'promotion_status': status.value,
            'is_repeater': enrollment.is_repeater,
        })

    with transaction.atomic():
        Enrollment.objects.bulk_update(to_update, ['promoted', 'promotion_status', 'is_repeater'])
        Enrollment.objects.bulk_update(
            next_to_update, ['level', 'promoted', 'promotion_status', 'is_repeater', 'previous_level']
        )
        Enrollment.objects.bulk_create(to_create)

    logger.info(
        f"Promotion {academic_year} -> {next_academic_year}: "
        f"{sum(1 for r in results if r['promotion_status'] == PromotionStatus.PROMOTED)} promoted, "
        f"{sum(1 for r in results if r['promotion_status'] == PromotionStatus.REPEATED)} repeated"
    )
    return {
        'success': True,
        'message': f'Processed {len(results)} students',
        'results': results,
    }
