"""
JSON endpoints for annual averages, promotion and per-student standing.
"""
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from academics.models import Course
from core.models import AcademicYear, Term
from students.models import Student

from ..forms import (
    AnnualAveragesRequestForm, CourseMarksRequestForm, PromotionRequestForm,
    RepeatersRequestForm, StudentPositionRequestForm, StudentTermRequestForm,
)
from ..marks import course_mark_sheet, course_summary, student_average, student_position
from ..promotions import calculate_annual_averages, check_repeaters, promote_students
from .base import admin_required, lecturer_or_admin_required, not_found, validate_request

logger = logging.getLogger(__name__)


def _server_error(e, action):
    logger.exception(f"Error in {action}")
    return JsonResponse({'success': False, 'error': str(e)}, status=500)


# ============ Annual averages and promotion ============

@csrf_exempt
@require_POST
@admin_required
def calculate_annual_averages_view(request):
    params, error = validate_request(request, AnnualAveragesRequestForm)
    if error:
        return error

    try:
        academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        result = calculate_annual_averages(
            academic_year,
            student_id=params['student_id'],
            level_id=params['level_id'],
        )
    except AcademicYear.DoesNotExist:
        return not_found('Academic year not found')
    except Exception as e:
        return _server_error(e, 'calculate-annual-averages')
    return JsonResponse(result)


@csrf_exempt
@require_POST
@admin_required
def check_repeaters_view(request):
    """Recompute repeater flags, for one year or for every year."""
    params, error = validate_request(request, RepeatersRequestForm)
    if error:
        return error

    academic_year = None
    try:
        if params['academic_year_id']:
            academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        result = check_repeaters(academic_year, level_id=params['level_id'])
    except AcademicYear.DoesNotExist:
        return not_found('Academic year not found')
    except Exception as e:
        return _server_error(e, 'check-repeaters')
    return JsonResponse(result)


@csrf_exempt
@require_POST
@admin_required
def promote_students_view(request):
    params, error = validate_request(request, PromotionRequestForm)
    if error:
        return error

    try:
        academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        next_academic_year = AcademicYear.objects.get(pk=params['next_academic_year_id'])
        result = promote_students(academic_year, next_academic_year)
    except AcademicYear.DoesNotExist:
        return not_found('Academic year not found')
    except Exception as e:
        return _server_error(e, 'promote-students')
    return JsonResponse(result)


# ============ Student standing ============

@csrf_exempt
@require_POST
@lecturer_or_admin_required
def get_student_average_view(request):
    params, error = validate_request(request, StudentTermRequestForm)
    if error:
        return error

    try:
        term = Term.objects.get(pk=params['term_id'])
        academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        result = student_average(params['student_id'], term, academic_year)
    except (Term.DoesNotExist, AcademicYear.DoesNotExist):
        return not_found('Term or academic year not found')
    except Exception as e:
        return _server_error(e, 'get-student-average')
    return JsonResponse(result)


@csrf_exempt
@require_POST
@lecturer_or_admin_required
def get_student_position_view(request):
    params, error = validate_request(request, StudentPositionRequestForm)
    if error:
        return error

    try:
        term = Term.objects.get(pk=params['term_id'])
        academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        result = student_position(
            params['student_id'],
            term,
            academic_year,
            department_id=params['department_id'],
            level_id=params['level_id'],
        )
    except (Term.DoesNotExist, AcademicYear.DoesNotExist):
        return not_found('Term or academic year not found')
    except Student.DoesNotExist:
        return not_found('Student not found')
    except Exception as e:
        return _server_error(e, 'get-student-position')
    return JsonResponse(result)


@csrf_exempt
@require_POST
@lecturer_or_admin_required
def get_student_marks_view(request):
    """Mark sheet of a course: its students with their current marks."""
    params, error = validate_request(request, CourseMarksRequestForm)
    if error:
        return error

    try:
        course = Course.objects.get(pk=params['course_id'])
        term = Term.objects.get(pk=params['term_id'])
        academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        students = course_mark_sheet(course, term, academic_year)
    except Course.DoesNotExist:
        return not_found('Course not found')
    except (Term.DoesNotExist, AcademicYear.DoesNotExist):
        return not_found('Term or academic year not found')
    except Exception as e:
        return _server_error(e, 'get-student-marks')

    return JsonResponse({
        'success': True,
        'course': course_summary(course),
        'students': students,
        'totalStudents': len(students),
    })
