import logging
from io import BytesIO

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.template.loader import render_to_string
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from django_ratelimit.decorators import ratelimit

from core.models import AcademicYear, Term
from students.models import Student

from .. import config
from ..exports import (
    XLSX_CONTENT_TYPE, build_report_card_workbook,
    build_summary_statistics_workbook, workbook_response_bytes,
)
from ..forms import ReportCardRequestForm, StatisticsRequestForm
from ..report_cards import generate_report_cards
from ..statistics import compute_statistics
from .base import lecturer_or_admin_required, not_found, validate_request

logger = logging.getLogger(__name__)


def _report_cards_rate(group, request):
    return config.REPORT_CARDS_RATE_LIMIT


def _statistics_rate(group, request):
    return config.STATISTICS_RATE_LIMIT


def _workbook_response(workbook, filename):
    response = HttpResponse(workbook_response_bytes(workbook), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _report_card_context(cards, summary, academic_year, term):
    return {
        'cards': cards,
        'summary': summary,
        'academic_year': academic_year,
        'term': term,
        'institution_name': config.INSTITUTION_NAME,
        'pass_mark': config.PASS_MARK,
        'generated_date': timezone.now(),
    }


def render_report_cards_pdf(context):
    """
    Render the printable report cards template to PDF bytes.

    Raises:
        ImportError: if WeasyPrint is not installed
    """
    try:
        from weasyprint import HTML
    except ImportError:
        logger.error("WeasyPrint not installed")
        raise

    html_string = render_to_string('gradebook/report_cards_print.html', context)
    html = HTML(string=html_string, base_url=str(settings.BASE_DIR))
    pdf_buffer = BytesIO()
    html.write_pdf(pdf_buffer)
    return pdf_buffer.getvalue()


# ============ Report Cards ============

@csrf_exempt
@require_POST
@lecturer_or_admin_required
@ratelimit(key='user', rate=_report_cards_rate, block=True)
def generate_report_cards_view(request):
    """
    Report cards for a term (JSON, printable HTML, PDF or Excel).

    Body: termId, academicYearId, optional studentId, departmentId, levelId
    and format.
    """
    params, error = validate_request(request, ReportCardRequestForm)
    if error:
        return error

    try:
        term = Term.objects.get(pk=params['term_id'])
        academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        cards, summary = generate_report_cards(
            term,
            academic_year,
            student_id=params['student_id'],
            department_id=params['department_id'],
            level_id=params['level_id'],
        )
    except Term.DoesNotExist:
        return not_found('Term not found')
    except AcademicYear.DoesNotExist:
        return not_found('Academic year not found')
    except Student.DoesNotExist:
        return not_found('Student not found or not enrolled in this academic year')
    except Exception as e:
        logger.exception("Error generating report cards")
        return JsonResponse({
            'success': False,
            'error': str(e),
            'details': 'Failed to generate report cards',
        }, status=500)

    output_format = params['format']
    filename_stem = f"report_cards_{academic_year.label}_{term.label}".replace('/', '-')

    if output_format == 'excel':
        return _workbook_response(build_report_card_workbook(cards), f'{filename_stem}.xlsx')

    if output_format in ('html', 'pdf'):
        context = _report_card_context(cards, summary, academic_year, term)
        if output_format == 'html':
            return HttpResponse(render_to_string('gradebook/report_cards_print.html', context, request))
        try:
            pdf = render_report_cards_pdf(context)
        except ImportError:
            return JsonResponse({
                'success': False,
                'error': 'PDF generation is not available. WeasyPrint is not installed.',
            }, status=501)
        except (ValueError, OSError) as e:
            logger.exception("Failed to render report cards PDF")
            return JsonResponse({
                'success': False,
                'error': str(e),
                'details': 'Failed to generate report cards',
            }, status=500)
        response = HttpResponse(pdf, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{filename_stem}.pdf"'
        return response

    return JsonResponse({
        'success': True,
        'format': output_format,
        'data': cards,
        'summary': summary,
    })


# ============ Statistics ============

@csrf_exempt
@require_POST
@lecturer_or_admin_required
@ratelimit(key='user', rate=_statistics_rate, block=True)
def get_statistics_view(request):
    """
    Performance statistics for a year and term label ('annual' for the
    whole year).

    Body: academicYearId, termLabel, optional departmentId, levelId, classId
    and format ('json' or 'excel').
    """
    params, error = validate_request(request, StatisticsRequestForm)
    if error:
        return error

    try:
        academic_year = AcademicYear.objects.get(pk=params['academic_year_id'])
        data, counts = compute_statistics(
            academic_year,
            params['term_label'],
            department_id=params['department_id'],
            level_id=params['level_id'],
            class_id=params['class_id'],
        )
    except AcademicYear.DoesNotExist:
        return not_found('Academic year not found')
    except Term.DoesNotExist:
        return not_found(f"Term not found: {params['term_label']}")
    except Exception as e:
        logger.exception("Statistics error")
        return JsonResponse({'error': 'Internal server error', 'details': str(e)}, status=500)

    if params['format'] == 'excel':
        workbook = build_summary_statistics_workbook(data['summaryDocument'])
        filename = f"summary_statistics_{academic_year.label}_{params['term_label']}".replace('/', '-')
        return _workbook_response(workbook, f'{filename}.xlsx')

    return JsonResponse({
        'success': True,
        'data': data,
        'metadata': {
            'academicYear': academic_year.label,
            'term': params['term_label'],
            'filters': {
                'departmentId': params['department_id'],
                'levelId': params['level_id'],
                'classId': params['class_id'],
            },
            'totalStudents': counts['totalStudents'],
            'totalMarks': counts['totalMarks'],
            'generatedAt': timezone.now().isoformat(),
        },
    })
