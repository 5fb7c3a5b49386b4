import logging

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from gradebook.views.base import admin_required, bad_request, validate_request

from .forms import LecturerAccountRequestForm
from .services import create_lecturer_account

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
@admin_required
def create_account(request):
    """Create a lecturer login account with its profile (Admin only)."""
    params, error = validate_request(request, LecturerAccountRequestForm)
    if error:
        return error

    try:
        lecturer = create_lecturer_account(
            params['full_name'],
            params['email'],
            params['password'],
            phone=params['phone'],
        )
    except ValidationError as e:
        return bad_request(' '.join(e.messages))
    except Exception as e:
        logger.exception("Error creating lecturer account")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    return JsonResponse({
        'success': True,
        'user': {
            'id': lecturer.user_id,
            'email': lecturer.user.email,
            'role': lecturer.user.role_label,
        },
        'lecturer': {
            'id': str(lecturer.pk),
            'full_name': lecturer.full_name,
        },
    }, status=201)
