import json
import logging
from functools import wraps

from django.http import JsonResponse

logger = logging.getLogger(__name__)


def is_school_admin(user):
    """Check if user is a school admin or superuser."""
    return user.is_superuser or getattr(user, 'is_school_admin', False)


def is_lecturer_or_admin(user):
    """Check if user is a lecturer, school admin, or superuser."""
    return (user.is_superuser or
            getattr(user, 'is_school_admin', False) or
            getattr(user, 'is_lecturer', False))


def api_user_passes_test(test_func):
    """
    JSON counterpart of user_passes_test.

    Anonymous callers get 401 and authenticated callers failing the test get
    403, instead of a redirect to the login page.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return JsonResponse({'error': 'Authentication required'}, status=401)
            if not test_func(request.user):
                logger.warning(f"Permission denied for {request.user} on {request.path}")
                return JsonResponse({'error': 'Permission denied'}, status=403)
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def admin_required(view_func):
    """Decorator to require school admin or superuser."""
    return api_user_passes_test(is_school_admin)(view_func)


def lecturer_or_admin_required(view_func):
    """Decorator to require lecturer, school admin, or superuser."""
    return api_user_passes_test(is_lecturer_or_admin)(view_func)


class InvalidPayload(Exception):
    pass


def parse_json_body(request):
    """
    Decode a JSON object request body. An empty body is an empty object.

    Raises:
        InvalidPayload: if the body is not a JSON object
    """
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidPayload(f'Invalid JSON body: {e}') from e
    if not isinstance(payload, dict):
        raise InvalidPayload('Request body must be a JSON object')
    return payload


def bad_request(message):
    return JsonResponse({'error': message}, status=400)


def not_found(message):
    return JsonResponse({'success': False, 'error': message}, status=404)


def validate_request(request, form_class):
    """
    Parse the body and validate it with an ApiRequestForm.

    Returns:
        tuple: (cleaned_data, None) when valid, (None, 400 response) otherwise
    """
    try:
        payload = parse_json_body(request)
    except InvalidPayload as e:
        return None, bad_request(str(e))

    # Allow ?format=excel on top of the body
    if 'format' in request.GET and 'format' not in payload:
        payload['format'] = request.GET['format']

    form = form_class(payload)
    if not form.is_valid():
        message = form.error_message()
        logger.info(f"Rejected {request.path}: {message}")
        return None, bad_request(message)
    return form.cleaned_data, None


def ratelimited(request, exception):
    """RATELIMIT_VIEW: JSON 429 for callers over their rate limit."""
    logger.warning(f"Rate limit exceeded for {request.user} on {request.path}")
    return JsonResponse({'error': 'Too many requests. Please try again later.'}, status=429)
