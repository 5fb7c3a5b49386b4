import re

from django.conf import settings
from django.http import HttpResponse


class CorsMiddleware:
    """
    Open the JSON API to cross-origin callers.

    Requests whose path matches CORS_URLS_REGEX get the CORS headers on every
    response, and OPTIONS preflight requests are answered directly with an
    empty 200 response without reaching the view.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.urls_regex = re.compile(getattr(settings, 'CORS_URLS_REGEX', r'^/.*/api/'))

    @property
    def allow_origin(self):
        return getattr(settings, 'CORS_ALLOW_ORIGIN', '*')

    @property
    def allow_headers(self):
        return getattr(settings, 'CORS_ALLOW_HEADERS', [
            'authorization', 'x-client-info', 'apikey', 'content-type', 'x-csrftoken',
        ])

    def __call__(self, request):
        if not self.urls_regex.match(request.path):
            return self.get_response(request)

        if request.method == 'OPTIONS':
            response = HttpResponse(status=200)
        else:
            response = self.get_response(request)

        response['Access-Control-Allow-Origin'] = self.allow_origin
        response['Access-Control-Allow-Headers'] = ', '.join(self.allow_headers)
        response['Access-Control-Allow-Methods'] = 'POST, OPTIONS'
        return response
