# apps/core/middleware.py

import logging

from django.http import JsonResponse

from .exceptions import ApiError

logger = logging.getLogger(__name__)


class ApiErrorMiddleware:
    """
    Converts exceptions raised by API views into JSON responses

    ApiError subclasses keep their status and message. Anything else
    raised under /api/ becomes a generic 500 after being logged.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, ApiError):
            if exception.status_code >= 500:
                logger.error(f"API error on {request.method} {request.path}: {exception.message}")
            elif exception.status_code in (401, 403):
                logger.warning(f"Denied {request.method} {request.path}: {exception.message}")
            return JsonResponse(exception.as_dict(), status=exception.status_code)

        if request.path.startswith('/api/'):
            logger.exception(f"Unhandled error on {request.method} {request.path}")
            return JsonResponse({'error': 'Internal server error', 'status': 500}, status=500)

        return None
