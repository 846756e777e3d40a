"""Core middleware for the Storefront API."""

import logging

from django.http import JsonResponse

from storefront.opencart.exceptions import StorefrontError

from .api import InvalidJsonError

logger = logging.getLogger(__name__)


class JsonExceptionMiddleware:
    """Turn exceptions escaping a view into JSON responses.

    Business-rule errors keep their status code, malformed bodies are 400
    and anything else is logged and reported as 500.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, InvalidJsonError):
            return JsonResponse({"error": "Invalid JSON"}, status=400)

        if isinstance(exception, StorefrontError):
            return JsonResponse({"message": exception.message}, status=exception.status_code)

        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return JsonResponse(
            {"message": "Server Error", "error": str(exception)},
            status=500,
        )
