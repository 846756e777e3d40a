"""Core views for the Storefront API."""

import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """Liveness check that also verifies the OpenCart database connection."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        logger.error("Health check could not reach the database: %s", e)
        return JsonResponse({"status": "unhealthy", "database": "unreachable", "error": str(e)}, status=503)

    return JsonResponse({"status": "healthy", "database": "connected"})


def page_not_found(request, exception=None):
    return JsonResponse({"message": "Not Found"}, status=404)


def server_error(request):
    return JsonResponse({"message": "Server Error"}, status=500)
