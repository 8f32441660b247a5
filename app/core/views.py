"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks, plus the
shared translation of failed service results into HTTP responses.
"""

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from rest_framework.response import Response

from core.exceptions import status_for_error_code
from core.services import ServiceResult


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    This endpoint is used by:
    - Docker health checks
    - Kubernetes liveness/readiness checks
    - Load balancers (AWS ALB, nginx)

    HTTP Status Codes:
        200: All systems operational
        503: Database unreachable

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "cache": "connected"
        }
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    # Cache failure is not critical (the Redis client ignores exceptions)
    cache.set("health_check", "ok", timeout=1)
    if cache.get("health_check") == "ok":
        health_status["cache"] = "connected"
    else:
        health_status["cache"] = "disconnected"

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)


def service_error_response(result: ServiceResult) -> Response:
    """
    Build the DRF error response for a failed ServiceResult.

    The HTTP status follows the error code (NOT_FOUND -> 404,
    PERMISSION_DENIED -> 403, STORE_UNAVAILABLE -> 503, others -> 400).

    Example Response:
        {
            "error": "Item not found",
            "error_code": "NOT_FOUND"
        }
    """
    body = {"error": result.error, "error_code": result.error_code}
    if result.errors:
        body["errors"] = result.errors
    return Response(body, status=status_for_error_code(result.error_code))


def validation_error_response(errors: dict) -> Response:
    """
    Build the 400 response for request data that failed serializer validation.

    Uses the same body shape as service failures so clients handle one
    format: ``{"error", "error_code": "INVALID_ARGUMENT", "errors"}``.
    """
    return Response(
        {
            "error": "Invalid request data",
            "error_code": "INVALID_ARGUMENT",
            "errors": errors,
        },
        status=status_for_error_code("INVALID_ARGUMENT"),
    )
