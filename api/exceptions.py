"""
API exception handlers.

This module provides custom exception handling for REST API responses.
Every error body has the shape ``{"error": {"code": ..., "message": ...}}``.
"""

import logging
from typing import Any, Dict, Optional

from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    CheckoutRejectedError,
    DomainException,
    LicenseException,
    PaymentEventException,
    PluginNotFoundError,
    PriceNotConfiguredError,
    RateLimitExceededError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)

_DOMAIN_STATUS = (
    (PaymentEventException, status.HTTP_400_BAD_REQUEST),
    (PluginNotFoundError, status.HTTP_404_NOT_FOUND),
    (LicenseException, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (PriceNotConfiguredError, status.HTTP_400_BAD_REQUEST),
    (CheckoutRejectedError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RateLimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
)


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, trace_id)
    elif isinstance(exc, ValidationError):
        response = Response(
            {
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request parameters",
                    "details": exc.detail,
                }
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        code = exc.default_code.upper().replace("-", "_") if exc.default_code else "API_ERROR"
        detail = exc.detail if isinstance(exc.detail, str) else exc.default_detail
        response.data = {"error": {"code": code, "message": str(detail)}}
    elif isinstance(exc, Http404):
        response = Response(
            {"error": {"code": "NOT_FOUND", "message": "Resource not found"}},
            status=status.HTTP_404_NOT_FOUND,
        )
    elif isinstance(exc, DatabaseError):
        response = _handle_storage_error(exc, context, trace_id)
    else:
        response = _handle_unexpected_exception(exc, context, trace_id)

    return response


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", None)


def _endpoint(context: Dict[str, Any]) -> str:
    request = context.get("request")
    return request.path if request is not None else "unknown"


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status.HTTP_400_BAD_REQUEST
    for exc_type, mapped_status in _DOMAIN_STATUS:
        if isinstance(exc, exc_type):
            status_code = mapped_status
            break

    log = logger.error if status_code >= 500 else logger.warning
    log("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    response = Response({"error": {"code": exc.code, "message": exc.message}}, status=status_code)
    if isinstance(exc, RateLimitExceededError):
        response["Retry-After"] = str(exc.retry_after)
    return response


def _handle_storage_error(
    exc: DatabaseError, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Storage failures are transient; the caller may retry."""
    logger.error("Storage unavailable: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    errors_total.labels(error_type="storage_unavailable", endpoint=_endpoint(context)).inc()
    return Response(
        {"error": {"code": "STORAGE_UNAVAILABLE", "message": "Storage temporarily unavailable"}},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    errors_total.labels(error_type=type(exc).__name__, endpoint=_endpoint(context)).inc()
    return Response(
        {"error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
