"""
Observability middleware.

Tags every request with a correlation id and writes one structured log
line when it finishes. Query strings are never logged: the validation
endpoint carries license keys in them.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace
from opentelemetry.trace import format_trace_id

logger = logging.getLogger(__name__)

# Probes hit these every few seconds; they are logged at debug level.
QUIET_PATH_PREFIXES = ("/health/", "/ready/", "/metrics/")


def current_trace_id() -> Optional[str]:
    """Trace id of the active span, or None when tracing is off."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format_trace_id(span_context.trace_id)


class ObservabilityMiddleware:
    """
    Request correlation and access logging.

    Sets ``request.correlation_id`` (taken from ``X-Correlation-ID`` when
    the caller sends one) and ``request.trace_id``, and echoes both back as
    response headers.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = request.META.get("HTTP_X_CORRELATION_ID") or uuid.uuid4().hex
        request.correlation_id = correlation_id  # type: ignore[attr-defined]
        request.trace_id = current_trace_id() or correlation_id  # type: ignore[attr-defined]

        started = time.perf_counter()
        try:
            response = self.get_response(request)
        except Exception as e:
            logger.error(
                "Request raised %s",
                type(e).__name__,
                extra=self._extra(request, started, error=str(e)),
                exc_info=True,
            )
            raise

        self._log(request, response, started)
        response["X-Correlation-ID"] = correlation_id
        response["X-Trace-ID"] = request.trace_id
        return response

    @staticmethod
    def _extra(request: HttpRequest, started: float, **fields) -> dict:
        extra = {
            "correlation_id": request.correlation_id,
            "trace_id": request.trace_id,
            "method": request.method,
            "path": request.path,
            "client": request.META.get("REMOTE_ADDR"),
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        extra.update(fields)
        return extra

    def _log(self, request: HttpRequest, response: HttpResponse, started: float) -> None:
        extra = self._extra(request, started, status_code=response.status_code)
        message = "%s %s -> %s"
        args = (request.method, request.path, response.status_code)

        if response.status_code >= 500:
            logger.error(message, *args, extra=extra)
        elif response.status_code >= 400:
            logger.warning(message, *args, extra=extra)
        elif request.path.startswith(QUIET_PATH_PREFIXES):
            logger.debug(message, *args, extra=extra)
        else:
            logger.info(message, *args, extra=extra)
