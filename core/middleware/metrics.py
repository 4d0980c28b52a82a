"""
Prometheus HTTP metrics middleware.
"""

import time
from typing import Callable

from django.http import HttpRequest, HttpResponse

from core.metrics import http_request_duration_seconds, http_requests_total


def _route_label(request: HttpRequest) -> str:
    """URL pattern the request resolved to; keeps label cardinality bounded."""
    match = getattr(request, "resolver_match", None)
    if match is None or not match.route:
        return "unmatched"
    return "/" + match.route


class MetricsMiddleware:
    """Count requests and time them, labelled by route rather than raw path."""

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        started = time.perf_counter()
        status_code = 500
        try:
            response = self.get_response(request)
            status_code = response.status_code
            return response
        finally:
            endpoint = _route_label(request)
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(
                time.perf_counter() - started
            )
