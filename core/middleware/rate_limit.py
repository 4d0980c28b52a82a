"""
Rate limiting middleware.

Implements rate limiting per client origin on the public endpoints.
"""

from typing import Callable, List, Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse

from core.domain.exceptions import RateLimitExceededError
from core.infrastructure.rate_limiter import RateLimiter, RateLimitRule
from core.metrics import rate_limited_total


def get_client_origin(request: HttpRequest) -> str:
    """
    Resolve the network origin of a request.

    ``X-Forwarded-For`` is only honoured when the deployment says a trusted
    proxy sets it; otherwise clients could pick their own identity.

    Args:
        request: HTTP request

    Returns:
        Client address string
    """
    if getattr(settings, "RATE_LIMIT_TRUST_FORWARDED_FOR", False):
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.META.get("REMOTE_ADDR") or "unknown"


class RateLimitMiddleware:
    """
    Rate limiting middleware per client origin.

    Rules come from ``settings.RATE_LIMIT_RULES``; each rule names a path,
    a ceiling and a window in seconds. Requests over the ceiling are
    answered with 429 before any view runs.
    """

    def __init__(self, get_response: Callable, limiter: Optional[RateLimiter] = None):
        """Initialize middleware."""
        self.get_response = get_response
        self.limiter = limiter or RateLimiter()

    def _match_rule(self, request: HttpRequest) -> Optional[RateLimitRule]:
        """
        Find the rule that applies to a request path.

        Args:
            request: HTTP request

        Returns:
            Matching rule or None when the path is not limited
        """
        path = request.path.rstrip("/")
        rules: List[dict] = getattr(settings, "RATE_LIMIT_RULES", [])
        for config in rules:
            if path == config["path"].rstrip("/"):
                return RateLimitRule(
                    scope=config["scope"],
                    limit=config["limit"],
                    window=config["window"],
                )
        return None

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """
        Process request with rate limiting.

        Args:
            request: HTTP request

        Returns:
            HTTP response with rate limit headers
        """
        rule = self._match_rule(request)
        if rule is None:
            return self.get_response(request)

        client_origin = get_client_origin(request)

        try:
            rate_status = self.limiter.hit(rule, client_origin)
        except RateLimitExceededError as exc:
            rate_limited_total.labels(scope=rule.scope).inc()
            response = JsonResponse(
                {"error": {"code": exc.code, "message": exc.message}},
                status=429,
            )
            response["X-RateLimit-Limit"] = str(exc.limit)
            response["X-RateLimit-Remaining"] = "0"
            response["X-RateLimit-Reset"] = str(exc.reset_at)
            response["Retry-After"] = str(exc.retry_after)
            return response

        response = self.get_response(request)

        # Add rate limit headers (RFC 6585)
        response["X-RateLimit-Limit"] = str(rate_status.limit)
        response["X-RateLimit-Remaining"] = str(rate_status.remaining)
        response["X-RateLimit-Reset"] = str(rate_status.reset_at)

        return response
