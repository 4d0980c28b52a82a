"""
Fixed-window rate limiter backed by the shared Django cache.

Counters live in the cache (Redis in deployed environments), never in
process memory, so every server process sees the same counts.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from django.core.cache import cache as default_cache

from core.domain.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    """Request ceiling for one scope."""

    scope: str
    limit: int
    window: int  # seconds

    def __post_init__(self):
        """Validate rule."""
        if self.limit < 1:
            raise ValueError("Rate limit must be at least 1")
        if self.window < 1:
            raise ValueError("Rate limit window must be at least 1 second")


@dataclass(frozen=True)
class RateLimitStatus:
    """Counter state after an accepted request."""

    limit: int
    remaining: int
    reset_at: int


class RateLimiter:
    """
    Stateless client over a TTL-capable shared counter store.

    One counter exists per (scope, client origin, window index). The
    counter is created with ``add`` and advanced with ``incr``, both of
    which are atomic on the cache backends used here.
    """

    KEY_PREFIX = "rate_limit"

    def __init__(self, cache=None, clock: Optional[Callable[[], float]] = None):
        """
        Initialize rate limiter.

        Args:
            cache: Django cache backend (defaults to the default cache)
            clock: Callable returning the current unix time
        """
        self._cache = cache or default_cache
        self._clock = clock or time.time

    def _cache_key(self, rule: RateLimitRule, client_id: str, window_index: int) -> str:
        """
        Generate cache key for a client's counter.

        Args:
            rule: Rate limit rule
            client_id: Client origin (network address)
            window_index: Index of the current window

        Returns:
            Cache key string
        """
        # Hash client id for cache key (don't store raw address)
        client_hash = hashlib.sha256(client_id.encode()).hexdigest()[:16]
        return f"{self.KEY_PREFIX}:{rule.scope}:{client_hash}:{window_index}"

    def hit(self, rule: RateLimitRule, client_id: str) -> RateLimitStatus:
        """
        Count one request from a client against a rule.

        Args:
            rule: Rate limit rule to apply
            client_id: Client origin (network address)

        Returns:
            RateLimitStatus for the accepted request

        Raises:
            RateLimitExceededError: If the client is over the ceiling
        """
        now = int(self._clock())
        window_index = now // rule.window
        reset_at = (window_index + 1) * rule.window
        key = self._cache_key(rule, client_id, window_index)

        self._cache.add(key, 0, timeout=rule.window)
        try:
            count = self._cache.incr(key)
        except ValueError:
            # Evicted between add and incr
            self._cache.set(key, 1, timeout=rule.window)
            count = 1

        if count > rule.limit:
            logger.info(
                "Rate limit exceeded",
                extra={"scope": rule.scope, "limit": rule.limit, "count": count},
            )
            raise RateLimitExceededError(
                limit=rule.limit,
                retry_after=max(1, reset_at - now),
                reset_at=reset_at,
            )

        return RateLimitStatus(
            limit=rule.limit,
            remaining=max(0, rule.limit - count),
            reset_at=reset_at,
        )
