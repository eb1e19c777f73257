"""
rate_limit.py — Request throttling for the AI-backed and datastore routes.

Two limiters live here:

  FixedWindowRateLimiter
    Guards the LLM provider quota. One instance is built at app startup
    from settings and stored on ``app.state.ai_limiter``; routes reach it
    through the ``rate_limit_by_client`` / ``rate_limit_global``
    dependencies, so tests can swap in an isolated limiter.

  limiter (slowapi)
    Per-IP "N/minute" limits on the Supabase-backed routes, used with the
    ``@limiter.limit(...)`` decorator:

        @router.get("/api/verses")
        @limiter.limit("60/minute")
        async def search(request: Request, q: str):
            ...

Wire into app (in main.py):
    app.state.limiter = limiter
    app.state.ai_limiter = build_ai_limiter()
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from bible_insight.core.config import settings
from bible_insight.core.errors import RateLimitExceeded

logger = logging.getLogger(__name__)

GLOBAL_KEY = "GLOBAL"

# Sweep expired buckets once the table holds this many keys.
_SWEEP_THRESHOLD = 10_000

# Key datastore requests by client IP.
limiter = Limiter(key_func=get_remote_address)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class BucketEntry:
    count: int
    window_start: float  # ms, on the limiter's clock


class FixedWindowRateLimiter:
    """
    Fixed-window counter keyed by caller identifier.

    A window opens on the first accepted call for a key and lasts
    ``window_ms``; up to ``max_per_window`` calls are accepted inside it.
    Rejected calls leave the bucket untouched.

    ``clock`` returns milliseconds and is injectable for tests.
    """

    def __init__(
        self,
        window_ms: int,
        max_per_window: int,
        clock: Callable[[], float] = _monotonic_ms,
        sweep_threshold: int = _SWEEP_THRESHOLD,
    ) -> None:
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        if max_per_window <= 0:
            raise ValueError("max_per_window must be positive")

        self.window_ms = window_ms
        self.max_per_window = max_per_window
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._buckets: dict[str, BucketEntry] = {}
        self._lock = threading.Lock()

    @property
    def retry_after(self) -> int:
        """Retry hint in whole seconds (one full window)."""
        return max(1, math.ceil(self.window_ms / 1000))

    def check(self, caller_key: str = GLOBAL_KEY) -> None:
        """
        Account one call for ``caller_key``.

        Raises:
            RateLimitExceeded: the key already used its quota in this window.
        """
        with self._lock:
            now = self._clock()
            entry = self._buckets.get(caller_key)

            if entry is None or now - entry.window_start > self.window_ms:
                if entry is None and len(self._buckets) >= self._sweep_threshold:
                    self._sweep_locked(now)
                self._buckets[caller_key] = BucketEntry(count=1, window_start=now)
                return

            if entry.count < self.max_per_window:
                self._buckets[caller_key] = BucketEntry(
                    count=entry.count + 1, window_start=entry.window_start
                )
                return

        logger.warning("Rate limit exceeded for key=%s", caller_key)
        raise RateLimitExceeded(caller_key=caller_key, retry_after=self.retry_after)

    def get(self, caller_key: str) -> BucketEntry | None:
        return self._buckets.get(caller_key)

    def sweep(self) -> int:
        """Drop buckets whose window has elapsed. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        stale = [k for k, e in self._buckets.items() if now - e.window_start > self.window_ms]
        for key in stale:
            del self._buckets[key]
        if stale:
            logger.debug("Swept %d stale rate-limit buckets", len(stale))
        return len(stale)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)


def build_ai_limiter() -> FixedWindowRateLimiter:
    """Construct the AI limiter from settings (called once in main.py)."""
    return FixedWindowRateLimiter(
        window_ms=settings.rate_limit_window_ms,
        max_per_window=settings.rate_limit_max_requests,
    )


# ── FastAPI dependencies ──────────────────────────────────────────────────────

def client_key(request: Request) -> str:
    """
    Peer address, or the first X-Forwarded-For entry when
    TRUST_FORWARDED_FOR is set. The header is client-controlled, so only
    trust it behind a proxy that replaces it.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return get_remote_address(request)


def get_ai_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.ai_limiter


def rate_limit_by_client(request: Request) -> None:
    """Dependency — one quota per calling client."""
    get_ai_limiter(request).check(client_key(request))


def rate_limit_global(request: Request) -> None:
    """Dependency — one quota shared by every caller."""
    get_ai_limiter(request).check(GLOBAL_KEY)
