from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import HTTPException, Request, Response, status


@dataclass(frozen=True)
class RateLimitHit:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int  # seconds until the current window closes

    def headers(self) -> dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class FixedWindowRateLimiter:
    """
    Counts requests per key in fixed windows of `window_seconds`.
    The first request of a key opens its window; the counter resets when the window expires.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        if max_requests < 1:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> RateLimitHit:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._evict_expired(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)

        reset_after = max(0, math.ceil(started + self.window_seconds - now))
        return RateLimitHit(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=reset_after,
        )

    def _evict_expired(self, now: float) -> None:
        # caller holds _lock; runs at most once per window
        expired = [k for k, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for k in expired:
            del self._windows[k]
        self._last_sweep = now

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def auth_rate_limit(request: Request, response: Response) -> None:
    """Dependency guarding the register/login endpoints."""
    limiter: FixedWindowRateLimiter = request.app.state.auth_limiter
    hit = limiter.hit(_client_key(request))
    if not hit.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please try again later.",
            headers={**hit.headers(), "Retry-After": str(hit.reset_after)},
        )
    response.headers.update(hit.headers())
