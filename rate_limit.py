"""
Rate limiting middleware keyed by client IP.
"""
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from models.chat_models import ErrorKind
from utils.logger import app_logger


def get_client_ip(request: Request, trust_proxy: bool = False) -> Optional[str]:
    """
    Resolve the client identity used for rate limiting and metrics.

    With trust_proxy, the first address of X-Forwarded-For wins.
    """
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None


@dataclass
class RateWindow:
    """Request count for one client within the current window."""
    count: int
    reset_at: float


@dataclass
class RateLimitDecision:
    """Outcome of counting one request."""
    allowed: bool
    limit: int
    remaining: int
    reset_in: float

    def headers(self) -> dict:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(math.ceil(self.reset_in)),
        }


class RateLimiter:
    """
    Fixed-window request counter per client identity.

    Increment and check happen under one lock, so concurrent bursts from the
    same client cannot undercount.
    """

    def __init__(
        self,
        window_seconds: float = 15 * 60,
        max_requests: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        self._next_prune = clock() + window_seconds

    def hit(self, key: Optional[str]) -> RateLimitDecision:
        """Count one request for key and decide whether it may proceed."""
        key = key or "unknown"
        now = self._clock()

        with self._lock:
            if now >= self._next_prune:
                self._prune(now)

            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                window = RateWindow(count=0, reset_at=now + self.window_seconds)
                self._windows[key] = window

            window.count += 1
            return RateLimitDecision(
                allowed=window.count <= self.max_requests,
                limit=self.max_requests,
                remaining=max(0, self.max_requests - window.count),
                reset_in=max(0.0, window.reset_at - now),
            )

    def reset(self, key: Optional[str] = None) -> None:
        """Forget one client's window, or all of them."""
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)

    def _prune(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]
        self._next_prune = now + self.window_seconds


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies a RateLimiter to every /api/ request before the body is read.
    """

    PROTECTED_PREFIX = "/api/"

    def __init__(self, app, limiter: RateLimiter, trust_proxy: bool = False):
        super().__init__(app)
        self.limiter = limiter
        self.trust_proxy = trust_proxy

    async def dispatch(self, request: Request, call_next):
        """
        Count the request and reject it once the client is over its limit.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response from next handler or 429 error response
        """
        if not request.url.path.startswith(self.PROTECTED_PREFIX):
            return await call_next(request)

        client_ip = get_client_ip(request, self.trust_proxy)
        decision = self.limiter.hit(client_ip)

        if not decision.allowed:
            app_logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=ErrorKind.RATE_LIMITED.status_code,
                content={"error": ErrorKind.RATE_LIMITED.message},
                headers={**decision.headers(), "Retry-After": str(math.ceil(decision.reset_in))},
            )

        response = await call_next(request)
        response.headers.update(decision.headers())
        return response
