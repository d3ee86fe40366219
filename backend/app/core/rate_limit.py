"""Per-client request rate limiting."""

import math
import time
from typing import Any, Callable

from starlette.responses import JSONResponse

from app.core.logging import get_logger


class RateLimitMiddleware:
    """
    ASGI middleware enforcing a fixed-window request ceiling per client IP.

    Counters live in process memory; each worker process limits on its own.
    """

    SKIP_PATHS = {"/health"}
    MESSAGE = "Too many requests, please try again later."

    def __init__(
        self,
        app: Any,
        max_requests: int = 100,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.app = app
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # client -> (window start, hits in window)
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_prune = clock()
        self.logger = get_logger("http.rate_limit")

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        client_key = client[0] if client else "unknown"

        retry_after = self._hit(client_key)
        if retry_after is None:
            await self.app(scope, receive, send)
            return

        self.logger.warning("rate_limit_exceeded", client=client_key, retry_after=retry_after)
        response = JSONResponse(
            {"error": self.MESSAGE},
            status_code=429,
            headers={"Retry-After": str(retry_after)},
        )
        await response(scope, receive, send)

    def _hit(self, client_key: str) -> int | None:
        """Count one request. Returns seconds to wait when over the limit."""
        now = self._clock()
        # Sweep expired windows at most once per window length
        if now - self._last_prune >= self.window_seconds:
            self._prune(now)
            self._last_prune = now

        start, count = self._windows.get(client_key, (now, 0))
        if now - start >= self.window_seconds:
            start, count = now, 0

        count += 1
        self._windows[client_key] = (start, count)

        if count <= self.max_requests:
            return None
        return max(1, math.ceil(start + self.window_seconds - now))

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, (start, _) in self._windows.items()
            if now - start >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
