import time
from collections import defaultdict
from typing import Iterable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from cardforge.core.error_handling import error_body


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limit keyed on the socket peer address; forwarding headers are ignored."""

    def __init__(self, app, calls: int, period: int, paths: Iterable[str] = ("/api/ai/generate",)):
        super().__init__(app)
        self.calls = calls
        self.period = period
        self.paths = frozenset(paths)
        self.requests = defaultdict(list)
        self._last_prune = 0.0

    def _client_key(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _prune(self, current_time: float) -> None:
        """Drop clients with no request inside the window."""
        cutoff = current_time - self.period
        stale = [key for key, times in self.requests.items() if not times or times[-1] <= cutoff]
        for key in stale:
            del self.requests[key]
        self._last_prune = current_time

    async def dispatch(self, request: Request, call_next):
        # Only generation calls cost upstream tokens
        if request.method == "POST" and request.url.path in self.paths:
            client_ip = self._client_key(request)
            current_time = time.time()

            if current_time - self._last_prune >= self.period:
                self._prune(current_time)

            # Remove outdated requests
            recent = [t for t in self.requests.get(client_ip, ()) if t > current_time - self.period]

            if len(recent) >= self.calls:
                self.requests[client_ip] = recent
                return JSONResponse(
                    status_code=429,
                    content=error_body("Too many requests", "Rate limit exceeded", retry_after=self.period),
                    headers={"Retry-After": str(self.period)},
                )

            recent.append(current_time)
            self.requests[client_ip] = recent

        return await call_next(request)
