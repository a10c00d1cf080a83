"""In-process sliding window rate limiting for credential endpoints."""
import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict

import structlog
from fastapi import Request

from sitecms.core.config import settings
from sitecms.core.exceptions import RateLimited

logger = structlog.get_logger()

# Key count above which a hit sweeps out idle clients
PRUNE_THRESHOLD = 1024


class RateLimiter:
    """Allow at most ``limit`` hits per ``window`` seconds for each key.

    State lives in process memory, so limits are per worker.
    """

    def __init__(self, limit: int, window: int, scope: str = "default"):
        self.limit = limit
        self.window = window
        self.scope = scope
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str, now: float = None) -> int:
        """Record a hit; returns remaining allowance or raises RateLimited."""
        now = time.monotonic() if now is None else now
        if len(self._hits) >= PRUNE_THRESHOLD:
            self.prune(now)
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - self.window:
                hits.popleft()

            if len(hits) >= self.limit:
                retry_after = int(hits[0] + self.window - now) + 1
                logger.warning("Rate limit exceeded", scope=self.scope, key=key, retry_after=retry_after)
                raise RateLimited("Too many attempts, please try again later.")

            hits.append(now)
            return self.limit - len(hits)

    def prune(self, now: float = None) -> int:
        """Drop keys whose hits have all expired; returns how many were dropped."""
        now = time.monotonic() if now is None else now
        with self._lock:
            expired = [
                key for key, hits in self._hits.items()
                if not hits or hits[-1] <= now - self.window
            ]
            for key in expired:
                del self._hits[key]
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    async def __call__(self, request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        client = request.client.host if request.client else "unknown"
        self.hit(client)


auth_rate_limiter = RateLimiter(
    limit=settings.AUTH_RATE_LIMIT_MAX_REQUESTS,
    window=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
    scope="auth"
)
