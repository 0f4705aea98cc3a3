"""
Rate limiting for quiz generation endpoints
"""
import time
from collections import defaultdict, deque
from fastapi import Request, HTTPException
from typing import Deque, Dict
import logging

from app.config import settings

logger = logging.getLogger(__name__)


class GenerationRateLimiter:
    """
    In-memory sliding-window limiter for generation requests

    Each generation call fans out to the AI backend, so only POST
    generation endpoints depend on this. Single-process only.
    """

    WINDOW_SECONDS = 60

    def __init__(self, requests_per_minute: int = 10):
        self.requests_per_minute = requests_per_minute
        # {client_id: timestamps of accepted requests, oldest first}
        self.history: Dict[str, Deque[float]] = defaultdict(deque)

    def _get_client_id(self, request: Request) -> str:
        """Client IP; X-Username is caller-controlled and not trusted here"""
        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop timestamps outside the window and forget idle clients"""
        cutoff = now - self.WINDOW_SECONDS

        for client_id in list(self.history.keys()):
            window = self.history[client_id]
            while window and window[0] <= cutoff:
                window.popleft()

            # Remove empty entries
            if not window:
                del self.history[client_id]

    async def __call__(self, request: Request) -> None:
        """
        FastAPI dependency

        Raises:
            HTTPException: 429 if the client exceeded its per-minute budget
        """
        client_id = self._get_client_id(request)
        now = time.monotonic()

        self._cleanup_old_entries(now)
        window = self.history[client_id]

        if len(window) >= self.requests_per_minute:
            retry_after = int(window[0] + self.WINDOW_SECONDS - now) + 1
            logger.warning(f"Generation rate limit exceeded: {client_id}")
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many generation requests. Limit: {self.requests_per_minute} per minute",
                    "retry_after": retry_after
                }
            )

        window.append(now)
        logger.debug(f"Rate limit check passed: {client_id} ({len(window)}/{self.requests_per_minute})")

    def reset(self) -> None:
        self.history.clear()


# Global instance
generation_rate_limiter = GenerationRateLimiter(
    requests_per_minute=settings.GENERATION_RATE_LIMIT_PER_MINUTE
)
