# core/rate_limiter.py

from collections import defaultdict, deque
from threading import Lock
from typing import Deque, Dict, Tuple
import time

from fastapi import HTTPException

from core.config import settings
from core.logging_config import logger


class SlidingWindow:
    """
    Per-key sliding window of request timestamps.

    Process-local and best effort: counters are lost on restart and are
    not shared between workers.
    """

    def __init__(self):
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def hit(self, key: str, max_requests: int, window_seconds: int) -> Tuple[bool, int]:
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()

            if len(hits) >= max_requests:
                return False, 0

            hits.append(now)
            return True, max_requests - len(hits)

    def clear(self):
        with self._lock:
            self._hits.clear()


_window = SlidingWindow()


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """Returns (allowed, remaining) and records the hit when allowed."""
    return _window.hit(identifier, max_requests, window_seconds)


def reset_rate_limits():
    _window.clear()


def limit_mutation(user_id: str, scope: str) -> int:
    """
    Throttle a state-changing call (company creation, joining, invitations)
    per user and per scope. Raises 429 with Retry-After when exhausted.
    """
    max_requests = settings.RATE_LIMIT_MUTATION_MAX
    window_seconds = settings.RATE_LIMIT_MUTATION_WINDOW_SECONDS

    allowed, remaining = check_rate_limit(f"{scope}:user:{user_id}", max_requests, window_seconds)
    if not allowed:
        logger.warning(f"Mutation limit reached for user {user_id} on {scope}")
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
            headers={"Retry-After": str(window_seconds)},
        )

    return remaining
