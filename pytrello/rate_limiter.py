"""Token bucket rate limiter shared by all requests of a TrelloClient."""

from __future__ import annotations

import threading
import time
from typing import Any

# Trello allows 100 requests per 10 seconds per token
DEFAULT_RATE = 10.0
DEFAULT_BURST = 10


class RateLimiter:
    """Token bucket guarding outbound Trello requests

    The bucket holds at most ``burst_allowance`` tokens and refills at
    ``requests_per_second``. Each request consumes one token.
    """

    def __init__(
        self, requests_per_second: float = DEFAULT_RATE, burst_allowance: int = DEFAULT_BURST
    ):
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        if burst_allowance < 1:
            raise ValueError("burst_allowance must be at least 1")

        self.rate = requests_per_second
        self.burst_allowance = burst_allowance
        self.tokens = float(burst_allowance)
        self.last_update = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(
            float(self.burst_allowance), self.tokens + (now - self.last_update) * self.rate
        )
        self.last_update = now

    def try_acquire(self) -> bool:
        """Take a token if one is available right now, without waiting"""
        with self._lock:
            self._refill()
            if self.tokens >= 1.0:
                self.tokens -= 1.0
                return True
            return False

    def acquire(self, timeout: float = 5.0) -> bool:
        """
        Wait for a token

        Args:
            timeout: Maximum time to wait (seconds)

        Returns:
            True once a token was taken, False if the timeout expired first
        """
        deadline = time.monotonic() + timeout

        while True:
            if self.try_acquire():
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.01)

    def get_status(self) -> dict[str, Any]:
        """Current bucket state, for debug logging"""
        with self._lock:
            return {
                "available_tokens": self.tokens,
                "max_tokens": self.burst_allowance,
                "rate_per_second": self.rate,
            }
