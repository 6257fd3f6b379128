"""
Unit tests for RateLimiter
"""

import sys
import time
from pathlib import Path

# Add parent directory to path to import pytrello module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from pytrello import RateLimiter


class TestRateLimiter:
    """Test the RateLimiter token bucket implementation"""

    def test_initial_tokens(self):
        """Rate limiter should start with full burst allowance"""
        limiter = RateLimiter(requests_per_second=10.0, burst_allowance=5)
        status = limiter.get_status()

        assert status["available_tokens"] == 5.0
        assert status["max_tokens"] == 5
        assert status["rate_per_second"] == 10.0

    def test_defaults_match_trello_limits(self):
        limiter = RateLimiter()
        assert limiter.rate == 10.0
        assert limiter.burst_allowance == 10

    def test_acquire_burst(self):
        """Should allow burst consumption up to burst_allowance"""
        limiter = RateLimiter(requests_per_second=1.0, burst_allowance=3)

        for i in range(3):
            assert limiter.try_acquire(), f"Failed to acquire token {i + 1}"

        assert not limiter.try_acquire()

    def test_acquire_times_out(self):
        limiter = RateLimiter(requests_per_second=0.1, burst_allowance=1)
        assert limiter.acquire(timeout=0.1)

        start_time = time.monotonic()
        assert limiter.acquire(timeout=0.05) is False
        assert time.monotonic() - start_time >= 0.05

    def test_tokens_refill(self):
        limiter = RateLimiter(requests_per_second=100.0, burst_allowance=1)
        assert limiter.try_acquire()

        # One token takes 10ms at 100 req/sec
        assert limiter.acquire(timeout=1.0)

    def test_tokens_capped_at_burst(self):
        limiter = RateLimiter(requests_per_second=1000.0, burst_allowance=2)
        time.sleep(0.05)
        limiter.try_acquire()

        assert limiter.get_status()["available_tokens"] <= 2.0

    @pytest.mark.parametrize("rate,burst", [(0, 5), (-1.0, 5), (10.0, 0)])
    def test_invalid_settings(self, rate, burst):
        with pytest.raises(ValueError):
            RateLimiter(requests_per_second=rate, burst_allowance=burst)
