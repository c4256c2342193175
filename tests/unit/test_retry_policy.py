"""Tests for retry backoff and idempotency key construction."""

import hashlib

import pytest

from studyloop.core.idempotency.retry_policy import calculate_retry_delay
from studyloop.core.idempotency.service import build_idempotency_key


class TestCalculateRetryDelay:
    """Test exponential backoff in milliseconds."""

    @pytest.mark.parametrize("attempt,expected", [(0, 2000), (1, 4000), (2, 8000), (5, 64000)])
    def test_exponential_without_jitter(self, idempotency_settings, attempt, expected) -> None:
        """Should double from the 2 second base."""
        assert calculate_retry_delay(attempt, idempotency_settings, jitter=False) == expected

    def test_capped_at_max_delay(self, idempotency_settings) -> None:
        """Should never exceed five minutes."""
        assert calculate_retry_delay(20, idempotency_settings, jitter=False) == 300_000

    def test_negative_attempt_uses_base(self, idempotency_settings) -> None:
        """Should treat negative attempts as the first retry."""
        assert calculate_retry_delay(-3, idempotency_settings, jitter=False) == 2000

    def test_jitter_bounds(self, idempotency_settings) -> None:
        """Should shift the delay by at most +/-20 percent."""
        assert calculate_retry_delay(2, idempotency_settings, rng=lambda: 0.0) == pytest.approx(6400)
        assert calculate_retry_delay(2, idempotency_settings, rng=lambda: 0.5) == pytest.approx(8000)
        assert calculate_retry_delay(2, idempotency_settings, rng=lambda: 0.999999) == pytest.approx(9600, rel=1e-4)

    def test_jitter_never_below_base(self, idempotency_settings) -> None:
        """Should floor jittered delays at the base delay."""
        assert calculate_retry_delay(0, idempotency_settings, rng=lambda: 0.0) == 2000

    def test_random_jitter_within_range(self, idempotency_settings) -> None:
        """Should stay inside the jitter window with the default rng."""
        for _ in range(50):
            delay = calculate_retry_delay(3, idempotency_settings)
            assert 12800 <= delay <= 19200


class TestBuildIdempotencyKey:
    """Test deterministic key construction."""

    def test_format(self) -> None:
        """Should prefix the hash with the event type."""
        digest = hashlib.sha256(b"subscription.updated:evt_1").hexdigest()

        assert build_idempotency_key("subscription.updated", "evt_1") == f"subscription.updated:{digest}"

    def test_deterministic(self) -> None:
        """Should map the same event to the same key."""
        assert build_idempotency_key("a", "1") == build_idempotency_key("a", "1")
        assert build_idempotency_key("a", "1") != build_idempotency_key("a", "2")
