"""
Exponential backoff for idempotent event retries.

Dependencies: studyloop.configs
System role: Delay schedule between event processing attempts
"""

import random
from collections.abc import Callable

from studyloop.configs import get_settings
from studyloop.configs.idempotency import IdempotencySettings


def calculate_retry_delay(
    attempt: int,
    settings: IdempotencySettings | None = None,
    jitter: bool = True,
    rng: Callable[[], float] = random.random,
) -> float:
    """
    Delay before the next attempt, in milliseconds.

    base * multiplier ** attempt, capped, then shifted by up to +/- the
    jitter factor and never below the base delay.

    Args:
        attempt: Zero-based retry number
        settings: Backoff settings (uses global settings if None)
        jitter: Apply random jitter
        rng: Source of uniform [0, 1) values

    Returns:
        float: Delay in milliseconds
    """
    settings = settings or get_settings().idempotency
    delay = min(
        settings.base_delay_ms * settings.backoff_multiplier ** max(attempt, 0),
        settings.max_delay_ms,
    )
    if not jitter:
        return float(delay)

    offset = delay * settings.jitter_factor * (rng() - 0.5) * 2
    return max(delay + offset, float(settings.base_delay_ms))
