"""Exponential Backoff Utilities

Delay calculation for the transport retry loop.
"""

import logging
import random

logger = logging.getLogger(__name__)


class ExponentialBackoff:
    """Exponential backoff calculator with jitter and maximum delay."""

    def __init__(
        self,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        backoff_factor: float = 2.0,
        jitter: bool = True,
    ):
        """Initialize exponential backoff calculator.

        Args:
            base_delay: Base delay in seconds
            max_delay: Maximum delay in seconds
            backoff_factor: Multiplier for each retry
            jitter: Whether to add random jitter to delays
        """
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.jitter = jitter

    def calculate_delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Calculate delay before the given retry.

        Args:
            attempt: Retry number (1-based)
            retry_after: Server-provided ``Retry-After`` seconds, preferred
                when present

        Returns:
            Delay in seconds
        """
        if attempt <= 0:
            return 0.0

        if retry_after is not None:
            return min(max(retry_after, 0.0), self.max_delay)

        delay = self.base_delay * (self.backoff_factor ** (attempt - 1))
        delay = min(delay, self.max_delay)

        # 10% jitter to prevent thundering herd
        if self.jitter and delay > 0:
            jitter_range = delay * 0.1
            delay = max(0.0, delay + random.uniform(-jitter_range, jitter_range))

        logger.debug(f"Retry {attempt}: calculated delay {delay:.2f}s")
        return delay


def parse_retry_after(value: str | None) -> float | None:
    """Parse a numeric ``Retry-After`` header value in seconds.

    HTTP-date values are ignored and fall back to computed backoff.
    """
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None
