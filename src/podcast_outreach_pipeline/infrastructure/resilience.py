"""Resilience utilities for outbound requests.

Usage example:
    import threading

    from podcast_outreach_pipeline.infrastructure.resilience import RetryPolicy, wait_for_retry

    policy = RetryPolicy(max_retries=1, backoff_seconds=0.3)
    cancel_event = threading.Event()
    if not wait_for_retry(policy.compute_backoff(0), cancel_event):
        ...  # cancelled while waiting
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

import requests


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-backoff retry policy for transient failures.

    Feeds retry once after any failure; the search API retries once on the
    statuses and exceptions listed here.
    """

    max_retries: int = 1
    backoff_seconds: float = 0.3
    max_backoff_seconds: float = 60.0
    retry_statuses: tuple[int, ...] = (429, 500, 502, 503, 504)
    retry_exceptions: tuple[type[Exception], ...] = (requests.Timeout, requests.ConnectionError)

    def compute_backoff(self, attempt: int, retry_after: int | None = None) -> float:
        """Return the delay before retry `attempt`, honouring Retry-After."""
        _ = attempt
        delay = self.backoff_seconds
        if retry_after is not None and retry_after > 0:
            delay = float(retry_after)
        return min(self.max_backoff_seconds, delay)

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retry_statuses or status_code >= 500


def wait_for_retry(delay_seconds: float, cancel_event: threading.Event | None = None) -> bool:
    """Sleep before a retry.

    Returns:
        False when the cancel event was set (the wait ends immediately), True otherwise.
    """
    if cancel_event is None:
        if delay_seconds > 0:
            time.sleep(delay_seconds)
        return True
    return not cancel_event.wait(timeout=max(0.0, delay_seconds))
