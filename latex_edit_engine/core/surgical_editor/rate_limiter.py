"""
Shared rate limiter for generation service calls.

Every component that talks to the Mistral API goes through the same limiter so
that an editing session, its retries and any concurrent sessions respect one
request window.
"""

import logging
import random
import threading
import time
from typing import Any, Callable, Optional

from latex_edit_engine.core.surgical_editor.config import RATE_LIMIT_MIN_DELAY

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("429", "too many requests", "rate limit", "service tier capacity exceeded")
BACKOFF_BASE_DELAY = 2.0
MAX_MIN_DELAY = 10.0


def is_rate_limit_error(error: Exception) -> bool:
    error_message = str(error).lower()
    return any(marker in error_message for marker in RATE_LIMIT_MARKERS)


class SharedRateLimiter:
    """
    Thread-safe singleton rate limiter.

    Enforces a minimum delay between calls, retries rate-limited calls with
    exponential backoff and jitter, and pauses every caller once too many
    consecutive rate limit errors have been seen (circuit breaker).
    """

    _instance: Optional["SharedRateLimiter"] = None
    _lock = threading.Lock()

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, min_delay_seconds: float = RATE_LIMIT_MIN_DELAY):
        # Singleton: only the first construction initializes state
        if hasattr(self, "call_lock"):
            return
        self.default_delay_seconds = min_delay_seconds
        self.min_delay_seconds = min_delay_seconds
        self.last_api_call = 0.0
        self.call_lock = threading.Lock()

        self.consecutive_rate_limit_errors = 0
        self.circuit_breaker_threshold = 5
        self.circuit_breaker_pause_duration = 60.0
        self.circuit_breaker_reset_time = 0.0

    def wait_if_needed(self, component_name: str = "Unknown") -> None:
        with self.call_lock:
            current_time = time.time()

            if (self.consecutive_rate_limit_errors >= self.circuit_breaker_threshold
                    and current_time < self.circuit_breaker_reset_time):
                remaining_pause = self.circuit_breaker_reset_time - current_time
                logger.warning("%s: circuit breaker active, pausing for %.1fs", component_name, remaining_pause)
                time.sleep(remaining_pause)
                self.consecutive_rate_limit_errors = 0
                self.circuit_breaker_reset_time = 0.0
                logger.info("Circuit breaker reset")

            time_since_last_call = time.time() - self.last_api_call
            if time_since_last_call < self.min_delay_seconds:
                sleep_time = self.min_delay_seconds - time_since_last_call
                logger.debug("%s: waiting %.1fs for rate limiting", component_name, sleep_time)
                time.sleep(sleep_time)

            self.last_api_call = time.time()

    def update_delay(self, new_delay_seconds: float) -> None:
        with self.call_lock:
            self.min_delay_seconds = new_delay_seconds
        logger.info("Rate limiter delay set to %.1fs", new_delay_seconds)

    def reset_delay(self) -> None:
        self.update_delay(self.default_delay_seconds)

    def get_current_delay(self) -> float:
        return self.min_delay_seconds

    def _record_rate_limit_error(self, component_name: str) -> None:
        self.consecutive_rate_limit_errors += 1
        if self.consecutive_rate_limit_errors >= self.circuit_breaker_threshold:
            self.circuit_breaker_reset_time = time.time() + self.circuit_breaker_pause_duration
            logger.error(
                "%s: circuit breaker triggered after %d consecutive rate limit errors, pausing for %.0fs",
                component_name, self.consecutive_rate_limit_errors, self.circuit_breaker_pause_duration,
            )

    def execute_with_retry(self, api_call: Callable[[], Any], component_name: str = "Unknown", max_retries: int = 3) -> Any:
        """
        Execute an API call, retrying rate limit errors with exponential backoff.

        Args:
            api_call: Zero-argument callable performing the request
            component_name: Name of the calling component (for logging)
            max_retries: Retries after the initial attempt

        Returns:
            The result of the API call

        Raises:
            The last exception once retries are exhausted, or immediately for
            errors that are not rate limit errors
        """
        for attempt in range(max_retries + 1):
            self.wait_if_needed(component_name)
            try:
                result = api_call()
            except Exception as e:
                if not is_rate_limit_error(e):
                    raise
                self._record_rate_limit_error(component_name)
                if attempt >= max_retries:
                    logger.error(
                        "%s: all retries exhausted for rate limit error (delay %.1fs)",
                        component_name, self.min_delay_seconds,
                    )
                    raise

                retry_delay = BACKOFF_BASE_DELAY * (2.0 ** attempt) * random.uniform(0.9, 1.1)
                logger.warning(
                    "%s: rate limit hit (attempt %d/%d), retrying in %.1fs",
                    component_name, attempt + 1, max_retries + 1, retry_delay,
                )
                time.sleep(retry_delay)

                new_delay = min(self.min_delay_seconds * 1.5, MAX_MIN_DELAY)
                if new_delay > self.min_delay_seconds:
                    self.update_delay(new_delay)
            else:
                self.consecutive_rate_limit_errors = 0
                return result


rate_limiter = SharedRateLimiter()


def get_rate_limiter() -> SharedRateLimiter:
    """Get the global shared rate limiter instance."""
    return rate_limiter
