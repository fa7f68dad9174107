"""Circuit breaker guarding the appointment store.

Purpose: Fail fast with DependencyError while the store keeps failing,
instead of piling requests onto a dead database.

States:
- CLOSED: Normal operation, calls pass through
- OPEN: Store failing, calls fail immediately
- HALF_OPEN: Timeout elapsed, one trial call allowed
"""
import threading
import time
from enum import Enum
from typing import Any, Callable, Tuple, Type

from clinic_booking.logging_config import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(Exception):
    """Raised when circuit breaker is open (fail fast)."""

    def __init__(self, message: str, retry_after: float):
        super().__init__(message)
        self.retry_after = retry_after


class CircuitBreaker:
    """Circuit breaker counting only infrastructure failures."""

    def __init__(
        self,
        failure_threshold: int = 5,
        timeout: int = 60,
        failure_exceptions: Tuple[Type[BaseException], ...] = (Exception,)
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before opening circuit
            timeout: Seconds to wait before attempting half-open
            failure_exceptions: Exception types that count as failures.
                Anything else propagates without touching the counters.
        """
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.failure_exceptions = failure_exceptions
        self.failure_count = 0
        self.last_failure_time = None
        self._state = CircuitState.CLOSED
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        """Get current state as string."""
        return self._state.value

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute function with circuit breaker protection.

        Raises:
            CircuitBreakerOpen: If circuit is open (fail fast)
            Exception: Whatever ``func`` raises
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                if self._should_attempt_reset():
                    self._state = CircuitState.HALF_OPEN
                    logger.info("circuit_half_open")
                else:
                    retry_after = self._time_until_retry()
                    raise CircuitBreakerOpen(
                        f"Circuit breaker is OPEN. Retry after {retry_after:.1f}s",
                        retry_after=retry_after
                    )

        try:
            result = func(*args, **kwargs)
        except self.failure_exceptions:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.time() - self.last_failure_time >= self.timeout

    def _time_until_retry(self) -> float:
        if self.last_failure_time is None:
            return 0
        return max(0, self.timeout - (time.time() - self.last_failure_time))

    def _on_success(self):
        with self._lock:
            self.failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.CLOSED
                logger.info("circuit_closed")

    def _on_failure(self):
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = time.time()

            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                logger.warning("circuit_reopened")
            elif self.failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.error(
                    "circuit_opened",
                    failure_count=self.failure_count,
                    timeout=self.timeout
                )
