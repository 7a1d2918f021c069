import logging
import time
from typing import Any, Callable, Tuple, Type

logger = logging.getLogger("movie_gateway.circuit_breaker")


class CircuitBreakerOpenError(Exception):
    """Raised when the circuit is open (OPEN)."""

    pass


class CircuitBreaker:
    """
    Core circuit breaker logic.
    Monitors failures of the upstream movie API and temporarily blocks
    requests when a threshold is exceeded.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 30,
        ignored_exceptions: Tuple[Type[BaseException], ...] = (),
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.ignored_exceptions = ignored_exceptions
        self.failures = 0
        self.last_failure_time: float = 0
        self.state = "CLOSED"  # CLOSED, OPEN, HALF_OPEN
        self._trial_in_flight = False

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute the target function and open/close the circuit as needed.
        Exceptions listed in ignored_exceptions pass through without counting as failures.
        In HALF_OPEN only one trial call runs at a time; concurrent callers are rejected.
        """
        if self.state == "OPEN":
            if time.monotonic() - self.last_failure_time > self.recovery_timeout:
                self.state = "HALF_OPEN"
                logger.info("Circuit Breaker transitions to HALF_OPEN")
            else:
                raise CircuitBreakerOpenError(f"Circuit is open (failures: {self.failures})")

        is_trial = self.state == "HALF_OPEN"
        if is_trial:
            if self._trial_in_flight:
                raise CircuitBreakerOpenError(
                    f"Circuit is half-open, trial in progress (failures: {self.failures})"
                )
            self._trial_in_flight = True

        try:
            result = await func(*args, **kwargs)
        except self.ignored_exceptions:
            if self.state == "HALF_OPEN":
                self.reset()
            raise
        except Exception as e:
            self.failures += 1
            self.last_failure_time = time.monotonic()

            # Failure in HALF_OPEN immediately returns to OPEN.
            if self.failures >= self.failure_threshold or self.state == "HALF_OPEN":
                self.state = "OPEN"
                logger.warning(f"Circuit Breaker opened due to error: {e}")

            raise
        finally:
            if is_trial:
                self._trial_in_flight = False

        if self.state == "HALF_OPEN":
            logger.info("Circuit Breaker recovered (back to CLOSED)")
        self.reset()
        return result

    def reset(self):
        """Reset state to CLOSED."""
        self.failures = 0
        self.state = "CLOSED"
        self.last_failure_time = 0
