"""
Circuit breaker for the external generation call.
"""

import inspect
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from generation_core.exceptions import CircuitBreakerOpenError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "CLOSED"      # Normal operation, calls pass through
    OPEN = "OPEN"          # Too many failures, calls fail fast
    HALF_OPEN = "HALF_OPEN"  # Testing if service recovered


class CircuitBreaker:
    """
    Circuit breaker guarding an async operation.

    State transitions:
    - CLOSED -> OPEN: When failure count reaches threshold
    - OPEN -> HALF_OPEN: After timeout period
    - HALF_OPEN -> CLOSED: When test call succeeds
    - HALF_OPEN -> OPEN: When test call fails
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        timeout: float = 60.0,
        expected_exception: type = Exception,
        is_failure: Optional[Callable[[BaseException], bool]] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize circuit breaker.

        Args:
            name: Name of the circuit breaker for logging
            failure_threshold: Number of failures before opening circuit (default: 5)
            timeout: Seconds to wait before attempting recovery (default: 60.0)
            expected_exception: Exception type to count as failure (default: Exception)
            is_failure: Predicate deciding whether an expected exception counts
                toward opening the circuit (default: every one counts)
            clock: Time source in seconds (default: time.monotonic)
        """
        self.name = name
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.expected_exception = expected_exception
        self.is_failure = is_failure
        self._clock = clock

        self.failure_count = 0
        self.last_failure_time: float = 0
        self.state = CircuitState.CLOSED

        logger.info(
            f"Circuit breaker '{name}' initialized",
            extra={
                'circuit_breaker': name,
                'failure_threshold': failure_threshold,
                'timeout': timeout,
                'state': self.state.value
            }
        )

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute operation with circuit breaker protection.

        Args:
            operation: Zero-argument callable returning an awaitable

        Returns:
            Result of the operation

        Raises:
            CircuitBreakerOpenError: If circuit is open
            Exception: If operation fails
        """
        if self.state == CircuitState.OPEN:
            elapsed = self._clock() - self.last_failure_time
            if elapsed >= self.timeout:
                self._transition_to_half_open()
            else:
                retry_after = self.timeout - elapsed
                raise CircuitBreakerOpenError(
                    f"Circuit breaker '{self.name}' is open. "
                    f"Retry after {retry_after:.1f}s",
                    retry_after=retry_after
                )

        try:
            result: Any = operation()
            if inspect.isawaitable(result):
                result = await result
        except self.expected_exception as e:
            if self.is_failure is None or self.is_failure(e):
                self._on_failure(e)
            raise

        self._on_success()
        return result

    def _on_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self._transition_to_closed()

        if self.failure_count > 0:
            logger.info(
                f"Circuit breaker '{self.name}' - operation succeeded, resetting failure count",
                extra={
                    'circuit_breaker': self.name,
                    'previous_failure_count': self.failure_count,
                    'state': self.state.value
                }
            )
            self.failure_count = 0

    def _on_failure(self, exception: BaseException) -> None:
        self.failure_count += 1
        self.last_failure_time = self._clock()

        logger.warning(
            f"Circuit breaker '{self.name}' - operation failed",
            extra={
                'circuit_breaker': self.name,
                'failure_count': self.failure_count,
                'failure_threshold': self.failure_threshold,
                'state': self.state.value,
                'error': str(exception)
            }
        )

        if self.state == CircuitState.CLOSED and self.failure_count >= self.failure_threshold:
            self._transition_to_open()
        elif self.state == CircuitState.HALF_OPEN:
            # Failed during test, go back to OPEN
            self._transition_to_open()

    def _transition_to_open(self) -> None:
        self.state = CircuitState.OPEN
        logger.error(
            f"Circuit breaker '{self.name}' opened",
            extra={
                'circuit_breaker': self.name,
                'failure_count': self.failure_count,
                'timeout': self.timeout,
                'state': self.state.value
            }
        )

    def _transition_to_half_open(self) -> None:
        self.state = CircuitState.HALF_OPEN
        logger.info(
            f"Circuit breaker '{self.name}' half-opened for testing",
            extra={'circuit_breaker': self.name, 'state': self.state.value}
        )

    def _transition_to_closed(self) -> None:
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        logger.info(
            f"Circuit breaker '{self.name}' closed - service recovered",
            extra={'circuit_breaker': self.name, 'state': self.state.value}
        )

    def reset(self) -> None:
        """Manually reset circuit breaker to CLOSED state."""
        logger.info(
            f"Circuit breaker '{self.name}' manually reset",
            extra={
                'circuit_breaker': self.name,
                'previous_state': self.state.value,
                'previous_failure_count': self.failure_count
            }
        )
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time = 0

    @property
    def is_open(self) -> bool:
        """Check if circuit breaker is open."""
        return self.state == CircuitState.OPEN

    @property
    def is_closed(self) -> bool:
        """Check if circuit breaker is closed."""
        return self.state == CircuitState.CLOSED

    @property
    def is_half_open(self) -> bool:
        """Check if circuit breaker is half-open."""
        return self.state == CircuitState.HALF_OPEN
