"""
Retry orchestration for async generation operations.

RetryOrchestrator runs an operation, classifies its failures, and retries
retryable ones with exponential backoff. Attempt counts are tracked per
operation id only while that operation's retry loop is active.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from generation_core.models import GenerationError, RetryConfig
from generation_core.services.circuit_breaker import CircuitBreaker
from generation_core.services.error_classifier import (
    from_error,
    get_retry_delay,
    should_retry
)
from generation_core.utils.metrics_emitter import MetricsEmitter

logger = logging.getLogger(__name__)

OnRetry = Callable[[int, GenerationError], Any]


class RetryOrchestrator:
    """
    Executes operations with classified retry and exponential backoff.

    The only suspension point besides the operation itself is the backoff
    sleep. Attempts for one operation id run strictly one after another.

    Example:
        orchestrator = RetryOrchestrator()
        design_system = await orchestrator.execute_with_retry(
            lambda: client.generate(prompt),
            'generate-design-system',
            on_retry=lambda attempt, error: print(attempt, error.message)
        )
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics: Optional[MetricsEmitter] = None,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        """
        Initialize retry orchestrator.

        Args:
            config: Retry configuration (default: RetryConfig())
            sleep: Coroutine function sleeping for the given seconds (default: asyncio.sleep)
            metrics: Optional metrics emitter for retry and failure metrics
            circuit_breaker: Optional circuit breaker wrapped around each attempt
        """
        self.config = config or RetryConfig()
        self.metrics = metrics
        self.circuit_breaker = circuit_breaker
        self._sleep = sleep

        self._attempts: Dict[str, int] = {}
        self._active: Dict[str, int] = {}
        self._cancelled: Set[str] = set()

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[Any]],
        operation_id: str,
        on_retry: Optional[OnRetry] = None
    ) -> Any:
        """
        Run an operation, retrying retryable failures.

        Args:
            operation: Zero-argument callable returning an awaitable
            operation_id: Identifier of this logical operation
            on_retry: Called with (attempt, error) before each backoff sleep;
                its failures are logged and ignored

        Returns:
            Result of the first successful attempt

        Raises:
            GenerationError: When a failure is not retryable, the retry
                budget is exhausted, or the operation was cancelled via
                cancel_retry()
            asyncio.CancelledError: If the running task is cancelled
        """
        if operation_id in self._active:
            logger.warning(
                "Operation id already has an active retry loop",
                extra={'operation_id': operation_id}
            )

        self._active[operation_id] = self._active.get(operation_id, 0) + 1
        attempt = self._attempts.get(operation_id, 0)

        try:
            while True:
                try:
                    result = await self._invoke(operation)
                except Exception as exc:
                    error = from_error(exc)

                    if operation_id in self._cancelled:
                        logger.info(
                            "Retry cancelled; not retrying",
                            extra={'operation_id': operation_id, 'error_kind': error.kind.value}
                        )
                        self._raise(error, exc)

                    if not should_retry(error, attempt, self.config):
                        self._on_give_up(operation_id, error, attempt)
                        self._raise(error, exc)

                    attempt += 1
                    self._attempts[operation_id] = attempt
                    delay_ms = get_retry_delay(error.kind, attempt, self.config)

                    logger.warning(
                        f"Retry attempt {attempt}/{self.config.max_retries} after {delay_ms}ms",
                        extra={
                            'operation_id': operation_id,
                            'attempt': attempt,
                            'max_retries': self.config.max_retries,
                            'delay_ms': delay_ms,
                            'error_kind': error.kind.value,
                            'error': error.details
                        }
                    )
                    if self.metrics is not None:
                        self.metrics.emit_retry_scheduled(error.kind.value, attempt, delay_ms)

                    await self._notify(on_retry, attempt, error, operation_id)
                    await self._sleep(delay_ms / 1000)

                    if operation_id in self._cancelled:
                        logger.info(
                            "Retry cancelled during backoff",
                            extra={'operation_id': operation_id, 'attempt': attempt}
                        )
                        self._raise(error, exc)
                    continue

                if attempt > 0:
                    logger.info(
                        f"Operation succeeded after {attempt} retries",
                        extra={'operation_id': operation_id, 'attempt': attempt}
                    )
                return result
        finally:
            self._finish(operation_id)

    def cancel_retry(self, operation_id: str) -> bool:
        """
        Stop retrying an operation.

        Drops its attempt tracking. An active loop finishes the attempt in
        flight and then raises its last classified error instead of
        retrying again. Use asyncio task cancellation to interrupt the
        attempt itself.

        Returns:
            True if the operation was tracked or active
        """
        tracked = self._attempts.pop(operation_id, None) is not None
        active = operation_id in self._active

        if active:
            self._cancelled.add(operation_id)

        if tracked or active:
            logger.info("Cancelled retries", extra={'operation_id': operation_id})

        return tracked or active

    def get_retry_attempt(self, operation_id: str) -> int:
        """Current retry attempt for an operation, 0 if it is not retrying."""
        return self._attempts.get(operation_id, 0)

    def active_operations(self) -> Dict[str, int]:
        """Map of operation ids with a running retry loop to their attempt count."""
        return {
            operation_id: self._attempts.get(operation_id, 0)
            for operation_id in self._active
        }

    async def _invoke(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        if self.circuit_breaker is not None:
            return await self.circuit_breaker.call(operation)

        result = operation()
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _notify(
        self,
        on_retry: Optional[OnRetry],
        attempt: int,
        error: GenerationError,
        operation_id: str
    ) -> None:
        if on_retry is None:
            return

        try:
            outcome = on_retry(attempt, error)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            # Log error but don't fail the operation
            logger.warning(
                f"on_retry callback failed: {e}",
                extra={'operation_id': operation_id, 'attempt': attempt}
            )

    def _on_give_up(self, operation_id: str, error: GenerationError, attempt: int) -> None:
        if error.retryable:
            logger.error(
                f"Operation failed after {attempt} retries",
                extra={
                    'operation_id': operation_id,
                    'max_retries': self.config.max_retries,
                    'error_kind': error.kind.value,
                    'error': error.details
                }
            )
        else:
            logger.error(
                "Operation failed with non-retryable error",
                extra={
                    'operation_id': operation_id,
                    'error_kind': error.kind.value,
                    'error': error.details
                }
            )

        if self.metrics is not None:
            self.metrics.emit_operation_failed(error.kind.value, attempt + 1)

    @staticmethod
    def _raise(error: GenerationError, exc: Exception) -> None:
        if error is exc:
            raise error
        raise error from exc

    def _finish(self, operation_id: str) -> None:
        self._attempts.pop(operation_id, None)

        remaining = self._active.get(operation_id, 0) - 1
        if remaining > 0:
            self._active[operation_id] = remaining
        else:
            self._active.pop(operation_id, None)
            self._cancelled.discard(operation_id)
