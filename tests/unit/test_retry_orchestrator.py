"""
Unit tests for the retry orchestrator.

Tests retry decisions, backoff scheduling, attempt tracking,
cancellation and circuit breaker integration.
"""

import asyncio
from unittest.mock import AsyncMock, Mock, call

import pytest

from generation_core.models import GenerationError, RetryConfig
from generation_core.services import CircuitBreaker, RetryOrchestrator
from generation_core.services.error_classifier import create_error
from generation_core.utils.error_codes import ErrorKind


@pytest.fixture
def orchestrator(mock_sleep):
    """Fixture providing an orchestrator that does not really sleep."""
    return RetryOrchestrator(sleep=mock_sleep)


class TestExecuteWithRetry:
    """Test suite for execute_with_retry()."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, orchestrator, mock_sleep):
        """Test that a successful operation runs once."""
        operation = AsyncMock(return_value={'ok': True})

        result = await orchestrator.execute_with_retry(operation, 'op-1')

        assert result == {'ok': True}
        assert operation.call_count == 1
        mock_sleep.assert_not_called()
        assert orchestrator.get_retry_attempt('op-1') == 0

    @pytest.mark.asyncio
    async def test_fails_twice_then_succeeds(self, orchestrator, mock_sleep):
        """Test recovery from transient network failures."""
        operation = AsyncMock(side_effect=[
            ConnectionError('network down'),
            ConnectionError('network down'),
            {'ok': True}
        ])
        on_retry = Mock()

        result = await orchestrator.execute_with_retry(operation, 'op-1', on_retry)

        assert result == {'ok': True}
        assert operation.call_count == 3
        assert on_retry.call_count == 2
        assert [c.args[0] for c in on_retry.call_args_list] == [1, 2]
        assert all(
            c.args[1].kind == ErrorKind.NETWORK_ERROR for c in on_retry.call_args_list
        )
        assert mock_sleep.await_args_list == [call(2.0), call(4.0)]
        assert orchestrator.get_retry_attempt('op-1') == 0

    @pytest.mark.asyncio
    async def test_validation_error_is_not_retried(self, orchestrator, mock_sleep):
        """Test that non-retryable failures surface immediately."""
        raw = ValueError('validation failed: description is required')
        operation = AsyncMock(side_effect=raw)
        on_retry = Mock()

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.execute_with_retry(operation, 'op-1', on_retry)

        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR
        assert exc_info.value.__cause__ is raw
        assert operation.call_count == 1
        on_retry.assert_not_called()
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, orchestrator, mock_sleep):
        """Test that a persistent network failure gives up after three retries."""
        operation = AsyncMock(side_effect=ConnectionError('network down'))

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert exc_info.value.kind == ErrorKind.NETWORK_ERROR
        assert operation.call_count == 4
        assert mock_sleep.await_args_list == [call(2.0), call(4.0), call(8.0)]
        assert orchestrator.get_retry_attempt('op-1') == 0

    @pytest.mark.asyncio
    async def test_rate_limit_backoff(self, orchestrator, mock_sleep):
        """Test longer backoff for rate limit failures."""
        operation = AsyncMock(side_effect=RuntimeError('rate limit exceeded'))

        with pytest.raises(GenerationError):
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert mock_sleep.await_args_list == [call(4.0), call(8.0), call(16.0)]

    @pytest.mark.asyncio
    async def test_custom_retry_budget(self, mock_sleep):
        """Test retry count from configuration."""
        orchestrator = RetryOrchestrator(RetryConfig(max_retries=1), sleep=mock_sleep)
        operation = AsyncMock(side_effect=TimeoutError())

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert exc_info.value.kind == ErrorKind.TIMEOUT_ERROR
        assert operation.call_count == 2

    @pytest.mark.asyncio
    async def test_generation_error_is_raised_unchanged(self, orchestrator):
        """Test that an already classified failure is not reclassified."""
        quota = create_error(ErrorKind.QUOTA_EXCEEDED, 'Out of credits')
        operation = AsyncMock(side_effect=quota)

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert exc_info.value is quota
        assert operation.call_count == 1

    @pytest.mark.asyncio
    async def test_attempt_is_tracked_during_retries(self, orchestrator):
        """Test that the attempt count is visible while the loop is active."""
        seen = []

        def on_retry(attempt, error):
            seen.append((
                attempt,
                orchestrator.get_retry_attempt('op-1'),
                orchestrator.active_operations()
            ))

        operation = AsyncMock(side_effect=[ConnectionError('network'), 'done'])

        await orchestrator.execute_with_retry(operation, 'op-1', on_retry)

        assert seen == [(1, 1, {'op-1': 1})]
        assert orchestrator.active_operations() == {}

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_stop_retries(self, orchestrator):
        """Test that on_retry failures are ignored."""
        operation = AsyncMock(side_effect=[ConnectionError('network'), 'done'])
        on_retry = Mock(side_effect=RuntimeError('progress UI crashed'))

        result = await orchestrator.execute_with_retry(operation, 'op-1', on_retry)

        assert result == 'done'
        assert operation.call_count == 2

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self, orchestrator):
        """Test that coroutine callbacks run before the backoff."""
        operation = AsyncMock(side_effect=[ConnectionError('network'), 'done'])
        on_retry = AsyncMock()

        await orchestrator.execute_with_retry(operation, 'op-1', on_retry)

        on_retry.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sync_callable_returning_awaitable(self, orchestrator):
        """Test that lambdas wrapping coroutines are accepted."""

        async def generate(prompt):
            return f'generated: {prompt}'

        result = await orchestrator.execute_with_retry(lambda: generate('tokens'), 'op-1')

        assert result == 'generated: tokens'

    @pytest.mark.asyncio
    async def test_plain_callable(self, orchestrator):
        """Test that synchronous operations are accepted."""
        result = await orchestrator.execute_with_retry(lambda: 42, 'op-1')

        assert result == 42

    @pytest.mark.asyncio
    async def test_metrics(self, mock_sleep):
        """Test retry and failure metrics."""
        metrics = Mock()
        orchestrator = RetryOrchestrator(sleep=mock_sleep, metrics=metrics)
        operation = AsyncMock(side_effect=ConnectionError('network'))

        with pytest.raises(GenerationError):
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert metrics.emit_retry_scheduled.call_args_list == [
            call('NETWORK_ERROR', 1, 2000),
            call('NETWORK_ERROR', 2, 4000),
            call('NETWORK_ERROR', 3, 8000)
        ]
        metrics.emit_operation_failed.assert_called_once_with('NETWORK_ERROR', 4)


class TestCancellation:
    """Test suite for cancel_retry() and task cancellation."""

    @pytest.mark.asyncio
    async def test_cancel_during_backoff(self):
        """Test that cancelling stops the loop after the current backoff."""
        orchestrator = None

        async def cancelling_sleep(seconds):
            orchestrator.cancel_retry('op-1')

        orchestrator = RetryOrchestrator(sleep=cancelling_sleep)
        operation = AsyncMock(side_effect=ConnectionError('network'))

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert exc_info.value.kind == ErrorKind.NETWORK_ERROR
        assert operation.call_count == 1
        assert orchestrator.get_retry_attempt('op-1') == 0
        assert orchestrator.active_operations() == {}

    @pytest.mark.asyncio
    async def test_cancel_during_attempt(self, orchestrator):
        """Test that a failure after cancellation is not retried."""

        async def operation():
            orchestrator.cancel_retry('op-1')
            raise ConnectionError('network')

        with pytest.raises(GenerationError):
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert orchestrator.get_retry_attempt('op-1') == 0

    @pytest.mark.asyncio
    async def test_cancelled_id_can_be_reused(self, orchestrator):
        """Test that cancellation does not affect a later run of the same id."""
        orchestrator.cancel_retry('op-1')
        operation = AsyncMock(side_effect=[ConnectionError('network'), 'done'])

        assert await orchestrator.execute_with_retry(operation, 'op-1') == 'done'

    def test_cancel_unknown_operation(self, orchestrator):
        """Test cancelling an id that is not tracked."""
        assert orchestrator.cancel_retry('missing') is False
        assert orchestrator.get_retry_attempt('missing') == 0

    @pytest.mark.asyncio
    async def test_task_cancellation_clears_tracking(self):
        """Test that cancelling the task removes tracking."""
        in_backoff = asyncio.Event()

        async def blocking_sleep(seconds):
            in_backoff.set()
            await asyncio.Event().wait()

        orchestrator = RetryOrchestrator(sleep=blocking_sleep)
        operation = AsyncMock(side_effect=ConnectionError('network'))

        task = asyncio.create_task(orchestrator.execute_with_retry(operation, 'op-1'))
        await in_backoff.wait()

        assert orchestrator.get_retry_attempt('op-1') == 1

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert orchestrator.get_retry_attempt('op-1') == 0
        assert orchestrator.active_operations() == {}


class TestCircuitBreakerIntegration:
    """Test suite for orchestrator with a circuit breaker."""

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self, clock, mock_sleep):
        """Test that retries after the breaker opens do not call the operation."""
        breaker = CircuitBreaker('generation', failure_threshold=1, timeout=60, clock=clock)
        orchestrator = RetryOrchestrator(sleep=mock_sleep, circuit_breaker=breaker)
        operation = AsyncMock(side_effect=ConnectionError('network'))

        with pytest.raises(GenerationError) as exc_info:
            await orchestrator.execute_with_retry(operation, 'op-1')

        assert operation.call_count == 1
        assert exc_info.value.kind == ErrorKind.AI_API_ERROR
        assert exc_info.value.code == 'CIRCUIT_OPEN'
        assert breaker.is_open

    @pytest.mark.asyncio
    async def test_breaker_recovers_between_retries(self, clock):
        """Test that a half-open test call can succeed inside the retry loop."""
        breaker = CircuitBreaker('generation', failure_threshold=1, timeout=2, clock=clock)

        async def advancing_sleep(seconds):
            clock.advance(seconds)

        orchestrator = RetryOrchestrator(sleep=advancing_sleep, circuit_breaker=breaker)
        operation = AsyncMock(side_effect=[ConnectionError('network'), 'done'])

        result = await orchestrator.execute_with_retry(operation, 'op-1')

        assert result == 'done'
        assert breaker.is_closed
