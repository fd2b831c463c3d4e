"""
Integration tests for the cached generation workflow.

Exercises settings, cache, classifier, orchestrator and metrics together
the way a request handler drives them.
"""

from unittest.mock import AsyncMock

import pytest

from generation_core import (
    DesignSystemRequest,
    ErrorKind,
    GenerationError,
    build_generation_service,
    format_user_message
)
from generation_core.config import Settings


@pytest.fixture
def settings(monkeypatch):
    """Fixture providing settings with metrics enabled."""
    monkeypatch.setenv('METRICS_ENABLED', 'true')
    monkeypatch.setenv('CACHE_MAX_DESIGN_SYSTEMS', '2')
    for name in ('CIRCUIT_BREAKER_ENABLED', 'RETRY_MAX_RETRIES', 'CACHE_KEY_HASH',
                 'CACHE_DEFAULT_TTL_SECONDS', 'CACHE_MAX_TTL_SECONDS', 'LOG_LEVEL', 'LOG_FORMAT'):
        monkeypatch.delenv(name, raising=False)
    return Settings()


class TestGenerationWorkflow:
    """End-to-end generation workflow."""

    @pytest.mark.asyncio
    async def test_full_workflow(self, settings, mock_cloudwatch, mock_sleep, design_system, component):
        """Test generation, retry, caching and component preload together."""
        service = build_generation_service(
            settings, cloudwatch_client=mock_cloudwatch, sleep=mock_sleep
        )
        request = DesignSystemRequest(
            name='Acme UI',
            description='Dashboard kit',
            style='minimal',
            components=['Button', 'Input']
        )
        progress = []

        # Rate limited once, then generated
        generator = AsyncMock(side_effect=[RuntimeError('rate limit exceeded'), design_system])
        outcome = await service.generate_design_system(
            request,
            generator,
            operation_id='generation_req-1',
            on_retry=lambda attempt, error: progress.append(format_user_message(error))
        )

        assert outcome.from_cache is False
        assert progress == [
            'Rate limit exceeded. Please try again later. '
            'Please wait a moment before trying again.'
        ]
        mock_sleep.assert_awaited_once_with(4.0)
        assert service.orchestrator.get_retry_attempt('generation_req-1') == 0

        # Same brief in a different order is served from cache
        reordered = DesignSystemRequest(
            name='Acme UI',
            description='Dashboard kit',
            style='minimal',
            components=['Input', 'Button']
        )
        cached = await service.generate_design_system(reordered, generator)
        assert cached.from_cache is True
        assert generator.await_count == 2

        # Components of the design system
        ds_hash = outcome.cache_key
        assert service.cache.missing_components(['Button', 'Input'], ds_hash) == ['Button', 'Input']
        service.cache.cache_component('Button', ds_hash, component)
        assert service.cache.missing_components(['Button', 'Input'], ds_hash) == ['Input']

        # Validation failure surfaces immediately with UI payload
        failing = AsyncMock(side_effect=ValueError('invalid primary color'))
        other = DesignSystemRequest(name='Other', description='Another brief')
        with pytest.raises(GenerationError) as exc_info:
            await service.generate_design_system(other, failing)

        payload = exc_info.value.to_dict()
        assert payload['kind'] == ErrorKind.VALIDATION_ERROR.value
        assert payload['recoverable'] is False
        assert failing.await_count == 1

        stats = service.cache.get_stats()
        assert stats['design_systems']['total'] == 1
        assert stats['design_systems']['hits'] == 1
        assert stats['components']['total'] == 1

        service.close()

        published = [
            datum['MetricName']
            for call in mock_cloudwatch.put_metric_data.call_args_list
            for datum in call.kwargs['MetricData']
        ]
        assert 'RetryScheduled' in published
        assert 'GenerationFailures' in published
        assert 'CacheHitRate' in published

    @pytest.mark.asyncio
    async def test_lru_across_generations(self, settings, mock_cloudwatch, mock_sleep, design_system):
        """Test that the least recently used design system is evicted first."""
        service = build_generation_service(
            settings, cloudwatch_client=mock_cloudwatch, sleep=mock_sleep
        )
        generator = AsyncMock(return_value=design_system)
        briefs = [
            DesignSystemRequest(name=name, description=f'Brief {name}')
            for name in ('A', 'B', 'C')
        ]

        await service.generate_design_system(briefs[0], generator)
        await service.generate_design_system(briefs[1], generator)
        await service.generate_design_system(briefs[0], generator)
        await service.generate_design_system(briefs[2], generator)

        assert service.cache.get_design_system(briefs[0]) is not None
        assert service.cache.get_design_system(briefs[2]) is not None
        assert service.cache.get_design_system(briefs[1]) is None
