"""
Shared pytest fixtures for generation core tests.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from generation_core.models import CacheConfig, DesignSystemRequest, RetryConfig


class FakeClock:
    """Manually advanced clock returning Unix seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Fixture providing a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def design_system_request():
    """Fixture providing a valid design system request."""
    return DesignSystemRequest(
        name='Acme UI',
        description='Clean dashboard components for a fintech product',
        style='modern',
        primary_color='#3B82F6',
        industry='finance',
        components=['Button', 'Input', 'Card']
    )


@pytest.fixture
def design_system():
    """Fixture providing a generated design system payload."""
    return {
        'name': 'Acme UI',
        'colors': {'primary': '#3B82F6', 'secondary': '#64748B'},
        'typography': {'fontFamily': 'Inter', 'baseSize': 16},
        'components': [
            {'name': 'Button', 'variants': ['primary', 'secondary']},
            {'name': 'Input', 'variants': ['default']},
            {'name': 'Card', 'variants': ['default', 'elevated']}
        ]
    }


@pytest.fixture
def component():
    """Fixture providing a generated component payload."""
    return {
        'name': 'Button',
        'code': 'export function Button(props) { return <button {...props} /> }',
        'props': ['variant', 'size', 'disabled']
    }


@pytest.fixture
def default_cache_config():
    """Fixture providing default cache configuration."""
    return CacheConfig()


@pytest.fixture
def default_retry_config():
    """Fixture providing default retry configuration."""
    return RetryConfig()


@pytest.fixture
def mock_sleep():
    """Fixture providing an awaitable sleep that returns immediately."""
    return AsyncMock(return_value=None)


@pytest.fixture
def mock_cloudwatch():
    """Fixture providing a mock CloudWatch client."""
    client = Mock()
    client.put_metric_data = Mock(return_value={})
    return client
