"""
Services for cached, retried design system generation.
"""

from .expiring_store import ExpiringStore
from .design_system_cache import DesignSystemCache
from .error_classifier import (
    create_error,
    format_user_message,
    from_error,
    get_retry_delay,
    is_service_failure,
    should_retry
)
from .circuit_breaker import CircuitBreaker, CircuitState
from .retry_orchestrator import RetryOrchestrator
from .generation_service import (
    CachedGenerationService,
    GenerationOutcome,
    build_generation_service
)

__all__ = [
    'ExpiringStore',
    'DesignSystemCache',
    'create_error',
    'format_user_message',
    'from_error',
    'get_retry_delay',
    'is_service_failure',
    'should_retry',
    'CircuitBreaker',
    'CircuitState',
    'RetryOrchestrator',
    'CachedGenerationService',
    'GenerationOutcome',
    'build_generation_service'
]
