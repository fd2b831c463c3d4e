"""
Generation result cache and retry orchestration for a design system generator.
"""

from generation_core.exceptions import (
    CircuitBreakerOpenError,
    ConfigurationError,
    GenerationCoreError
)
from generation_core.models import (
    CacheConfig,
    ComponentIdentity,
    DesignSystemRequest,
    GenerationError,
    RetryConfig
)
from generation_core.services import (
    CachedGenerationService,
    DesignSystemCache,
    GenerationOutcome,
    RetryOrchestrator,
    build_generation_service,
    create_error,
    format_user_message,
    from_error,
    get_retry_delay,
    should_retry
)
from generation_core.utils import ErrorKind

__version__ = '1.0.0'

__all__ = [
    'CircuitBreakerOpenError',
    'ConfigurationError',
    'GenerationCoreError',
    'CacheConfig',
    'ComponentIdentity',
    'DesignSystemRequest',
    'GenerationError',
    'RetryConfig',
    'CachedGenerationService',
    'DesignSystemCache',
    'GenerationOutcome',
    'RetryOrchestrator',
    'build_generation_service',
    'create_error',
    'format_user_message',
    'from_error',
    'get_retry_delay',
    'should_retry',
    'ErrorKind'
]
