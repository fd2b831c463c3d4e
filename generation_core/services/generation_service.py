"""
Cache-first generation service.

CachedGenerationService wires the result cache and the retry orchestrator
around a caller-supplied generator: a cached result is returned without
calling the generator; otherwise the generator runs under retry and its
result is written back to the cache.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from generation_core.config import Settings
from generation_core.models import ComponentIdentity
from generation_core.services.circuit_breaker import CircuitBreaker
from generation_core.services.design_system_cache import DesignSystemCache
from generation_core.services.error_classifier import is_service_failure
from generation_core.services.retry_orchestrator import OnRetry, RetryOrchestrator
from generation_core.utils.key_canonicalizer import component_key
from generation_core.utils.metrics_emitter import MetricsEmitter
from generation_core.utils.structured_logger import configure_structured_logging

logger = logging.getLogger(__name__)

Generator = Callable[[], Awaitable[Any]]


@dataclass
class GenerationOutcome:
    """
    Result of a cache-first generation.

    Attributes:
        data: Generated or cached artifact
        cache_key: Key the artifact is cached under (None if the request could not be keyed)
        from_cache: True if the generator was not called
    """

    data: Any
    cache_key: Optional[str]
    from_cache: bool


class CachedGenerationService:
    """
    Cache-first wrapper around design system and component generation.
    """

    def __init__(
        self,
        cache: Optional[DesignSystemCache] = None,
        orchestrator: Optional[RetryOrchestrator] = None,
        metrics: Optional[MetricsEmitter] = None
    ):
        """
        Initialize generation service.

        Args:
            cache: Result cache (default: DesignSystemCache())
            orchestrator: Retry orchestrator (default: RetryOrchestrator())
            metrics: Optional metrics emitter flushed on close()
        """
        self.cache = cache or DesignSystemCache(metrics=metrics)
        self.orchestrator = orchestrator or RetryOrchestrator(metrics=metrics)
        self.metrics = metrics

    async def generate_design_system(
        self,
        request: Any,
        generator: Generator,
        operation_id: Optional[str] = None,
        on_retry: Optional[OnRetry] = None,
        ttl_seconds: Optional[float] = None
    ) -> GenerationOutcome:
        """
        Return a design system for the request, generating it on cache miss.

        Args:
            request: DesignSystemRequest or mapping
            generator: Zero-argument async callable producing the design system
            operation_id: Retry tracking id (default: generated)
            on_retry: Retry progress callback, see RetryOrchestrator
            ttl_seconds: Cache TTL for the generated result

        Returns:
            GenerationOutcome

        Raises:
            GenerationError: If generation fails after retries
        """
        cached = self.cache.get_design_system(request)
        if cached is not None:
            return GenerationOutcome(cached, self.cache.request_hash(request), True)

        operation_id = operation_id or f"design_system_{uuid.uuid4().hex}"
        design_system = await self.orchestrator.execute_with_retry(
            generator, operation_id, on_retry
        )

        cache_key = self.cache.cache_design_system(request, design_system, ttl_seconds)

        logger.info(
            "Generated design system",
            extra={'operation_id': operation_id, 'cache_key': cache_key}
        )
        return GenerationOutcome(design_system, cache_key, False)

    async def generate_component(
        self,
        identity: ComponentIdentity,
        generator: Generator,
        operation_id: Optional[str] = None,
        on_retry: Optional[OnRetry] = None,
        ttl_seconds: Optional[float] = None
    ) -> GenerationOutcome:
        """
        Return a component for the identity, generating it on cache miss.

        Raises:
            GenerationError: If generation fails after retries
        """
        cached = self.cache.get_component(
            identity.name, identity.design_system_hash, identity.variant, identity.size
        )
        if cached is not None:
            key = component_key(
                identity.name, identity.design_system_hash, identity.variant, identity.size
            )
            return GenerationOutcome(cached, key, True)

        operation_id = operation_id or f"component_{uuid.uuid4().hex}"
        component = await self.orchestrator.execute_with_retry(
            generator, operation_id, on_retry
        )

        cache_key = self.cache.cache_component(
            identity.name,
            identity.design_system_hash,
            component,
            identity.variant,
            identity.size,
            ttl_seconds
        )
        return GenerationOutcome(component, cache_key, False)

    def close(self) -> None:
        """Publish final cache metrics and flush buffered metrics."""
        if self.metrics is None:
            return

        self.cache.emit_metrics()
        self.metrics.flush()


def build_generation_service(
    settings: Optional[Settings] = None,
    cloudwatch_client=None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    configure_logging: bool = False
) -> CachedGenerationService:
    """
    Build a generation service from settings.

    Args:
        settings: Settings (default: loaded from environment)
        cloudwatch_client: Optional CloudWatch client for testing
        sleep: Backoff sleep passed to the orchestrator
        configure_logging: Whether to install the structured log handler

    Returns:
        Configured CachedGenerationService
    """
    settings = settings or Settings()

    if configure_logging:
        configure_structured_logging(settings.log_level, settings.log_format == 'json')

    metrics = None
    if settings.metrics_enabled:
        metrics = MetricsEmitter(
            namespace=settings.metrics_namespace,
            cloudwatch_client=cloudwatch_client,
            region_name=settings.aws_region
        )

    breaker = None
    if settings.circuit_breaker_enabled:
        breaker = CircuitBreaker(
            'generation',
            failure_threshold=settings.circuit_breaker_failure_threshold,
            timeout=settings.circuit_breaker_timeout_seconds,
            is_failure=is_service_failure
        )

    cache = DesignSystemCache(settings.cache_config(), metrics=metrics)
    orchestrator = RetryOrchestrator(
        settings.retry_config(),
        sleep=sleep,
        metrics=metrics,
        circuit_breaker=breaker
    )

    logger.info(
        "Built generation service",
        extra={
            'metrics_enabled': settings.metrics_enabled,
            'circuit_breaker_enabled': settings.circuit_breaker_enabled
        }
    )
    return CachedGenerationService(cache, orchestrator, metrics)
