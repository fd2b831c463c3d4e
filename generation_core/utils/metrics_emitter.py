"""
CloudWatch metrics emitter for generation caching and retries.

This module provides utilities for emitting CloudWatch metrics for cache
effectiveness (hit rate, size, evictions) and for retry behaviour
(scheduled retries, final failures by error kind).
"""

import logging
import time
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class MetricsEmitter:
    """
    Emits CloudWatch metrics for generation operations.

    Metrics are buffered and published in batches; publishing failures
    are logged and never propagate into the operation being measured.
    """

    def __init__(
        self,
        namespace: str = 'DesignSystemGenerator/Core',
        cloudwatch_client=None,
        region_name: Optional[str] = None,
        buffer_size: int = 20,
        max_buffered: Optional[int] = None
    ):
        """
        Initialize metrics emitter.

        Args:
            namespace: CloudWatch namespace for metrics
            cloudwatch_client: Optional CloudWatch client for testing
            region_name: AWS region used when creating the client
            buffer_size: Number of datums that triggers a flush (default: 20)
            max_buffered: Most datums kept while publishing fails
                (default: 5 x buffer_size)
        """
        self.namespace = namespace
        self.cloudwatch = cloudwatch_client or boto3.client(
            'cloudwatch', region_name=region_name
        )
        self._metric_buffer: List[Dict[str, Any]] = []
        self._buffer_size = buffer_size
        self._max_buffered = max(max_buffered or buffer_size * 5, buffer_size)

    def emit_cache_stats(self, store: str, stats: Dict[str, Any]) -> None:
        """
        Emit effectiveness metrics for one cache store.

        Args:
            store: Store name ('design_systems' or 'components')
            stats: Per-store statistics from DesignSystemCache.get_stats()
        """
        dimensions = [{'Name': 'Store', 'Value': store}]

        self._add_metric('CacheHitRate', stats['hit_rate'] * 100, 'Percent', dimensions)
        self._add_metric('CacheSize', stats['total'], 'Count', dimensions)
        self._add_metric('CacheEvictions', stats['evictions'], 'Count', dimensions)

    def emit_retry_scheduled(self, error_kind: str, attempt: int, delay_ms: int) -> None:
        """
        Emit metrics for a scheduled retry.

        Args:
            error_kind: Kind of the failure that triggered the retry
            attempt: Retry attempt number (1-based)
            delay_ms: Backoff delay before the retry
        """
        dimensions = [{'Name': 'ErrorKind', 'Value': error_kind}]

        self._add_metric('RetryScheduled', 1, 'Count', dimensions)
        self._add_metric('RetryBackoff', delay_ms, 'Milliseconds', dimensions)

    def emit_operation_failed(self, error_kind: str, attempts: int) -> None:
        """
        Emit metric for an operation that failed terminally.

        Args:
            error_kind: Kind of the final failure
            attempts: Total attempts made
        """
        self._add_metric(
            'GenerationFailures',
            1,
            'Count',
            [{'Name': 'ErrorKind', 'Value': error_kind}]
        )
        self._add_metric('AttemptsBeforeFailure', attempts, 'Count', [])

    def _add_metric(
        self,
        metric_name: str,
        value: float,
        unit: str,
        dimensions: List[Dict]
    ) -> None:
        """
        Add metric to buffer and flush if needed.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit
            dimensions: Metric dimensions
        """
        self._metric_buffer.append({
            'MetricName': metric_name,
            'Value': value,
            'Unit': unit,
            'Dimensions': dimensions,
            'Timestamp': time.time()
        })

        if len(self._metric_buffer) >= self._buffer_size:
            self.flush()

    def flush(self) -> None:
        """
        Flush buffered metrics to CloudWatch.

        Datums are published in batches of at most buffer_size. When a
        batch fails the unsent datums stay buffered for the next flush,
        keeping only the newest max_buffered of them.
        """
        while self._metric_buffer:
            batch = self._metric_buffer[:self._buffer_size]
            try:
                self.cloudwatch.put_metric_data(
                    Namespace=self.namespace,
                    MetricData=batch
                )
            except (ClientError, BotoCoreError) as e:
                dropped = max(0, len(self._metric_buffer) - self._max_buffered)
                if dropped:
                    self._metric_buffer = self._metric_buffer[dropped:]

                # Log error but don't fail the operation
                logger.warning(
                    f"Failed to emit metrics: {e}",
                    extra={
                        'namespace': self.namespace,
                        'buffered': len(self._metric_buffer),
                        'dropped': dropped
                    }
                )
                return

            del self._metric_buffer[:len(batch)]
